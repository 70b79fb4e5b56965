"""Tests for LaTeX and HTML escaping."""

from __future__ import annotations

import pytest

from resume_forge.renderers.escaping import LatexMarkup, escape_latex, escape_latex_url


class TestEscapeLatex:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("R&D", r"R\&D"),
            ("100%", r"100\%"),
            ("$5", r"\$5"),
            ("#1", r"\#1"),
            ("snake_case", r"snake\_case"),
            ("{x}", r"\{x\}"),
            ("a~b", r"a\textasciitilde{}b"),
            ("x^2", r"x\textasciicircum{}2"),
            ("C:\\dir", r"C:\textbackslash{}dir"),
            ("a < b > c", r"a \textless{} b \textgreater{} c"),
            ("a|b", r"a\textbar{}b"),
        ],
    )
    def test_specials(self, raw, expected):
        assert escape_latex(raw) == expected

    def test_backslash_escaped_once(self):
        # The braces of \textbackslash{} must not be escaped again
        assert escape_latex("\\{") == r"\textbackslash{}\{"

    def test_newlines_collapse(self):
        assert escape_latex("line one\n\n  line two") == "line one line two"

    def test_control_characters_dropped(self):
        assert escape_latex("a\x00b\x07c") == "abc"

    def test_markup_passes_through(self):
        markup = LatexMarkup(r"\textbf{bold}")
        assert escape_latex(markup) is markup

    def test_none_is_empty(self):
        assert escape_latex(None) == ""


class TestEscapeLatexUrl:
    def test_percent_and_hash_escaped(self):
        assert escape_latex_url("https://x.com/a%20b#frag") == r"https://x.com/a\%20b\#frag"

    def test_spaces_percent_encoded(self):
        assert escape_latex_url("https://x.com/my page") == r"https://x.com/my\%20page"

    def test_braces_encoded(self):
        assert escape_latex_url("https://x.com/{id}") == r"https://x.com/\%7Bid\%7D"

    def test_tilde_encoded(self):
        assert escape_latex_url("https://x.edu/~ada/cv") == r"https://x.edu/\%7Eada/cv"

    def test_empty(self):
        assert escape_latex_url("") == ""
