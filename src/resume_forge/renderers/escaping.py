"""Target-specific escaping for user-supplied text."""

from __future__ import annotations

import re
from urllib.parse import quote

_LATEX_SPECIALS: dict[str, str] = {
    "\\": r"\textbackslash{}",
    "&": r"\&",
    "%": r"\%",
    "$": r"\$",
    "#": r"\#",
    "_": r"\_",
    "{": r"\{",
    "}": r"\}",
    "~": r"\textasciitilde{}",
    "^": r"\textasciicircum{}",
    "<": r"\textless{}",
    ">": r"\textgreater{}",
    "|": r"\textbar{}",
}
_LATEX_PATTERN = re.compile("|".join(re.escape(c) for c in _LATEX_SPECIALS))
_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")
_LINE_BREAKS = re.compile(r"\s*[\r\n]+\s*")

# Characters left as-is when percent-encoding a URL for \href
_URL_SAFE = ":/?&=#%@+.,;-_!$'()*[]"
_URL_SPECIALS = {"%": r"\%", "#": r"\#"}
_URL_PATTERN = re.compile("|".join(re.escape(c) for c in _URL_SPECIALS))


class LatexMarkup(str):
    """A string that is already valid LaTeX and must not be escaped again."""


def escape_latex(value: object) -> LatexMarkup:
    """Escape text for interpolation into a LaTeX document.

    Single pass, so the replacement of a backslash is never re-escaped.
    Line breaks collapse to a space; control characters are dropped.
    """
    if isinstance(value, LatexMarkup):
        return value
    if value is None:
        return LatexMarkup("")
    text = _CONTROL_CHARS.sub("", _LINE_BREAKS.sub(" ", str(value)))
    return LatexMarkup(_LATEX_PATTERN.sub(lambda m: _LATEX_SPECIALS[m.group(0)], text))


def escape_latex_url(url: object) -> LatexMarkup:
    """Escape a URL for the first argument of \\href."""
    if not url:
        return LatexMarkup("")
    encoded = quote(str(url).strip(), safe=_URL_SAFE)
    # quote() never encodes "~", which is an active character inside macro arguments
    encoded = encoded.replace("~", "%7E")
    return LatexMarkup(_URL_PATTERN.sub(lambda m: _URL_SPECIALS[m.group(0)], encoded))
