"""Renderers from the resume IR to target markup."""

from resume_forge.renderers.escaping import LatexMarkup, escape_latex, escape_latex_url
from resume_forge.renderers.html import render_html, render_html_document
from resume_forge.renderers.latex import LatexRenderer, render_latex

__all__ = [
    "LatexMarkup",
    "LatexRenderer",
    "escape_latex",
    "escape_latex_url",
    "render_html",
    "render_html_document",
    "render_latex",
]
