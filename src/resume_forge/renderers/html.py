"""HTML preview renderer.

Mirrors the LaTeX layout with plain markup so the browser can show a
preview before compiling. All five section kinds are always present;
kinds absent from the IR render as ``is-empty`` sections.
"""

from __future__ import annotations

import logging
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, StrictUndefined
from markupsafe import Markup

from resume_forge.models.ir import SECTION_KINDS, ResumeIR
from resume_forge.renderers.common import build_section_views, contact_parts

logger = logging.getLogger(__name__)

HTML_TEMPLATES_DIR = Path(__file__).parent / "html_templates"
CSS_THEMES_DIR = Path(__file__).parent / "css_themes"

AVAILABLE_THEMES = ("jake", "modern")
DATE_SEPARATOR = "–"


def _create_environment() -> Environment:
    return Environment(
        loader=FileSystemLoader(str(HTML_TEMPLATES_DIR)),
        autoescape=True,
        trim_blocks=True,
        lstrip_blocks=True,
        undefined=StrictUndefined,
    )


_env = _create_environment()


def render_html(ir: ResumeIR, theme: str = "jake") -> str:
    """Render the IR to an HTML ``<article>`` fragment."""
    if theme not in AVAILABLE_THEMES:
        logger.warning("Unknown preview theme %r, using jake", theme)
        theme = "jake"
    views = build_section_views(ir, separator=DATE_SEPARATOR, required=SECTION_KINDS)
    html = _env.get_template("resume.html.jinja").render(
        theme=theme,
        name=ir.personal.full_name,
        contact=contact_parts(ir.personal),
        sections=views,
    )
    return html.strip()


def render_html_document(ir: ResumeIR, theme: str = "jake", title: str = "Resume") -> str:
    """Render a standalone HTML page with the theme's CSS inlined."""
    if theme not in AVAILABLE_THEMES:
        theme = "jake"
    css_path = CSS_THEMES_DIR / f"{theme}.css"
    css = css_path.read_text(encoding="utf-8") if css_path.exists() else ""
    body = render_html(ir, theme)
    return _env.get_template("document.html.jinja").render(
        title=title, css=Markup(css), body=Markup(body)
    )
