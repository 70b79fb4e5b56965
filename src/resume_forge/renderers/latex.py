"""LaTeX renderer: IR x template id -> LaTeX source.

Templates live in ``renderers/latex_templates/<id>.tex.jinja``. They all extend
``base.tex.jinja``, which lays out the document body; a template only
supplies its preamble, i.e. how the shared macros look.
"""

from __future__ import annotations

import logging
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from resume_forge.models.ir import ResumeIR
from resume_forge.renderers.common import build_section_views, contact_parts
from resume_forge.renderers.escaping import escape_latex, escape_latex_url
from resume_forge.templates.loader import TemplateCatalog, default_catalog

logger = logging.getLogger(__name__)

LATEX_TEMPLATES_DIR = Path(__file__).parent / "latex_templates"
DATE_SEPARATOR = "--"


def _create_environment(templates_dir: Path) -> Environment:
    env = Environment(
        loader=FileSystemLoader(str(templates_dir)),
        # Custom delimiters to avoid clashes with LaTeX braces and comments
        variable_start_string="<<<",
        variable_end_string=">>>",
        block_start_string="<%%",
        block_end_string="%%>",
        comment_start_string="<#",
        comment_end_string="#>",
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
        undefined=StrictUndefined,
        # Every interpolated value is escaped unless it is already LatexMarkup
        finalize=escape_latex,
    )
    env.filters["url"] = escape_latex_url
    return env


class LatexRenderer:
    """Renders an IR with one of the catalog's LaTeX templates."""

    def __init__(
        self,
        catalog: TemplateCatalog | None = None,
        templates_dir: Path = LATEX_TEMPLATES_DIR,
    ):
        self.catalog = catalog or default_catalog()
        self.env = _create_environment(templates_dir)

    def render(self, ir: ResumeIR, template_id: str) -> str:
        """Render the IR to a complete LaTeX document.

        Raises:
            UnknownTemplateError: if the template id is not in the catalog.
            UnknownSectionKind: if the IR carries a kind outside the closed set.
        """
        template = self.catalog.resolve(template_id)
        views = build_section_views(
            ir, separator=DATE_SEPARATOR, required=template.required_sections
        )
        logger.debug("Rendering LaTeX: template=%s sections=%d", template.id, len(views))
        return self.env.get_template(f"{template.id}.tex.jinja").render(
            name=ir.personal.full_name,
            contact=contact_parts(ir.personal),
            sections=views,
        )


_default_renderer: LatexRenderer | None = None


def render_latex(ir: ResumeIR, template_id: str) -> str:
    """Render with a shared renderer over the default catalog."""
    global _default_renderer
    if _default_renderer is None:
        _default_renderer = LatexRenderer()
    return _default_renderer.render(ir, template_id)
