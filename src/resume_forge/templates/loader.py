from __future__ import annotations

from functools import lru_cache
from pathlib import Path

import yaml
from pydantic import BaseModel, field_validator

from resume_forge.errors import UnknownTemplateError
from resume_forge.models.ir import SECTION_KINDS

CATALOG_PATH = Path(__file__).parent / "catalog.yaml"


class ResumeTemplate(BaseModel):
    id: str
    name: str
    description: str = ""
    tags: list[str] = []
    free: bool = False
    required_sections: list[str] = []

    @field_validator("required_sections")
    @classmethod
    def known_kinds(cls, v: list[str]) -> list[str]:
        unknown = [k for k in v if k not in SECTION_KINDS]
        if unknown:
            raise ValueError(f"Unknown section kinds: {unknown}")
        return v


class TemplateCatalog(BaseModel):
    templates: list[ResumeTemplate]
    aliases: dict[str, str] = {}

    def resolve(self, template_id: str) -> ResumeTemplate:
        """Look up a template by id or legacy alias."""
        resolved = self.aliases.get(template_id, template_id)
        for t in self.templates:
            if t.id == resolved:
                return t
        raise UnknownTemplateError(template_id)

    def is_valid(self, template_id: str) -> bool:
        return any(t.id == self.aliases.get(template_id, template_id) for t in self.templates)

    def free_templates(self) -> list[ResumeTemplate]:
        return [t for t in self.templates if t.free]

    def ids(self) -> list[str]:
        return [t.id for t in self.templates]


def load_catalog(path: str | Path = CATALOG_PATH) -> TemplateCatalog:
    """Load the template catalog from YAML."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Template catalog not found: {path}")
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f)
    return TemplateCatalog(**data)


@lru_cache(maxsize=1)
def default_catalog() -> TemplateCatalog:
    return load_catalog()


def get_template(template_id: str) -> ResumeTemplate:
    return default_catalog().resolve(template_id)


def list_templates() -> list[str]:
    """List available template ids."""
    return default_catalog().ids()
