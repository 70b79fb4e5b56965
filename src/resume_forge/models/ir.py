"""Document IR: the renderer-agnostic resume model, plus point-patch operations."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Annotated, Literal, Union
from urllib.parse import urlsplit

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from resume_forge.errors import PatchError

SECTION_KINDS: tuple[str, ...] = ("education", "experience", "projects", "skills", "additional")
PRESENT = "Present"
LINK_SCHEMES = ("http", "https", "mailto")


def _new_id() -> str:
    return uuid.uuid4().hex[:12]


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _check_link(url: str | None) -> str | None:
    """Reject links whose scheme a browser or PDF viewer would execute."""
    if url is None:
        return None
    scheme = urlsplit(url.strip()).scheme.lower()
    if scheme and scheme not in LINK_SCHEMES:
        raise ValueError(f"Unsupported link scheme: {scheme!r}")
    return url


class IRModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Link(IRModel):
    label: Literal["LinkedIn", "GitHub", "Portfolio"]
    url: str

    @field_validator("url")
    @classmethod
    def safe_scheme(cls, v: str) -> str:
        return _check_link(v)


class Personal(IRModel):
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    phone: str | None = None
    location: str | None = None
    citizenship: str | None = None
    links: list[Link] = Field(default_factory=list)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class Bullet(IRModel):
    id: str = Field(default_factory=_new_id)
    text: str
    impact: float | None = None
    tags: list[str] | None = None


class ExperienceItem(IRModel):
    id: str = Field(default_factory=_new_id)
    company: str
    title: str = ""
    location: str | None = None
    start: str | None = None
    end: str | None = None  # a date or PRESENT
    bullets: list[Bullet] = Field(default_factory=list)


class EducationItem(IRModel):
    id: str = Field(default_factory=_new_id)
    school: str
    degree: str = ""
    location: str | None = None
    start: str | None = None
    end: str | None = None
    gpa: str | None = None
    bullets: list[Bullet] = Field(default_factory=list)


class ProjectItem(IRModel):
    id: str = Field(default_factory=_new_id)
    name: str
    role: str | None = None
    link: str | None = None
    start: str | None = None
    end: str | None = None
    tech: list[str] = Field(default_factory=list)
    bullets: list[Bullet] = Field(default_factory=list)

    @field_validator("link")
    @classmethod
    def safe_scheme(cls, v: str | None) -> str | None:
        return _check_link(v)


class AdditionalItem(IRModel):
    label: str
    values: list[str] = Field(default_factory=list)


class EducationSection(IRModel):
    kind: Literal["education"] = "education"
    id: str = Field(default_factory=_new_id)
    items: list[EducationItem] = Field(default_factory=list)


class ExperienceSection(IRModel):
    kind: Literal["experience"] = "experience"
    id: str = Field(default_factory=_new_id)
    items: list[ExperienceItem] = Field(default_factory=list)


class ProjectsSection(IRModel):
    kind: Literal["projects"] = "projects"
    id: str = Field(default_factory=_new_id)
    items: list[ProjectItem] = Field(default_factory=list)


class SkillsSection(IRModel):
    kind: Literal["skills"] = "skills"
    id: str = Field(default_factory=_new_id)
    tech: list[str] = Field(default_factory=list)
    other: list[str] | None = None


class AdditionalSection(IRModel):
    kind: Literal["additional"] = "additional"
    id: str = Field(default_factory=_new_id)
    items: list[AdditionalItem] = Field(default_factory=list)


Section = Annotated[
    Union[EducationSection, ExperienceSection, ProjectsSection, SkillsSection, AdditionalSection],
    Field(discriminator="kind"),
]


class Meta(IRModel):
    template: str = "jake"
    last_edited: datetime = Field(default_factory=_now)


class ResumeIR(IRModel):
    personal: Personal
    sections: list[Section] = Field(default_factory=list)
    meta: Meta = Field(default_factory=Meta)

    def section(self, kind: str) -> Section | None:
        """First section of the given kind, or None."""
        return next((s for s in self.sections if s.kind == kind), None)


# --- Patch operations ---


class UpdateBulletOp(IRModel):
    op: Literal["update-bullet"] = "update-bullet"
    section_id: str
    item_id: str
    bullet_id: str
    text: str


class AddSkillOp(IRModel):
    op: Literal["add-skill"] = "add-skill"
    value: str


class ReorderSectionOp(IRModel):
    op: Literal["reorder-section"] = "reorder-section"
    from_index: int = Field(alias="from")
    to_index: int = Field(alias="to")


PatchOp = Annotated[
    Union[UpdateBulletOp, AddSkillOp, ReorderSectionOp],
    Field(discriminator="op"),
]


def apply_patch(ir: ResumeIR, op: PatchOp) -> ResumeIR:
    """Apply one patch and return a new IR; the input IR is left untouched.

    Raises:
        PatchError: when the patch addresses something that does not exist.
    """
    patched = ir.model_copy(deep=True)

    if isinstance(op, UpdateBulletOp):
        _find_bullet(patched, op).text = op.text
    elif isinstance(op, AddSkillOp):
        value = op.value.strip()
        if not value:
            raise PatchError("Cannot add an empty skill")
        skills = patched.section("skills")
        if skills is None:
            skills = SkillsSection()
            patched.sections.append(skills)
        if value.lower() not in {s.lower() for s in skills.tech}:
            skills.tech.append(value)
    elif isinstance(op, ReorderSectionOp):
        count = len(patched.sections)
        if not (0 <= op.from_index < count and 0 <= op.to_index < count):
            raise PatchError(
                f"Section index out of range: {op.from_index} -> {op.to_index} ({count} sections)"
            )
        moved = patched.sections.pop(op.from_index)
        patched.sections.insert(op.to_index, moved)
    else:
        raise PatchError(f"Unsupported patch operation: {op!r}")

    patched.meta.last_edited = _now()
    return patched


def _find_bullet(ir: ResumeIR, op: UpdateBulletOp) -> Bullet:
    section = next((s for s in ir.sections if s.id == op.section_id), None)
    if section is None:
        raise PatchError(f"Section not found: {op.section_id}")
    if section.kind not in ("education", "experience", "projects"):
        raise PatchError(f"Section {op.section_id} ({section.kind}) has no bullets")
    item = next((i for i in section.items if i.id == op.item_id), None)
    if item is None:
        raise PatchError(f"Item not found: {op.item_id}")
    bullet = next((b for b in item.bullets if b.id == op.bullet_id), None)
    if bullet is None:
        raise PatchError(f"Bullet not found: {op.bullet_id}")
    return bullet
