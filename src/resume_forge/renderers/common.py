"""Target-independent view of an IR, shared by every renderer.

Each section kind is flattened into either *entries* (heading rows with
bullets) or *rows* (label/value lines), so any template can lay out any
kind. Values here are raw text; escaping belongs to the renderer.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Callable

from resume_forge.errors import UnknownSectionKind
from resume_forge.models.ir import (
    AdditionalSection,
    EducationSection,
    ExperienceSection,
    Personal,
    ProjectsSection,
    ResumeIR,
    SkillsSection,
)

SECTION_TITLES: dict[str, str] = {
    "education": "Education",
    "experience": "Experience",
    "projects": "Projects",
    "skills": "Skills",
    "additional": "Additional Information",
}


@dataclass
class Entry:
    id: str
    heading: str
    heading_meta: str = ""
    subheading: str = ""
    subheading_meta: str = ""
    link: str = ""
    bullets: list[tuple[str, str]] = field(default_factory=list)  # (bullet id, text)


@dataclass
class Row:
    label: str
    value: str


@dataclass
class SectionView:
    kind: str
    title: str
    id: str = ""
    entries: list[Entry] = field(default_factory=list)
    rows: list[Row] = field(default_factory=list)

    @property
    def empty(self) -> bool:
        return not self.entries and not self.rows


@dataclass
class ContactPart:
    text: str
    url: str = ""


def date_range(start: str | None, end: str | None, separator: str) -> str:
    """Join start/end with the separator; a lone value renders alone, none renders empty."""
    s = (start or "").strip()
    e = (end or "").strip()
    if s and e:
        return f"{s} {separator} {e}"
    return s or e


def _join(parts: list[str], separator: str = ", ") -> str:
    return separator.join(p for p in parts if p)


def _education(section: EducationSection, sep: str) -> SectionView:
    return SectionView(
        kind=section.kind,
        title=SECTION_TITLES[section.kind],
        id=section.id,
        entries=[
            Entry(
                id=item.id,
                heading=item.school,
                heading_meta=item.location or "",
                subheading=_join([item.degree, f"GPA: {item.gpa}" if item.gpa else ""], "  ·  "),
                subheading_meta=date_range(item.start, item.end, sep),
                bullets=[(b.id, b.text) for b in item.bullets],
            )
            for item in section.items
        ],
    )


def _experience(section: ExperienceSection, sep: str) -> SectionView:
    return SectionView(
        kind=section.kind,
        title=SECTION_TITLES[section.kind],
        id=section.id,
        entries=[
            Entry(
                id=item.id,
                heading=item.company,
                heading_meta=item.location or "",
                subheading=item.title,
                subheading_meta=date_range(item.start, item.end, sep),
                bullets=[(b.id, b.text) for b in item.bullets],
            )
            for item in section.items
        ],
    )


def _projects(section: ProjectsSection, sep: str) -> SectionView:
    return SectionView(
        kind=section.kind,
        title=SECTION_TITLES[section.kind],
        id=section.id,
        entries=[
            Entry(
                id=item.id,
                heading=f"{item.name} ({item.role})" if item.role else item.name,
                heading_meta=date_range(item.start, item.end, sep),
                subheading=_join(item.tech),
                link=item.link or "",
                bullets=[(b.id, b.text) for b in item.bullets],
            )
            for item in section.items
        ],
    )


def _skills(section: SkillsSection, sep: str) -> SectionView:
    rows = []
    if section.tech:
        rows.append(Row("Technical", _join(section.tech)))
    if section.other:
        rows.append(Row("Other", _join(section.other)))
    return SectionView(kind=section.kind, title=SECTION_TITLES[section.kind], id=section.id, rows=rows)


def _additional(section: AdditionalSection, sep: str) -> SectionView:
    return SectionView(
        kind=section.kind,
        title=SECTION_TITLES[section.kind],
        id=section.id,
        rows=[Row(item.label, _join(item.values)) for item in section.items if item.values],
    )


_BUILDERS: dict[str, Callable[..., SectionView]] = {
    "education": _education,
    "experience": _experience,
    "projects": _projects,
    "skills": _skills,
    "additional": _additional,
}


def section_view(section, separator: str) -> SectionView:
    """Build the view for one section.

    Raises:
        UnknownSectionKind: for a kind outside the closed IR set.
    """
    kind = getattr(section, "kind", None)
    builder = _BUILDERS.get(kind)
    if builder is None:
        raise UnknownSectionKind(f"Unknown section kind: {kind!r}")
    return builder(section, separator)


def build_section_views(
    ir: ResumeIR,
    *,
    separator: str,
    required: list[str] | tuple[str, ...] = (),
) -> list[SectionView]:
    """Views in IR order, followed by empty placeholders for required kinds the IR lacks."""
    views = [section_view(s, separator) for s in ir.sections]
    present = {v.kind for v in views}
    for kind in required:
        if kind not in present:
            if kind not in _BUILDERS:
                raise UnknownSectionKind(f"Unknown section kind: {kind!r}")
            views.append(SectionView(kind=kind, title=SECTION_TITLES[kind]))
    return views


_DISPLAY_PREFIX = re.compile(r"^https?://(www\.)?", re.IGNORECASE)


def contact_parts(personal: Personal) -> list[ContactPart]:
    """Email, phone, location, citizenship and links, in header order."""
    parts: list[ContactPart] = []
    if personal.email:
        parts.append(ContactPart(personal.email, f"mailto:{personal.email}"))
    for value in (personal.phone, personal.location, personal.citizenship):
        if value:
            parts.append(ContactPart(value))
    for link in personal.links:
        display = _DISPLAY_PREFIX.sub("", link.url).rstrip("/")
        parts.append(ContactPart(display or link.label, link.url))
    return parts
