"""Versioned adapter from flat resume content to the document IR.

The IR is the only shape renderers consume; flat content is what the
extraction model produces and what callers get back. Ids are derived from
positions, so converting the same content twice yields identical IR.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone

from resume_forge.models.content import ResumeContent
from resume_forge.models.ir import (
    AdditionalItem,
    AdditionalSection,
    Bullet,
    EducationItem,
    EducationSection,
    ExperienceItem,
    ExperienceSection,
    Link,
    Meta,
    Personal,
    ProjectItem,
    ProjectsSection,
    ResumeIR,
    SkillsSection,
)

ADAPTER_VERSION = 1

_RANGE_SEPARATOR = re.compile(r"\s+(?:-|–|—|to)\s+|\s*[–—]\s*")
_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def split_date_range(value: str | None) -> tuple[str | None, str | None]:
    """Split 'Jan 2020 - Present' into ('Jan 2020', 'Present')."""
    if not value or not value.strip():
        return None, None
    parts = _RANGE_SEPARATOR.split(value.strip(), maxsplit=1)
    if len(parts) == 1:
        return parts[0], None
    start, end = (p.strip() or None for p in parts)
    return start, end


def _with_scheme(url: str) -> str:
    url = url.strip()
    return url if url.lower().startswith(("http://", "https://")) else f"https://{url}"


def _bullets(prefix: str, texts: list[str] | None) -> list[Bullet]:
    return [Bullet(id=f"{prefix}-b{n}", text=t.strip()) for n, t in enumerate(texts or [])]


def content_to_ir(content: ResumeContent, template_id: str = "jake") -> ResumeIR:
    """Convert extracted content into the IR, in Jake section order."""
    info = content.personal_info
    links = [
        Link(label=label, url=_with_scheme(url))
        for label, url in (
            ("LinkedIn", info.linkedin),
            ("GitHub", info.github),
            ("Portfolio", info.portfolio),
        )
        if url and url.strip()
    ]
    personal = Personal(
        first_name=info.first_name,
        last_name=info.last_name,
        email=info.email,
        phone=info.phone,
        location=info.location,
        citizenship=info.citizenship,
        links=links,
    )

    education = EducationSection(
        id="education",
        items=[
            EducationItem(
                id=f"edu-{n}",
                school=edu.name,
                degree=f"{edu.degree} in {edu.field}" if edu.field else edu.degree,
                location=edu.location,
                start=edu.start_date,
                end=edu.end_date or None,
                bullets=_bullets(f"edu-{n}", edu.details),
            )
            for n, edu in enumerate(content.education)
        ],
    )

    experience_items = []
    for n, exp in enumerate(content.experience):
        start, end = split_date_range(exp.date)
        experience_items.append(
            ExperienceItem(
                id=f"exp-{n}",
                company=exp.company,
                title=exp.title,
                location=exp.location,
                start=start,
                end=end,
                bullets=_bullets(f"exp-{n}", exp.details),
            )
        )
    experience = ExperienceSection(id="experience", items=experience_items)

    project_items = []
    for n, proj in enumerate(content.projects or []):
        start, end = split_date_range(proj.date)
        texts = [proj.description, *(proj.details or [])]
        project_items.append(
            ProjectItem(
                id=f"proj-{n}",
                name=proj.name,
                start=start,
                end=end,
                tech=list(proj.technologies or []),
                bullets=_bullets(f"proj-{n}", [t for t in texts if t and t.strip()]),
            )
        )
    projects = ProjectsSection(id="projects", items=project_items)

    skills = SkillsSection(
        id="skills",
        tech=list(content.skills.technical),
        other=list(content.skills.additional) if content.skills.additional else None,
    )

    additional = AdditionalSection(id="additional", items=_additional_items(content))

    return ResumeIR(
        personal=personal,
        sections=[education, experience, projects, skills, additional],
        meta=Meta(template=template_id, last_edited=_EPOCH),
    )


def _additional_items(content: ResumeContent) -> list[AdditionalItem]:
    items: list[AdditionalItem] = []
    extra = content.additional_info
    if extra is not None:
        if extra.languages:
            items.append(
                AdditionalItem(
                    label="Languages",
                    values=[
                        f"{lang.language} ({lang.proficiency})" if lang.proficiency else lang.language
                        for lang in extra.languages
                    ],
                )
            )
        for label, values in (
            ("Interests", extra.interests),
            ("Hobbies", extra.hobbies),
            ("References", extra.references),
        ):
            if values:
                items.append(AdditionalItem(label=label, values=list(values)))
    if content.certifications:
        items.append(
            AdditionalItem(
                label="Certifications",
                values=[f"{c.name} ({c.issuer})" if c.issuer else c.name for c in content.certifications],
            )
        )
    if content.volunteer_work:
        items.append(
            AdditionalItem(
                label="Volunteer",
                values=[f"{v.role}, {v.organization}" if v.role else v.organization for v in content.volunteer_work],
            )
        )
    return items
