"""Flat resume content: the shape the extraction model returns."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


class ContentModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    @model_validator(mode="before")
    @classmethod
    def drop_nulls(cls, data):
        # Models emit null for fields they could not find; let defaults apply
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None}
        return data


def _drop_blank(values: list[str] | None) -> list[str] | None:
    if values is None:
        return None
    return [v for v in values if isinstance(v, str) and v.strip()]


class PersonalInfo(ContentModel):
    first_name: str = ""
    last_name: str = ""
    name: str | None = None
    email: str = ""
    phone: str | None = None
    location: str | None = None
    linkedin: str | None = None
    github: str | None = None
    portfolio: str | None = None
    citizenship: str | None = None


class ExperienceEntry(ContentModel):
    company: str = ""
    title: str = ""
    location: str | None = None
    date: str = ""
    details: list[str] = Field(default_factory=list)

    @field_validator("details", mode="before")
    @classmethod
    def clean_details(cls, v):
        return _drop_blank(v) or []


class EducationEntry(ContentModel):
    name: str = ""
    degree: str = ""
    field: str | None = None
    location: str | None = None
    start_date: str | None = None
    end_date: str = ""
    details: list[str] = Field(default_factory=list)

    @field_validator("details", mode="before")
    @classmethod
    def clean_details(cls, v):
        return _drop_blank(v) or []


class ProjectEntry(ContentModel):
    name: str = ""
    description: str = ""
    date: str | None = None
    technologies: list[str] | None = None
    details: list[str] | None = None

    @field_validator("details", mode="before")
    @classmethod
    def clean_details(cls, v):
        return _drop_blank(v)


class Skills(ContentModel):
    technical: list[str] = Field(default_factory=list)
    additional: list[str] | None = None

    @field_validator("technical", mode="before")
    @classmethod
    def clean_technical(cls, v):
        return _drop_blank(v) or []


class LanguageEntry(ContentModel):
    language: str
    proficiency: str = ""


class AdditionalInfo(ContentModel):
    languages: list[LanguageEntry] | None = None
    interests: list[str] | None = None
    hobbies: list[str] | None = None
    references: list[str] | None = None

    @field_validator("references", mode="before")
    @classmethod
    def single_reference(cls, v):
        # Some extractions return references as one sentence
        if isinstance(v, str):
            return [v] if v.strip() else None
        return v


class Certification(ContentModel):
    name: str
    issuer: str = ""
    date_obtained: str | None = None


class VolunteerEntry(ContentModel):
    organization: str
    role: str = ""
    start_date: str | None = None
    end_date: str | None = None
    description: str = ""


class ResumeContent(ContentModel):
    personal_info: PersonalInfo = Field(default_factory=PersonalInfo)
    experience: list[ExperienceEntry] = Field(default_factory=list)
    education: list[EducationEntry] = Field(default_factory=list)
    projects: list[ProjectEntry] | None = None
    skills: Skills = Field(default_factory=Skills)
    additional_info: AdditionalInfo | None = None
    certifications: list[Certification] | None = None
    volunteer_work: list[VolunteerEntry] | None = None

    def to_wire(self) -> dict:
        """Serialize with the camelCase field names callers expect."""
        return self.model_dump(by_alias=True, mode="json")


def normalize_extracted_content(raw: dict, fallback_email: str | None = None) -> ResumeContent:
    """Fill the gaps an extraction model commonly leaves and validate the result.

    Missing lists become empty, blank bullets are dropped, the fallback email
    fills an empty address and a combined ``name`` is split into first/last.
    """
    data = dict(raw or {})
    personal = dict(data.get("personalInfo") or {})
    if not personal.get("email") and fallback_email:
        personal["email"] = fallback_email
    if not personal.get("firstName") and not personal.get("lastName") and personal.get("name"):
        first, _, last = str(personal["name"]).strip().partition(" ")
        personal["firstName"] = first
        personal["lastName"] = last.strip()
    data["personalInfo"] = personal

    for key in ("experience", "education"):
        if not isinstance(data.get(key), list):
            data[key] = []
    if not data.get("projects"):
        data["projects"] = None
    skills = data.get("skills")
    if not isinstance(skills, dict):
        data["skills"] = {"technical": [], "additional": None}
    elif not isinstance(skills.get("technical"), list):
        data["skills"] = {**skills, "technical": []}

    return ResumeContent.model_validate(data)
