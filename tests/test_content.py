"""Tests for flat resume content normalization."""

from __future__ import annotations

from resume_forge.models.content import ResumeContent, normalize_extracted_content


class TestNormalizeExtractedContent:
    def test_missing_personal_info_uses_fallback_email(self):
        content = normalize_extracted_content({}, fallback_email="me@example.com")
        assert content.personal_info.email == "me@example.com"
        assert content.experience == []
        assert content.education == []
        assert content.projects is None
        assert content.skills.technical == []
        assert content.skills.additional is None

    def test_empty_email_replaced(self):
        content = normalize_extracted_content(
            {"personalInfo": {"firstName": "A", "lastName": "B", "email": ""}},
            fallback_email="fallback@example.com",
        )
        assert content.personal_info.email == "fallback@example.com"

    def test_extracted_email_kept(self, sample_extraction_json):
        content = normalize_extracted_content(sample_extraction_json, fallback_email="other@example.com")
        assert content.personal_info.email == "jordan@example.com"

    def test_blank_bullets_dropped(self, sample_content):
        assert sample_content.experience[0].details == [
            "Built the billing pipeline in Python and Go",
            "Cut p99 latency by 40% with Redis caching",
        ]

    def test_blank_project_bullets_dropped(self):
        content = normalize_extracted_content(
            {"projects": [{"name": "P", "description": "d", "details": ["", "real", " "]}]}
        )
        assert content.projects[0].details == ["real"]

    def test_name_split_into_first_and_last(self):
        content = normalize_extracted_content({"personalInfo": {"name": "Mary Ann Smith"}})
        assert content.personal_info.first_name == "Mary"
        assert content.personal_info.last_name == "Ann Smith"

    def test_null_fields_fall_back_to_defaults(self):
        content = normalize_extracted_content(
            {"experience": [{"company": "Acme", "title": None, "date": None, "details": None}]}
        )
        exp = content.experience[0]
        assert exp.title == ""
        assert exp.date == ""
        assert exp.details == []

    def test_skills_without_technical_list(self):
        content = normalize_extracted_content({"skills": {"technical": "Python", "additional": ["Teamwork"]}})
        assert content.skills.technical == []
        assert content.skills.additional == ["Teamwork"]

    def test_single_reference_string(self):
        content = normalize_extracted_content({"additionalInfo": {"references": "Available on request"}})
        assert content.additional_info.references == ["Available on request"]

    def test_wire_format_is_camel_case(self, sample_content):
        wire = sample_content.to_wire()
        assert wire["personalInfo"]["firstName"] == "Jordan"
        assert wire["education"][0]["endDate"] == "Jun 2020"
        assert ResumeContent.model_validate(wire).model_dump() == sample_content.model_dump()
