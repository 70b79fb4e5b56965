"""Resume extraction: pasted text or a PDF -> structured resume content."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from pydantic import ValidationError as PydanticValidationError

from resume_forge.clients.fallback import ModelFallbackPolicy, transient_only
from resume_forge.clients.llm_client import (
    EXTRACTION_FAILED_MESSAGE,
    LLMClient,
    classify_api_error,
)
from resume_forge.config import AppConfig
from resume_forge.errors import ExtractionError, ValidationError
from resume_forge.models.content import ResumeContent, normalize_extracted_content
from resume_forge.utils.json_parser import extract_json
from resume_forge.utils.payload import decoded_size, strip_data_url

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """\
You are a resume parsing expert. Extract all information from the provided resume and output a valid JSON object that matches this exact structure. Return ONLY valid JSON, no markdown or extra text.

{
  "personalInfo": {
    "firstName": "string",
    "lastName": "string",
    "email": "string",
    "phone": "string or null",
    "location": "string or null",
    "linkedin": "string or null",
    "github": "string or null",
    "portfolio": "string or null",
    "citizenship": "string or null"
  },
  "experience": [
    {
      "company": "string",
      "title": "string",
      "location": "string or null",
      "date": "string (e.g. 'Jan 2020 - Present' or 'Jun 2018 - Dec 2019')",
      "details": ["bullet point 1", "bullet point 2"]
    }
  ],
  "education": [
    {
      "name": "school name",
      "degree": "e.g. Bachelor of Science",
      "field": "e.g. Computer Science or null",
      "location": "string or null",
      "startDate": "e.g. Aug 2016 or null",
      "endDate": "e.g. May 2020 or Present",
      "details": ["GPA: 3.8", "honors"] or []
    }
  ],
  "projects": [
    {
      "name": "project name",
      "description": "brief description",
      "date": "string or null",
      "technologies": ["tech1", "tech2"] or null,
      "details": ["additional bullet"] or null
    }
  ] or null,
  "skills": {
    "technical": ["skill1", "skill2"],
    "additional": ["soft skill 1"] or null
  } or null,
  "additionalInfo": {
    "languages": [{"language": "English", "proficiency": "Native"}] or null,
    "interests": ["interest1"] or null
  } or null
}

Rules:
- Extract everything you can find. Use empty strings or null for missing optional fields.
- personalInfo.firstName, lastName and email are required; infer them from the content.
- Use human-readable dates like "Jan 2020 - Present".
- All arrays use [] if empty, not null (except optional top-level keys like projects and skills).
- Put programming languages and tools in skills.technical, soft skills in skills.additional.
- Never include empty or whitespace-only items in any details array."""

TEXT_PROMPT = "Extract and format this resume:\n\n{text}"
PDF_PROMPT = (
    "Extract and format this resume from the attached PDF into the required "
    "JSON structure. Return ONLY valid JSON."
)


@dataclass
class ExtractionResult:
    content: ResumeContent
    model_used: str


class ResumeExtractor:
    """Turns resume text or a base64 PDF into ``ResumeContent``.

    Calls go through ``ModelFallbackPolicy``: transient provider failures
    are retried on the primary model, then tried once on the fallback.
    """

    def __init__(self, llm: LLMClient, config: AppConfig):
        self.llm = llm
        self.config = config
        self.policy = ModelFallbackPolicy.from_config(config.llm, config.retry, transient_only)

    async def extract(
        self,
        *,
        text: str | None = None,
        pdf_base64: str | None = None,
        fallback_email: str | None = None,
    ) -> ExtractionResult:
        """Extract structured content. A PDF takes precedence over text.

        Raises:
            ValidationError: no input, or a PDF over the size ceiling.
            ExtractionError: the provider failed or returned unusable output.
        """
        pdf = strip_data_url(pdf_base64) if pdf_base64 else ""
        text = (text or "").strip()
        if not pdf and not text:
            raise ValidationError("Please paste your resume text or upload a PDF")
        if pdf and decoded_size(pdf) > self.config.limits.max_pdf_bytes:
            raise ValidationError("PDF must be under 5MB")

        async def attempt(model: str) -> ResumeContent:
            try:
                response = await self.llm.generate(
                    PDF_PROMPT if pdf else TEXT_PROMPT.format(text=text),
                    model=model,
                    system=SYSTEM_PROMPT,
                    temperature=self.config.llm.temperature,
                    max_tokens=self.config.llm.max_tokens,
                    pdf_base64=pdf or None,
                )
            except Exception as exc:
                raise classify_api_error(exc, self.config.retry.transient_statuses) from exc
            return self._parse(response.text, fallback_email)

        content, model_used = await self.policy.run(attempt)
        logger.info(
            "Extracted resume with %s: %d experience, %d education entries",
            model_used,
            len(content.experience),
            len(content.education),
        )
        return ExtractionResult(content=content, model_used=model_used)

    @staticmethod
    def _parse(text: str, fallback_email: str | None) -> ResumeContent:
        if not text:
            raise ExtractionError(
                EXTRACTION_FAILED_MESSAGE, details="AI did not return valid content"
            )
        try:
            raw = extract_json(text)
        except ValueError as exc:
            raise ExtractionError(
                EXTRACTION_FAILED_MESSAGE, details="Failed to parse extracted resume data"
            ) from exc
        try:
            return normalize_extracted_content(raw, fallback_email)
        except PydanticValidationError as exc:
            raise ExtractionError(
                EXTRACTION_FAILED_MESSAGE, details=f"Extracted resume data is malformed: {exc}"
            ) from exc
