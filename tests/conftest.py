"""Shared test fixtures."""

from __future__ import annotations

import json
from unittest.mock import AsyncMock

import pytest

from resume_forge.clients.llm_client import LLMClient, LLMResponse
from resume_forge.config import AppConfig, RetryConfig, StoreConfig
from resume_forge.export.compiler import CompiledDocument
from resume_forge.models.adapter import content_to_ir
from resume_forge.models.content import ResumeContent, normalize_extracted_content
from resume_forge.models.ir import ResumeIR
from resume_forge.usage.limiter import UsageLimiter
from resume_forge.usage.store import LedgerStore

FAKE_PDF = b"%PDF-1.4\n% resume-forge test document\n%%EOF\n"


@pytest.fixture
def sample_resume_text() -> str:
    return """Jordan Lee
jordan@example.com | (555) 010-2233 | Seattle, WA
github.com/jordanlee

EXPERIENCE
Acme Corp, Seattle, WA - Software Engineer (Jan 2021 - Present)
- Built the billing pipeline in Python and Go
- Cut p99 latency by 40% with Redis caching

EDUCATION
University of Washington - B.S. Computer Science (Sep 2016 - Jun 2020)

SKILLS
Python, Go, PostgreSQL, Kubernetes
"""


@pytest.fixture
def sample_extraction_json() -> dict:
    """What the model returns for ``sample_resume_text``."""
    return {
        "personalInfo": {
            "firstName": "Jordan",
            "lastName": "Lee",
            "email": "jordan@example.com",
            "phone": "(555) 010-2233",
            "location": "Seattle, WA",
            "linkedin": None,
            "github": "github.com/jordanlee",
            "portfolio": None,
            "citizenship": None,
        },
        "experience": [
            {
                "company": "Acme Corp",
                "title": "Software Engineer",
                "location": "Seattle, WA",
                "date": "Jan 2021 - Present",
                "details": [
                    "Built the billing pipeline in Python and Go",
                    "Cut p99 latency by 40% with Redis caching",
                    "   ",
                ],
            }
        ],
        "education": [
            {
                "name": "University of Washington",
                "degree": "B.S.",
                "field": "Computer Science",
                "location": "Seattle, WA",
                "startDate": "Sep 2016",
                "endDate": "Jun 2020",
                "details": [],
            }
        ],
        "projects": None,
        "skills": {"technical": ["Python", "Go", "PostgreSQL", "Kubernetes"], "additional": None},
        "additionalInfo": None,
    }


@pytest.fixture
def sample_content(sample_extraction_json) -> ResumeContent:
    return normalize_extracted_content(sample_extraction_json)


@pytest.fixture
def sample_ir(sample_content) -> ResumeIR:
    return content_to_ir(sample_content)


@pytest.fixture
def app_config(tmp_path) -> AppConfig:
    """Production-mode config with zero retry delays and a temp ledger."""
    return AppConfig(
        retry=RetryConfig(retry_delay=0.0, fallback_delay=0.0),
        store=StoreConfig(db_path=str(tmp_path / "usage.db")),
    )


@pytest.fixture
def store(tmp_path) -> LedgerStore:
    return LedgerStore(tmp_path / "usage.db")


@pytest.fixture
def limiter(store, app_config) -> UsageLimiter:
    return UsageLimiter(store, app_config.limits)


@pytest.fixture
def mock_llm_client(sample_extraction_json) -> LLMClient:
    """LLM client whose every call returns the sample extraction as JSON."""
    client = AsyncMock(spec=LLMClient)
    client.generate = AsyncMock(
        return_value=LLMResponse(
            text=json.dumps(sample_extraction_json),
            model="claude-haiku-4-5-20251001",
            input_tokens=100,
            output_tokens=50,
        )
    )
    return client


@pytest.fixture
def fake_compiler():
    compiler = AsyncMock()

    async def _compile(latex: str, document_id: str) -> CompiledDocument:
        return CompiledDocument(pdf_bytes=FAKE_PDF, document_id=document_id)

    compiler.compile = AsyncMock(side_effect=_compile)
    return compiler
