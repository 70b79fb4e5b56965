"""Tests for the HTTP surface."""

from __future__ import annotations

import base64
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from resume_forge.api import create_app
from resume_forge.config import AppConfig
from resume_forge.errors import CompilationError
from resume_forge.extraction.extractor import ResumeExtractor
from resume_forge.pipeline.orchestrator import GenerationOrchestrator
from resume_forge.pipeline.performance_summary import PerformanceSummarizer, SummaryResult

EMAIL = "jordan@example.com"


@pytest.fixture
def orchestrator(app_config, mock_llm_client, fake_compiler, limiter) -> GenerationOrchestrator:
    return GenerationOrchestrator(
        app_config,
        extractor=ResumeExtractor(mock_llm_client, app_config),
        compiler=fake_compiler,
        limiter=limiter,
    )


@pytest.fixture
def summarizer():
    summarizer = AsyncMock(spec=PerformanceSummarizer)
    summarizer.summarize = AsyncMock(
        return_value=SummaryResult(summary="Keep going.", model_used="claude-haiku-4-5-20251001")
    )
    return summarizer


@pytest.fixture
def client(app_config, orchestrator, summarizer) -> TestClient:
    return TestClient(create_app(app_config, orchestrator=orchestrator, summarizer=summarizer))


class TestGenerateEndpoint:
    def test_success(self, client, store, sample_resume_text):
        store.add_to_list(EMAIL, "free-resume")
        response = client.post(
            "/api/free-resume/generate",
            json={"resumeText": sample_resume_text, "email": EMAIL, "templateId": "jake"},
        )
        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["filename"] == "Jordan-Lee-resume.pdf"
        assert base64.b64decode(body["pdfBase64"]).startswith(b"%PDF")
        assert body["content"]["personalInfo"]["lastName"] == "Lee"

    def test_unknown_template(self, client, mock_llm_client):
        response = client.post(
            "/api/free-resume/generate",
            json={"resumeText": "text", "email": EMAIL, "templateId": "nope"},
        )
        assert response.status_code == 400
        assert response.json() == {"error": "Please select a valid template"}
        mock_llm_client.generate.assert_not_awaited()

    def test_not_on_list(self, client):
        response = client.post(
            "/api/free-resume/generate",
            json={"resumeText": "text", "email": EMAIL, "templateId": "jake"},
        )
        assert response.status_code == 403

    def test_compile_failure_hides_log_in_production(self, client, store, fake_compiler):
        store.add_to_list(EMAIL, "free-resume")
        fake_compiler.compile.side_effect = CompilationError("PDF generation failed", log="! Emergency stop.")
        response = client.post(
            "/api/free-resume/generate",
            json={"resumeText": "text", "email": EMAIL, "templateId": "jake"},
        )
        assert response.status_code == 500
        assert response.json() == {"error": "PDF generation failed"}

    def test_compile_failure_shows_log_in_development(self, orchestrator, summarizer, store, fake_compiler):
        app = create_app(AppConfig(environment="development"), orchestrator=orchestrator, summarizer=summarizer)
        store.add_to_list(EMAIL, "free-resume")
        fake_compiler.compile.side_effect = CompilationError("PDF generation failed", log="! Emergency stop.")
        response = TestClient(app).post(
            "/api/free-resume/generate",
            json={"resumeText": "text", "email": EMAIL, "templateId": "jake"},
        )
        assert response.status_code == 500
        assert response.json()["details"] == "! Emergency stop."


class TestExportEndpoint:
    def test_export_pdf(self, client, sample_content):
        response = client.post("/api/resume/export/vertex", json={"content": sample_content.to_wire()})
        assert response.status_code == 200
        assert response.headers["content-type"] == "application/pdf"
        assert 'filename="Jordan-Lee-resume.pdf"' in response.headers["content-disposition"]

    def test_export_ir(self, client, sample_ir):
        response = client.post("/api/resume/export/jake", json={"ir": sample_ir.model_dump(mode="json")})
        assert response.status_code == 200

    def test_missing_content(self, client):
        response = client.post("/api/resume/export/jake", json={})
        assert response.status_code == 400

    def test_unknown_template(self, client, sample_content):
        response = client.post("/api/resume/export/nope", json={"content": sample_content.to_wire()})
        assert response.status_code == 400


class TestPreviewEndpoint:
    def test_preview_html(self, client, sample_content):
        response = client.post("/api/resume/preview", json={"content": sample_content.to_wire(), "theme": "modern"})
        assert response.status_code == 200
        assert "text/html" in response.headers["content-type"]
        assert "Acme Corp" in response.text
        assert 'class="resume modern"' in response.text


class TestSummaryEndpoint:
    def test_summary(self, client, summarizer):
        response = client.post("/api/performance/summary", json={"totalJobs": 3})
        assert response.status_code == 200
        assert response.json()["summary"] == "Keep going."
        summarizer.summarize.assert_awaited_once()

    def test_invalid_stats(self, client, summarizer):
        response = client.post("/api/performance/summary", json={"statusCounts": {}})
        assert response.status_code == 400
        assert response.json()["error"] == "Invalid stats provided"
        summarizer.summarize.assert_not_awaited()


def test_templates(client):
    body = client.get("/api/templates").json()
    ids = [t["id"] for t in body["templates"]]
    assert ids == ["jake", "vertex", "minimal", "executive", "momentum"]
    assert body["aliases"] == {"apex": "vertex"}


def test_preview_rejects_script_links(client, sample_ir):
    ir = sample_ir.model_dump(mode="json")
    ir["personal"]["links"] = [{"label": "Portfolio", "url": "javascript:alert(document.cookie)"}]
    response = client.post("/api/resume/preview", json={"ir": ir})
    assert response.status_code == 400
    assert response.json()["error"] == "Invalid resume content"
    assert "javascript:" not in response.text


@pytest.mark.parametrize(
    "payload",
    [
        {"resumeText": "text", "email": EMAIL, "templateId": 123},
        {"resumeText": ["not", "a", "string"], "email": EMAIL, "templateId": "jake"},
    ],
)
def test_malformed_body_uses_error_shape(client, mock_llm_client, payload):
    response = client.post("/api/free-resume/generate", json=payload)
    assert response.status_code == 400
    assert response.json() == {"error": "Invalid request body"}
    mock_llm_client.generate.assert_not_awaited()


def test_malformed_body_details_in_development(orchestrator, summarizer):
    app = create_app(AppConfig(environment="development"), orchestrator=orchestrator, summarizer=summarizer)
    response = TestClient(app).post("/api/free-resume/generate", json={"templateId": 123})
    assert response.status_code == 400
    assert "templateId" in response.json()["details"]
