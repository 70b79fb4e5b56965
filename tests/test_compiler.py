"""Tests for the LaTeX compilation backends."""

from __future__ import annotations

import asyncio
import base64
import json
import os
import sys
import tempfile

import httpx
import pytest

from resume_forge.config import CompilerConfig
from resume_forge.errors import CompilationError
from resume_forge.export.compiler import (
    GENERATION_FAILED,
    NO_PDF_RETURNED,
    CompilationClient,
    LocalLatexCompiler,
    create_compiler,
    latex_errors,
)

FAKE_PDF = b"%PDF-1.4\n%%EOF\n"
SERVICE_URL = "http://latex.test"

SAMPLE_LOG = """This is pdfTeX, Version 3.141592653
! Undefined control sequence.
l.12 \\resumeSubheadin
! Emergency stop.
"""


def _client(handler) -> CompilationClient:
    return CompilationClient(SERVICE_URL, transport=httpx.MockTransport(handler))


class TestCompilationClient:
    async def test_success(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"pdfBase64": base64.b64encode(FAKE_PDF).decode()})

        doc = await _client(handler).compile("\\documentclass{article}", "abc123")

        assert doc.pdf_bytes == FAKE_PDF
        assert doc.document_id == "abc123"
        assert seen["url"] == f"{SERVICE_URL}/compile"
        assert seen["body"]["latex"] == "\\documentclass{article}"
        assert seen["body"]["latexContent"] == seen["body"]["latex"]
        assert seen["body"]["filename"] == "resume-abc123"

    async def test_trailing_slash_in_base_url(self):
        def handler(request):
            assert request.url.path == "/compile"
            return httpx.Response(200, json={"pdfBase64": base64.b64encode(FAKE_PDF).decode()})

        client = CompilationClient(SERVICE_URL + "/", transport=httpx.MockTransport(handler))
        assert (await client.compile("x", "id")).pdf_bytes == FAKE_PDF

    async def test_error_status_carries_log(self):
        def handler(request):
            return httpx.Response(400, json={"error": "compile failed", "log": SAMPLE_LOG})

        with pytest.raises(CompilationError) as exc_info:
            await _client(handler).compile("x", "id")
        assert exc_info.value.message == GENERATION_FAILED
        assert exc_info.value.log == SAMPLE_LOG
        assert "Undefined control sequence" in exc_info.value.to_response(debug=True)["details"]
        assert "details" not in exc_info.value.to_response(debug=False)

    async def test_error_status_without_json(self):
        def handler(request):
            return httpx.Response(502, text="Bad Gateway")

        with pytest.raises(CompilationError, match=GENERATION_FAILED):
            await _client(handler).compile("x", "id")

    async def test_missing_pdf(self):
        def handler(request):
            return httpx.Response(200, json={"ok": True})

        with pytest.raises(CompilationError, match=NO_PDF_RETURNED):
            await _client(handler).compile("x", "id")

    async def test_invalid_base64(self):
        def handler(request):
            return httpx.Response(200, json={"pdfBase64": "not base64!!"})

        with pytest.raises(CompilationError, match=NO_PDF_RETURNED):
            await _client(handler).compile("x", "id")

    async def test_transport_failure(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(CompilationError, match=GENERATION_FAILED):
            await _client(handler).compile("x", "id")


class TestLocalLatexCompiler:
    @pytest.fixture(autouse=True)
    def isolated_tempdir(self, tmp_path, monkeypatch):
        monkeypatch.setattr(tempfile, "tempdir", str(tmp_path))

    async def test_success_and_cleanup(self, tmp_path, monkeypatch):
        compiler = LocalLatexCompiler()
        seen = {}

        async def fake_run(work, stem):
            seen["tex"] = (work / f"{stem}.tex").read_text(encoding="utf-8")
            (work / f"{stem}.pdf").write_bytes(FAKE_PDF)
            (work / f"{stem}.log").write_text("Output written", encoding="utf-8")
            return ""

        monkeypatch.setattr(compiler, "_run", fake_run)
        doc = await compiler.compile("\\documentclass{article}", "doc1")

        assert doc.pdf_bytes == FAKE_PDF
        assert doc.log == "Output written"
        assert seen["tex"] == "\\documentclass{article}"
        assert list(tmp_path.glob("resume-forge-*")) == []

    async def test_failure_carries_log_and_cleans_up(self, tmp_path, monkeypatch):
        compiler = LocalLatexCompiler()

        async def fake_run(work, stem):
            (work / f"{stem}.log").write_text(SAMPLE_LOG, encoding="utf-8")
            return "stdout"

        monkeypatch.setattr(compiler, "_run", fake_run)
        with pytest.raises(CompilationError) as exc_info:
            await compiler.compile("\\bad", "doc2")

        assert "Undefined control sequence" in exc_info.value.log
        assert list(tmp_path.glob("resume-forge-*")) == []

    async def test_runs_every_pass(self, monkeypatch):
        compiler = LocalLatexCompiler(passes=2)
        calls = []

        async def fake_run(work, stem):
            calls.append(stem)
            (work / f"{stem}.pdf").write_bytes(FAKE_PDF)
            return ""

        monkeypatch.setattr(compiler, "_run", fake_run)
        await compiler.compile("x", "doc3")
        assert calls == ["resume-doc3", "resume-doc3"]

    async def test_missing_binary(self, tmp_path):
        compiler = LocalLatexCompiler(command="resume-forge-no-such-latex")
        with pytest.raises(CompilationError, match=GENERATION_FAILED):
            await compiler.compile("x", "doc4")
        assert list(tmp_path.glob("resume-forge-*")) == []

    @pytest.fixture
    def slow_latex(self, tmp_path):
        """A stand-in latex binary that records its pid and hangs."""
        pid_file = tmp_path / "latex.pid"
        script = tmp_path / "slow-latex"
        script.write_text(f"#!/bin/sh\necho $$ > {pid_file}\nexec sleep 30\n", encoding="utf-8")
        script.chmod(0o755)
        return script, pid_file

    @pytest.mark.skipif(sys.platform == "win32", reason="needs a POSIX shell")
    async def test_cancellation_kills_child(self, tmp_path, slow_latex):
        script, pid_file = slow_latex
        task = asyncio.create_task(LocalLatexCompiler(command=str(script)).compile("x", "doc5"))
        for _ in range(200):
            if pid_file.exists() and pid_file.read_text().strip():
                break
            await asyncio.sleep(0.05)

        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        with pytest.raises(ProcessLookupError):
            os.kill(int(pid_file.read_text()), 0)
        assert list(tmp_path.glob("resume-forge-*")) == []

    @pytest.mark.skipif(sys.platform == "win32", reason="needs a POSIX shell")
    async def test_timeout_kills_child(self, tmp_path, slow_latex):
        script, pid_file = slow_latex
        compiler = LocalLatexCompiler(command=str(script), timeout=1.0)
        with pytest.raises(CompilationError, match=GENERATION_FAILED):
            await compiler.compile("x", "doc6")

        with pytest.raises(ProcessLookupError):
            os.kill(int(pid_file.read_text()), 0)
        assert list(tmp_path.glob("resume-forge-*")) == []


def test_latex_errors():
    assert latex_errors(SAMPLE_LOG) == ["Undefined control sequence.", "Emergency stop."]
    assert latex_errors("") == []


def test_create_compiler():
    assert isinstance(create_compiler(CompilerConfig(service_url=SERVICE_URL)), CompilationClient)
    assert isinstance(create_compiler(CompilerConfig()), LocalLatexCompiler)
