"""LaTeX -> PDF compilation.

Two interchangeable backends:

- ``CompilationClient`` posts the source to a remote compile service
  (``POST {url}/compile``) and decodes the returned ``pdfBase64``.
- ``LocalLatexCompiler`` runs ``pdflatex`` inside a temporary directory
  that is removed on every exit path.
"""

from __future__ import annotations

import asyncio
import base64
import binascii
import logging
import re
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

import httpx

from resume_forge.config import CompilerConfig
from resume_forge.errors import CompilationError

logger = logging.getLogger(__name__)

GENERATION_FAILED = "PDF generation failed"
NO_PDF_RETURNED = "LaTeX service did not return a PDF"

_LOG_ERROR = re.compile(r"^! (.+)$", re.MULTILINE)


@dataclass
class CompiledDocument:
    pdf_bytes: bytes
    document_id: str
    log: str = ""


class Compiler(Protocol):
    async def compile(self, latex: str, document_id: str) -> CompiledDocument: ...


def latex_errors(log: str) -> list[str]:
    """Lines pdflatex flags with ``!`` in its log."""
    return [m.group(1).strip() for m in _LOG_ERROR.finditer(log)]


class CompilationClient:
    """Client for a remote LaTeX compile service."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    async def compile(self, latex: str, document_id: str) -> CompiledDocument:
        """Compile LaTeX source remotely.

        Raises:
            CompilationError: non-2xx status, transport failure or an empty artifact.
        """
        payload = {
            "latex": latex,
            "latexContent": latex,
            "filename": f"resume-{document_id}",
        }
        logger.debug("Compiling %s (%d chars) via %s", document_id, len(latex), self.base_url)
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(f"{self.base_url}/compile", json=payload)
        except httpx.HTTPError as exc:
            raise CompilationError(GENERATION_FAILED, details=f"Compile service unreachable: {exc}") from exc

        if not response.is_success:
            data = _json_or_empty(response)
            log = str(data.get("log") or "")
            logger.error(
                "LaTeX service error: status=%d error=%s", response.status_code, data.get("error")
            )
            raise CompilationError(
                GENERATION_FAILED,
                log=log,
                details=log or str(data.get("error") or response.reason_phrase),
            )

        encoded = _json_or_empty(response).get("pdfBase64")
        if not encoded:
            raise CompilationError(NO_PDF_RETURNED)
        try:
            pdf_bytes = base64.b64decode(encoded, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise CompilationError(NO_PDF_RETURNED, details="pdfBase64 is not valid base64") from exc
        if not pdf_bytes:
            raise CompilationError(NO_PDF_RETURNED)
        return CompiledDocument(pdf_bytes=pdf_bytes, document_id=document_id)


def _json_or_empty(response: httpx.Response) -> dict:
    try:
        data = response.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


class LocalLatexCompiler:
    """Runs pdflatex in a scoped temporary directory."""

    def __init__(self, command: str = "pdflatex", timeout: float = 60.0, passes: int = 1):
        self.command = command
        self.timeout = timeout
        self.passes = passes

    async def compile(self, latex: str, document_id: str) -> CompiledDocument:
        stem = f"resume-{document_id}"
        with tempfile.TemporaryDirectory(prefix="resume-forge-") as workdir:
            work = Path(workdir)
            (work / f"{stem}.tex").write_text(latex, encoding="utf-8")

            output = ""
            for _ in range(self.passes):
                output = await self._run(work, stem)

            log_path = work / f"{stem}.log"
            log = log_path.read_text(encoding="utf-8", errors="replace") if log_path.exists() else output
            pdf_path = work / f"{stem}.pdf"
            if not pdf_path.exists() or pdf_path.stat().st_size == 0:
                errors = latex_errors(log)
                logger.error("pdflatex produced no PDF for %s: %s", document_id, errors[:3])
                raise CompilationError(GENERATION_FAILED, log=log)
            return CompiledDocument(pdf_bytes=pdf_path.read_bytes(), document_id=document_id, log=log)

    async def _run(self, work: Path, stem: str) -> str:
        try:
            proc = await asyncio.create_subprocess_exec(
                self.command,
                "-interaction=nonstopmode",
                "-halt-on-error",
                f"{stem}.tex",
                cwd=work,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.STDOUT,
            )
        except FileNotFoundError as exc:
            raise CompilationError(GENERATION_FAILED, details=f"{self.command} not found") from exc
        try:
            stdout, _ = await asyncio.wait_for(proc.communicate(), timeout=self.timeout)
        except asyncio.TimeoutError as exc:
            raise CompilationError(
                GENERATION_FAILED, details=f"{self.command} timed out after {self.timeout}s"
            ) from exc
        finally:
            # Timeout or cancellation: the work directory is about to be removed
            if proc.returncode is None:
                proc.kill()
                await proc.wait()
        return stdout.decode("utf-8", errors="replace")


def create_compiler(config: CompilerConfig) -> Compiler:
    """Remote service when a URL is configured, local pdflatex otherwise."""
    if config.service_url:
        return CompilationClient(config.service_url, timeout=config.timeout)
    return LocalLatexCompiler(config.latex_command, timeout=config.timeout)
