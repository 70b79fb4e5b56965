"""HTTP surface: FastAPI app exposing generation, export, preview and summaries."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import HTMLResponse, JSONResponse, Response
from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from resume_forge.clients.llm_client import LLMClient
from resume_forge.config import AppConfig, load_config
from resume_forge.errors import GenerationError, ValidationError
from resume_forge.models.adapter import content_to_ir
from resume_forge.models.content import ResumeContent
from resume_forge.models.ir import ResumeIR
from resume_forge.pipeline.orchestrator import (
    GenerationOrchestrator,
    GenerationRequest,
    build_orchestrator,
)
from resume_forge.pipeline.performance_summary import PerformanceSummarizer
from resume_forge.renderers.html import render_html

logger = logging.getLogger(__name__)


class _Body(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class GenerateBody(_Body):
    resume_text: str | None = None
    resume_pdf: str | None = None
    email: str | None = None
    template_id: str | None = None


class DocumentBody(_Body):
    content: dict[str, Any] | None = None
    ir: dict[str, Any] | None = None
    theme: str = "jake"


def _source(body: DocumentBody) -> ResumeContent | ResumeIR:
    """The IR when given, otherwise flat content."""
    try:
        if body.ir is not None:
            return ResumeIR.model_validate(body.ir)
        if body.content is not None:
            return ResumeContent.model_validate(body.content)
    except PydanticValidationError as exc:
        raise ValidationError("Invalid resume content", details=str(exc)) from exc
    raise ValidationError("Resume content is required")


def create_app(
    config: AppConfig | None = None,
    *,
    orchestrator: GenerationOrchestrator | None = None,
    summarizer: PerformanceSummarizer | None = None,
) -> FastAPI:
    """Build the app. Collaborators default to ones wired from ``config``."""
    config = config or load_config()
    llm: LLMClient | None = None
    if orchestrator is None or summarizer is None:
        llm = LLMClient(timeout=config.llm.timeout)
    orchestrator = orchestrator or build_orchestrator(config, llm)
    summarizer = summarizer or PerformanceSummarizer(llm, config)

    app = FastAPI(title="resume-forge")
    app.state.config = config
    app.state.orchestrator = orchestrator
    app.state.summarizer = summarizer

    @app.exception_handler(GenerationError)
    async def generation_error_handler(request: Request, exc: GenerationError) -> JSONResponse:
        if exc.status >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.details or exc.message)
        return JSONResponse(status_code=exc.status, content=exc.to_response(config.debug))

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        error = ValidationError("Invalid request body", details=str(exc.errors()))
        return JSONResponse(status_code=error.status, content=error.to_response(config.debug))

    @app.post("/api/free-resume/generate")
    async def generate(body: GenerateBody) -> dict:
        result = await orchestrator.generate(
            GenerationRequest(
                email=body.email,
                template_id=body.template_id,
                resume_text=body.resume_text,
                resume_pdf=body.resume_pdf,
            )
        )
        return result.to_response()

    @app.post("/api/resume/export/{template_id}")
    async def export(template_id: str, body: DocumentBody) -> Response:
        result = await orchestrator.export(_source(body), template_id)
        return Response(
            content=result.pdf_bytes,
            media_type="application/pdf",
            headers={"Content-Disposition": f'attachment; filename="{result.filename}"'},
        )

    @app.post("/api/resume/preview", response_class=HTMLResponse)
    async def preview(body: DocumentBody) -> HTMLResponse:
        source = _source(body)
        ir = source if isinstance(source, ResumeIR) else content_to_ir(source)
        return HTMLResponse(render_html(ir, body.theme))

    @app.post("/api/performance/summary")
    async def performance_summary(request: Request) -> dict:
        try:
            raw = await request.json()
        except ValueError as exc:
            raise ValidationError("Invalid stats provided") from exc
        result = await summarizer.summarize(PerformanceSummarizer.parse_stats(raw))
        return {"success": True, "summary": result.summary, "modelUsed": result.model_used}

    @app.get("/api/templates")
    async def templates() -> dict:
        return {
            "templates": [t.model_dump() for t in orchestrator.catalog.templates],
            "aliases": orchestrator.catalog.aliases,
        }

    return app
