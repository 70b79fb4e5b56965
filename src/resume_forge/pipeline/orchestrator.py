"""Generation pipeline: request -> quota -> extraction -> LaTeX -> PDF -> ledger."""

from __future__ import annotations

import base64
import logging
import secrets
from dataclasses import dataclass

from resume_forge.clients.llm_client import LLMClient
from resume_forge.config import AppConfig
from resume_forge.errors import (
    CompilationError,
    GenerationError,
    InternalError,
    QuotaError,
    RenderError,
    ValidationError,
)
from resume_forge.export.compiler import NO_PDF_RETURNED, CompiledDocument, Compiler, create_compiler
from resume_forge.extraction.extractor import ResumeExtractor
from resume_forge.models.adapter import content_to_ir
from resume_forge.models.content import ResumeContent
from resume_forge.models.ir import ResumeIR
from resume_forge.renderers.latex import LatexRenderer
from resume_forge.templates.loader import ResumeTemplate, TemplateCatalog, default_catalog
from resume_forge.usage.limiter import UsageLimiter
from resume_forge.usage.models import LimitCheck, UsageDetails
from resume_forge.usage.store import LedgerStore
from resume_forge.utils.payload import (
    decoded_size,
    is_valid_email,
    normalize_email,
    safe_filename,
)

logger = logging.getLogger(__name__)

NOT_ON_LIST_MESSAGE = "Email not found on list. Please sign up first or verify your email."
LIMIT_REACHED_MESSAGE = (
    "You've used your {limit} free resumes. Sign up to unlock unlimited resume generation."
)


@dataclass
class GenerationRequest:
    """One free-tier generation request. Never persisted."""

    email: str | None
    template_id: str | None
    resume_text: str | None = None
    resume_pdf: str | None = None  # base64, optionally with a data: URL prefix

    @property
    def has_text(self) -> bool:
        return bool(self.resume_text and self.resume_text.strip())

    @property
    def has_pdf(self) -> bool:
        return bool(self.resume_pdf)

    @property
    def input_type(self) -> str:
        return "pdf" if self.has_pdf else "text"


@dataclass
class GenerationResult:
    pdf_bytes: bytes
    content: ResumeContent
    filename: str
    template_id: str
    document_id: str
    exempt: bool = False
    usage_count: int = 0
    usage_limit: int | None = None
    model_used: str = ""

    @property
    def pdf_base64(self) -> str:
        return base64.b64encode(self.pdf_bytes).decode("ascii")

    def to_response(self) -> dict:
        return {
            "success": True,
            "pdfBase64": self.pdf_base64,
            "content": self.content.to_wire(),
            "filename": self.filename,
        }


@dataclass
class ExportResult:
    pdf_bytes: bytes
    filename: str
    template_id: str
    document_id: str


class GenerationOrchestrator:
    """Runs one generation through every stage.

    Each stage either advances or raises a ``GenerationError`` subclass that
    maps to the caller-facing status (400, 403, 502 or 500). Anything else
    escaping a stage becomes an ``InternalError``.
    """

    def __init__(
        self,
        config: AppConfig,
        *,
        extractor: ResumeExtractor,
        compiler: Compiler,
        limiter: UsageLimiter,
        catalog: TemplateCatalog | None = None,
    ):
        self.config = config
        self.extractor = extractor
        self.compiler = compiler
        self.limiter = limiter
        self.catalog = catalog or default_catalog()
        self.renderer = LatexRenderer(self.catalog)

    async def generate(self, request: GenerationRequest) -> GenerationResult:
        try:
            return await self._generate(request)
        except GenerationError:
            raise
        except Exception as exc:
            logger.error("Failed to process resume", exc_info=True)
            raise InternalError("Failed to process resume", details=str(exc)) from exc

    async def _generate(self, request: GenerationRequest) -> GenerationResult:
        template, email = self._validate(request)
        check = await self._check_quota(email)

        extraction = await self.extractor.extract(
            text=request.resume_text if not request.has_pdf else None,
            pdf_base64=request.resume_pdf if request.has_pdf else None,
            fallback_email=email,
        )
        content = extraction.content

        latex = self._render(content, template.id)
        compiled = await self._compile(latex)

        usage_count = check.count
        if not check.exempt:
            if await self._record_usage(email, request, template.id):
                usage_count += 1

        personal = content.personal_info
        logger.info(
            "Generated %s for %s (template=%s, %d bytes)",
            compiled.document_id,
            email,
            template.id,
            len(compiled.pdf_bytes),
        )
        return GenerationResult(
            pdf_bytes=compiled.pdf_bytes,
            content=content,
            filename=safe_filename(personal.first_name, personal.last_name),
            template_id=template.id,
            document_id=compiled.document_id,
            exempt=check.exempt,
            usage_count=usage_count,
            usage_limit=check.limit,
            model_used=extraction.model_used,
        )

    async def export(self, source: ResumeContent | ResumeIR, template_id: str) -> ExportResult:
        """Render and compile already-structured content; no quota, no extraction.

        Raises:
            UnknownTemplateError: for an id outside the catalog.
            RenderError, CompilationError: as in ``generate``.
        """
        template = self.catalog.resolve(template_id)
        ir = source if isinstance(source, ResumeIR) else content_to_ir(source, template.id)
        latex = self._render(ir, template.id)
        compiled = await self._compile(latex)
        return ExportResult(
            pdf_bytes=compiled.pdf_bytes,
            filename=safe_filename(ir.personal.first_name, ir.personal.last_name),
            template_id=template.id,
            document_id=compiled.document_id,
        )

    # -- stages --

    def _validate(self, request: GenerationRequest) -> tuple[ResumeTemplate, str]:
        template_id = request.template_id or ""
        if not self.catalog.is_valid(template_id):
            raise ValidationError("Please select a valid template", details=f"Unknown template: {template_id!r}")
        template = self.catalog.resolve(template_id)
        if not template.free:
            raise ValidationError(
                "Please select a valid template", details=f"Template {template.id!r} is not free"
            )

        if not request.has_text and not request.has_pdf:
            raise ValidationError("Please paste your resume text or upload a PDF")
        if request.has_pdf and decoded_size(request.resume_pdf) > self.config.limits.max_pdf_bytes:
            raise ValidationError("PDF must be under 5MB")

        if not request.email:
            raise ValidationError("Email required - please sign up to the email list first")
        email = normalize_email(request.email)
        if not is_valid_email(email):
            raise ValidationError("Invalid email format")
        return template, email

    async def _check_quota(self, email: str) -> LimitCheck:
        if not await self.limiter.is_allowed(email):
            raise QuotaError(NOT_ON_LIST_MESSAGE)
        check = await self.limiter.check_limit(email)
        if not check.can_generate:
            logger.info("Free limit reached for %s (%d/%s)", email, check.count, check.limit)
            raise QuotaError(
                LIMIT_REACHED_MESSAGE.format(limit=check.limit),
                count=check.count,
                limit=check.limit,
                limit_reached=True,
            )
        return check

    def _render(self, source: ResumeContent | ResumeIR, template_id: str) -> str:
        try:
            ir = source if isinstance(source, ResumeIR) else content_to_ir(source, template_id)
            return self.renderer.render(ir, template_id)
        except Exception as exc:
            logger.error("Rendering failed for template %s", template_id, exc_info=True)
            raise RenderError("Failed to render resume", details=str(exc)) from exc

    async def _compile(self, latex: str) -> CompiledDocument:
        document_id = secrets.token_hex(8)
        compiled = await self.compiler.compile(latex, document_id)
        if not compiled.pdf_bytes:
            raise CompilationError(NO_PDF_RETURNED)
        return compiled

    async def _record_usage(self, email: str, request: GenerationRequest, template_id: str) -> bool:
        details = UsageDetails(
            input_type=request.input_type,
            text_character_count=len(request.resume_text) if request.has_text else 0,
            pdf_size_bytes=decoded_size(request.resume_pdf) if request.has_pdf else None,
            template_id=template_id,
        )
        try:
            await self.limiter.record(email, details)
        except Exception:
            # Best effort: the PDF is already built
            logger.warning("Usage recording failed for %s", email, exc_info=True)
            return False
        return True


def build_orchestrator(config: AppConfig, llm: LLMClient | None = None) -> GenerationOrchestrator:
    """Wire the default collaborators from configuration."""
    llm = llm or LLMClient(timeout=config.llm.timeout)
    store = LedgerStore(config.store.resolved_db_path)
    return GenerationOrchestrator(
        config,
        extractor=ResumeExtractor(llm, config),
        compiler=create_compiler(config.compiler),
        limiter=UsageLimiter(store, config.limits),
    )
