"""Error taxonomy for the generation pipeline.

Every failure a caller can see is a ``GenerationError`` carrying an
HTTP-style status and a caller-safe message. Internal detail travels in
``details`` and is only rendered into responses in debug mode.
"""

from __future__ import annotations

import traceback


class ResumeForgeError(Exception):
    """Base class for all resume-forge errors."""


class GenerationError(ResumeForgeError):
    status: int = 500

    def __init__(self, message: str, *, details: str | None = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_response(self, debug: bool = False) -> dict:
        """Build the JSON error body for this failure."""
        body: dict = {"error": self.message}
        if debug:
            if self.details:
                body["details"] = self.details
            cause = self.__cause__ or self.__context__
            if cause is not None:
                body["stack"] = "".join(
                    traceback.format_exception(type(cause), cause, cause.__traceback__)
                )
        return body


class ValidationError(GenerationError):
    status = 400


class UnknownTemplateError(ValidationError):
    def __init__(self, template_id: str):
        super().__init__("Please select a valid template", details=f"Unknown template: {template_id!r}")
        self.template_id = template_id


class QuotaError(GenerationError):
    status = 403

    def __init__(
        self,
        message: str,
        *,
        count: int | None = None,
        limit: int | None = None,
        limit_reached: bool = False,
    ):
        super().__init__(message)
        self.count = count
        self.limit = limit
        self.limit_reached = limit_reached

    def to_response(self, debug: bool = False) -> dict:
        body = super().to_response(debug)
        if self.limit_reached:
            body.update(limitReached=True, count=self.count, limit=self.limit)
        return body


class ExtractionError(GenerationError):
    status = 502

    def __init__(
        self,
        message: str,
        *,
        transient: bool = False,
        status_code: int | None = None,
        details: str | None = None,
    ):
        super().__init__(message, details=details)
        self.transient = transient
        self.status_code = status_code

    @property
    def rate_limited(self) -> bool:
        return self.status_code == 429


class RenderError(GenerationError):
    status = 500


class CompilationError(GenerationError):
    status = 500

    def __init__(self, message: str, *, log: str = "", details: str | None = None):
        super().__init__(message, details=details or log or None)
        self.log = log


class InternalError(GenerationError):
    status = 500


class UnknownSectionKind(ResumeForgeError):
    """An IR section kind outside the closed set reached a consumer."""


class PatchError(ResumeForgeError):
    """A patch operation addressed a section, item or bullet that does not exist."""


class ExemptIdentityError(ResumeForgeError):
    """Usage was recorded for an identity whose plan is exempt from the ledger."""
