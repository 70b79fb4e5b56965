"""Claude API wrapper for extraction and summary calls."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import anthropic

from resume_forge.errors import ExtractionError

logger = logging.getLogger(__name__)

RATE_LIMITED_MESSAGE = "This free tool is popular right now. Please try again in a minute."
EXTRACTION_FAILED_MESSAGE = "AI extraction failed. Please try again."


@dataclass
class LLMResponse:
    """Response from the LLM including usage metadata."""

    text: str
    model: str
    input_tokens: int
    output_tokens: int


class LLMClient:
    """Async Claude API client.

    SDK-level retries are disabled; ``ModelFallbackPolicy`` decides how many
    calls each request makes.
    """

    def __init__(self, api_key: str | None = None, timeout: float | None = None):
        kwargs: dict = {"max_retries": 0}
        if api_key is not None:
            kwargs["api_key"] = api_key
        if timeout is not None:
            kwargs["timeout"] = timeout
        self.client = anthropic.AsyncAnthropic(**kwargs)

    async def generate(
        self,
        prompt: str,
        *,
        model: str,
        system: str = "",
        temperature: float = 0.0,
        max_tokens: int = 4096,
        pdf_base64: str | None = None,
    ) -> LLMResponse:
        """Send a prompt, optionally with a PDF attached, and return the text response."""
        if pdf_base64:
            content: str | list[dict] = [
                {
                    "type": "document",
                    "source": {
                        "type": "base64",
                        "media_type": "application/pdf",
                        "data": pdf_base64,
                    },
                },
                {"type": "text", "text": prompt},
            ]
        else:
            content = prompt

        kwargs: dict = {
            "model": model,
            "max_tokens": max_tokens,
            "temperature": temperature,
            "messages": [{"role": "user", "content": content}],
        }
        if system:
            kwargs["system"] = system

        logger.debug("LLM call: model=%s pdf=%s", model, bool(pdf_base64))
        message = await self.client.messages.create(**kwargs)

        input_tokens = message.usage.input_tokens
        output_tokens = message.usage.output_tokens
        logger.debug("LLM response: %d input, %d output tokens", input_tokens, output_tokens)
        if message.stop_reason == "max_tokens":
            # Truncated output is never repaired
            raise ExtractionError(
                EXTRACTION_FAILED_MESSAGE,
                details=f"Response from {model} hit the {max_tokens} token limit",
            )
        return LLMResponse(
            text=message_text(message.content),
            model=model,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
        )


def message_text(content) -> str:
    """Join the text of a response whose content is a string or a list of parts."""
    if content is None:
        return ""
    if isinstance(content, str):
        return content.strip()
    parts = []
    for block in content:
        text = block.get("text") if isinstance(block, dict) else getattr(block, "text", None)
        if isinstance(text, str):
            parts.append(text)
    return "".join(parts).strip()


def classify_api_error(exc: Exception, transient_statuses: tuple[int, ...]) -> ExtractionError:
    """Map an SDK failure to an ``ExtractionError`` with a caller-safe message.

    Statuses in ``transient_statuses`` and connection/timeout errors are
    transient; every other failure is permanent.
    """
    if isinstance(exc, ExtractionError):
        return exc
    if isinstance(exc, anthropic.APIStatusError):
        status = exc.status_code
        return ExtractionError(
            RATE_LIMITED_MESSAGE if status == 429 else EXTRACTION_FAILED_MESSAGE,
            transient=status in transient_statuses,
            status_code=status,
            details=f"AI extraction failed: {status} {exc.message}",
        )
    if isinstance(exc, anthropic.APIConnectionError):
        # APITimeoutError is a subclass
        return ExtractionError(
            EXTRACTION_FAILED_MESSAGE,
            transient=True,
            details=f"AI extraction failed: {type(exc).__name__}: {exc}",
        )
    return ExtractionError(
        EXTRACTION_FAILED_MESSAGE,
        transient=False,
        details=f"AI extraction failed: {type(exc).__name__}: {exc}",
    )
