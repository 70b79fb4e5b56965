"""Retry-then-fallback policy shared by every model-backed operation.

primary -> (transient) wait ``retry_delay`` -> primary -> (transient) wait
``fallback_delay`` -> fallback -> raise. A permanent failure at any step
is raised immediately.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, TypeVar

from tenacity import AsyncRetrying, retry_if_exception, stop_after_attempt, wait_fixed

from resume_forge.config import LLMConfig, RetryConfig

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ModelFallbackPolicy:
    def __init__(
        self,
        primary_model: str,
        fallback_model: str | None,
        is_transient: Callable[[BaseException], bool],
        *,
        retry_delay: float = 2.0,
        fallback_delay: float = 1.0,
    ):
        self.primary_model = primary_model
        self.fallback_model = fallback_model
        self.is_transient = is_transient
        self.retry_delay = retry_delay
        self.fallback_delay = fallback_delay

    @classmethod
    def from_config(
        cls,
        llm: LLMConfig,
        retry: RetryConfig,
        is_transient: Callable[[BaseException], bool],
    ) -> ModelFallbackPolicy:
        return cls(
            llm.primary_model,
            llm.fallback_model,
            is_transient,
            retry_delay=retry.retry_delay,
            fallback_delay=retry.fallback_delay,
        )

    async def run(self, call: Callable[[str], Awaitable[T]]) -> tuple[T, str]:
        """Run ``call(model)`` under the policy.

        ``call`` is expected to validate its own result and raise a
        non-transient error when the response lacks the expected content.

        Returns:
            The value from the first successful call and the model that produced it.
        """
        retrying = AsyncRetrying(
            stop=stop_after_attempt(2),
            wait=wait_fixed(self.retry_delay),
            retry=retry_if_exception(self.is_transient),
            before_sleep=self._log_retry,
            reraise=True,
        )
        try:
            return await retrying(call, self.primary_model), self.primary_model
        except Exception as exc:
            if not self.is_transient(exc) or not self.fallback_model:
                raise
            logger.warning(
                "Primary model %s failed twice (%s), falling back to %s",
                self.primary_model,
                exc,
                self.fallback_model,
            )

        await asyncio.sleep(self.fallback_delay)
        return await call(self.fallback_model), self.fallback_model

    def _log_retry(self, retry_state) -> None:
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        logger.info(
            "Transient failure on %s (%s), retrying in %.1fs",
            self.primary_model,
            exc,
            self.retry_delay,
        )


def transient_only(exc: BaseException) -> bool:
    """Predicate for errors that carry a ``transient`` flag."""
    return bool(getattr(exc, "transient", False))
