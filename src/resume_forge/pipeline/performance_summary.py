"""Coaching summary for job-hunt statistics."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from resume_forge.clients.fallback import ModelFallbackPolicy, transient_only
from resume_forge.clients.llm_client import LLMClient, classify_api_error
from resume_forge.config import AppConfig
from resume_forge.errors import ExtractionError, InternalError, ValidationError

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """\
You are a career coach analyzing a job seeker's performance. Given job hunt statistics, write a personalized, actionable 2-4 sentence summary.

Guidelines:
- Be encouraging but honest
- Focus on actionable insights (e.g., "Try tailoring your Software Engineer resume more" or "Your 15% response rate suggests stronger cover letters could help")
- Mention specific numbers when relevant
- Suggest 1-2 concrete next steps
- If they have interviews or offers, acknowledge those wins
- If stats are low, focus on improvement opportunities

Return ONLY the summary text, no additional formatting or explanations."""

STATUSES = ("Interested", "Applied", "Callback", "Interviewing", "Offered", "Rejected", "Ghosted")


class _StatsModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class DocumentStats(_StatsModel):
    total_jobs: int = 0
    offered: int = 0
    callback: int = 0
    interviewing: int = 0
    rejected: int = 0
    ghosted: int = 0
    applied: int = 0


class PerformanceStats(_StatsModel):
    total_jobs: int
    status_counts: dict[str, int] = Field(default_factory=dict)
    resume_stats: dict[str, DocumentStats] | None = None
    cover_letter_stats: dict[str, DocumentStats] | None = None
    documents_generated_this_month: int | None = None


@dataclass
class SummaryResult:
    summary: str
    model_used: str


def build_prompt(stats: PerformanceStats) -> str:
    lines = [
        "Analyze these job hunt stats and provide a personalized, actionable summary:",
        "",
        f"Total Jobs: {stats.total_jobs}",
        "Status Breakdown:",
    ]
    lines += [f"- {status}: {stats.status_counts.get(status, 0)}" for status in STATUSES]
    for title, per_doc in (
        ("Resume Performance", stats.resume_stats),
        ("Cover Letter Performance", stats.cover_letter_stats),
    ):
        if per_doc:
            lines += ["", f"{title}:"]
            lines += [
                f"- {name}: {d.total_jobs} jobs ({d.offered} offers, {d.callback} callback, "
                f"{d.interviewing} interviewing, {d.rejected} rejected)"
                for name, d in per_doc.items()
            ]
    if stats.documents_generated_this_month:
        lines += ["", f"Documents Generated This Month: {stats.documents_generated_this_month}"]
    return "\n".join(lines)


class PerformanceSummarizer:
    """Writes a short coaching summary under the same retry/fallback policy as extraction."""

    def __init__(self, llm: LLMClient, config: AppConfig, temperature: float = 0.7, max_tokens: int = 500):
        self.llm = llm
        self.config = config
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.policy = ModelFallbackPolicy.from_config(config.llm, config.retry, transient_only)

    @staticmethod
    def parse_stats(raw: dict) -> PerformanceStats:
        """Validate raw request data.

        Raises:
            ValidationError: if ``totalJobs`` is missing or not a number.
        """
        if not isinstance(raw, dict) or isinstance(raw.get("totalJobs", raw.get("total_jobs")), bool):
            raise ValidationError("Invalid stats provided")
        try:
            return PerformanceStats.model_validate(raw)
        except PydanticValidationError as exc:
            raise ValidationError("Invalid stats provided", details=str(exc)) from exc

    async def summarize(self, stats: PerformanceStats | dict) -> SummaryResult:
        if not isinstance(stats, PerformanceStats):
            stats = self.parse_stats(stats)
        prompt = build_prompt(stats)

        async def attempt(model: str) -> str:
            try:
                response = await self.llm.generate(
                    prompt,
                    model=model,
                    system=SYSTEM_PROMPT,
                    temperature=self.temperature,
                    max_tokens=self.max_tokens,
                )
            except Exception as exc:
                raise classify_api_error(exc, self.config.retry.transient_statuses) from exc
            if not response.text:
                raise ExtractionError("AI did not return a valid summary")
            return response.text

        try:
            summary, model_used = await self.policy.run(attempt)
        except ExtractionError as exc:
            logger.error("Performance summary failed: %s", exc.details or exc.message)
            if exc.status_code is not None:
                raise InternalError(f"AI generation failed: {exc.status_code}", details=exc.details) from exc
            raise InternalError(exc.message, details=exc.details) from exc
        return SummaryResult(summary=summary, model_used=model_used)
