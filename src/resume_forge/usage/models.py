"""Usage ledger data models."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, Field


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UsageRecord(BaseModel):
    """One successful free-tier generation. Append-only."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    email: str
    created_at: datetime = Field(default_factory=utcnow)
    input_type: Literal["text", "pdf"]
    text_character_count: int = 0
    pdf_size_bytes: int | None = None
    template_id: str


class UsageDetails(BaseModel):
    """What the orchestrator knows about a generation when it records it."""

    input_type: Literal["text", "pdf"]
    text_character_count: int = 0
    pdf_size_bytes: int | None = None
    template_id: str


class Subscription(BaseModel):
    email: str
    plan_id: str
    status: str
    updated_at: datetime = Field(default_factory=utcnow)


class PlanStatus(BaseModel):
    exempt: bool
    plan_id: str | None = None
    status: str | None = None


class LimitCheck(BaseModel):
    can_generate: bool
    count: int
    limit: int | None
    exempt: bool = False


class LedgerStats(BaseModel):
    total_generations: int = 0
    text_count: int = 0
    pdf_count: int = 0
    total_text_characters: int = 0
    total_pdf_bytes: int = 0
    last_7_days: int = 0
    last_30_days: int = 0
    first_generation_at: datetime | None = None
    last_generation_at: datetime | None = None
