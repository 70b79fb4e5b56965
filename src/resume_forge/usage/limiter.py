"""Free-tier quota: allow-list, plan exemption and the per-email generation count."""

from __future__ import annotations

import asyncio
import logging

from resume_forge.config import LimitsConfig
from resume_forge.errors import ExemptIdentityError
from resume_forge.usage.models import LimitCheck, PlanStatus, UsageDetails, UsageRecord
from resume_forge.usage.store import LedgerStore

logger = logging.getLogger(__name__)


class UsageLimiter:
    """Decides whether an identity may generate, and records what it generated.

    The count is read from the ledger at check time and the record is
    appended after a successful generation. Two concurrent requests for the
    same email can both pass the check; the ledger then holds one record
    more than the limit.
    """

    def __init__(self, store: LedgerStore, limits: LimitsConfig):
        self.store = store
        self.limits = limits

    async def is_allowed(self, email: str, list_type: str | None = None) -> bool:
        """Whether the email signed up to the given list (the free-resume list by default)."""
        return await asyncio.to_thread(
            self.store.is_on_list, email, list_type or self.limits.allow_list_type
        )

    async def resolve_plan(self, email: str) -> PlanStatus:
        subscription = await asyncio.to_thread(self.store.find_subscription, email)
        if subscription is None:
            return PlanStatus(exempt=False)
        exempt = (
            subscription.status in self.limits.active_statuses
            and subscription.plan_id in self.limits.premium_plans
        )
        return PlanStatus(exempt=exempt, plan_id=subscription.plan_id, status=subscription.status)

    async def check_limit(self, email: str) -> LimitCheck:
        plan = await self.resolve_plan(email)
        count = await asyncio.to_thread(self.store.count_records, email)
        if plan.exempt:
            return LimitCheck(can_generate=True, count=count, limit=None, exempt=True)
        limit = self.limits.free_generations
        return LimitCheck(can_generate=count < limit, count=count, limit=limit)

    async def record(self, email: str, details: UsageDetails) -> UsageRecord:
        """Append one usage record for a non-exempt identity.

        Raises:
            ExemptIdentityError: if the identity's plan is exempt.
        """
        plan = await self.resolve_plan(email)
        if plan.exempt:
            raise ExemptIdentityError(f"Refusing to record usage for exempt identity {email}")
        record = UsageRecord(email=email, **details.model_dump())
        await asyncio.to_thread(self.store.append, record)
        logger.info("Recorded %s generation for %s (template=%s)", record.input_type, email, record.template_id)
        return record
