"""Usage ledger and free-tier limits."""

from resume_forge.usage.limiter import UsageLimiter
from resume_forge.usage.models import LimitCheck, PlanStatus, UsageDetails, UsageRecord
from resume_forge.usage.store import LedgerStore

__all__ = ["LedgerStore", "LimitCheck", "PlanStatus", "UsageDetails", "UsageLimiter", "UsageRecord"]
