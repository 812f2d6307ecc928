"""Rate limiting domain entities."""

from dataclasses import dataclass
from datetime import date, datetime


@dataclass(frozen=True)
class RateLimitRecord:
    """Requests made by one user on one calendar day (UTC)."""

    user_id: str
    tenant_id: str
    day: date
    request_count: int
    last_request_at: datetime


@dataclass(frozen=True)
class QuotaStatus:
    """Quota left for the current window after a request was admitted."""

    limit: int
    remaining: int
    resets_at: datetime
