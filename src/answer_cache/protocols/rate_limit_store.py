"""Rate limit counter storage protocol."""

from datetime import date, datetime
from typing import Protocol, runtime_checkable

from answer_cache.entities import RateLimitRecord


@runtime_checkable
class RateLimitStore(Protocol):
    """Protocol for per-user, per-day request counters."""

    async def get(self, user_id: str, day: date) -> RateLimitRecord | None:
        """Fetch the record for a user and day, None if no request yet."""
        ...

    async def increment(self, user_id: str, tenant_id: str, day: date, at: datetime) -> int:
        """Atomically add one request, creating the record if absent.

        Returns:
            The request count after the increment
        """
        ...
