"""Per-user, per-day request quota."""

from collections.abc import Callable
from datetime import datetime, time, timedelta, timezone

from answer_cache.config import settings
from answer_cache.entities import Identity, QuotaStatus
from answer_cache.errors import AssistantDisabled, QuotaExceeded
from answer_cache.logging import get_logger
from answer_cache.protocols import RateLimitStore

logger = get_logger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class RateLimiter:
    """Daily quota check backed by a RateLimitStore.

    The window is the UTC calendar day. ``check_and_consume`` reads the
    counter and then increments it in a second round-trip; two requests from
    the same user landing together can both pass the read and push the count
    one past the limit. The increment itself is atomic in the store, so no
    request is ever lost from the count.
    """

    def __init__(
        self,
        store: RateLimitStore,
        default_limit: int | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._store = store
        self._default_limit = (
            default_limit if default_limit is not None else settings.default_daily_limit
        )
        self._clock = clock

    def limit_for(self, identity: Identity) -> int:
        limit = identity.tenant.daily_limit
        return limit if limit is not None else self._default_limit

    async def check_and_consume(self, identity: Identity) -> QuotaStatus:
        """Admit one request or fail.

        Raises:
            AssistantDisabled: The tenant has the assistant switched off
            QuotaExceeded: The user already made ``limit`` requests today
        """
        if not identity.tenant.assistant_enabled:
            raise AssistantDisabled(identity.tenant_id)

        now = self._clock()
        today = now.date()
        resets_at = datetime.combine(today + timedelta(days=1), time.min, tzinfo=timezone.utc)
        limit = self.limit_for(identity)

        record = await self._store.get(identity.user_id, today)
        used = record.request_count if record else 0
        if used >= limit:
            logger.info("Daily quota exhausted", user_id=identity.user_id, limit=limit)
            raise QuotaExceeded(limit=limit, resets_at=resets_at)

        count = await self._store.increment(identity.user_id, identity.tenant_id, today, now)
        return QuotaStatus(limit=limit, remaining=max(limit - count, 0), resets_at=resets_at)
