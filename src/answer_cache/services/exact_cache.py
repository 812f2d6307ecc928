"""Exact tier: lookup by the hash of the normalized question."""

from collections.abc import Callable
from dataclasses import replace
from datetime import datetime

from answer_cache.entities import CacheEntry
from answer_cache.logging import get_logger, log_cache_operation
from answer_cache.protocols import AnswerStore
from answer_cache.services.rate_limiter import utc_now

logger = get_logger(__name__)


class ExactCache:
    def __init__(self, store: AnswerStore, clock: Callable[[], datetime] = utc_now) -> None:
        self._store = store
        self._clock = clock

    async def lookup(self, question_hash: str) -> CacheEntry | None:
        """Return the entry for ``question_hash`` and count the hit, or None."""
        entry = await self._store.get(question_hash)
        if entry is None:
            log_cache_operation(logger, "exact", question_hash, hit=False)
            return None

        now = self._clock()
        hit_count = await self._store.record_hit(question_hash, now)
        log_cache_operation(logger, "exact", question_hash, hit=True, hit_count=hit_count)
        return replace(entry, hit_count=hit_count, last_hit_at=now)

    async def store(self, entry: CacheEntry) -> bool:
        """Insert-or-ignore keyed by the question hash."""
        inserted = await self._store.insert(entry)
        log_cache_operation(logger, "exact", entry.question_hash, inserted=inserted)
        return inserted
