"""Persists completed live answers so later questions can be served from cache."""

import asyncio
from collections.abc import Callable
from datetime import datetime, timedelta

from answer_cache.config import settings
from answer_cache.entities import CacheEntry, Category
from answer_cache.errors import CacheWriteFailure
from answer_cache.logging import get_logger, log_cache_operation
from answer_cache.normalizer import NormalizedQuestion
from answer_cache.services.background import BackgroundTasks
from answer_cache.services.exact_cache import ExactCache
from answer_cache.services.rate_limiter import utc_now

logger = get_logger(__name__)


def estimate_tokens(text: str) -> int:
    """Rough output token count: one token per four characters.

    An estimate for metering dashboards, not a billing figure.
    """
    return len(text) // 4


class CacheWriter:
    """Schedules insert-or-ignore writes of new answers in the background.

    The caller never waits on the write and never sees its failure; both
    happen after the answer has already been streamed.
    """

    def __init__(
        self,
        exact_cache: ExactCache,
        tasks: BackgroundTasks | None = None,
        min_answer_chars: int | None = None,
        ttl_days: int | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._exact = exact_cache
        self._tasks = tasks or BackgroundTasks()
        self._min_answer_chars = (
            min_answer_chars if min_answer_chars is not None else settings.cache_min_answer_chars
        )
        self._ttl = timedelta(days=ttl_days if ttl_days is not None else settings.cache_entry_ttl_days)
        self._clock = clock

    def build_entry(
        self,
        question: str,
        normalized: NormalizedQuestion,
        category: Category,
        embedding: list[float] | None,
        answer: str,
        model: str,
    ) -> CacheEntry | None:
        """The entry to store, or None when the answer is too short to keep."""
        if len(answer) < self._min_answer_chars:
            return None
        return self.new_entry(question, normalized, category, embedding, answer, model)

    def new_entry(
        self,
        question: str,
        normalized: NormalizedQuestion,
        category: Category,
        embedding: list[float] | None,
        answer: str,
        model: str,
    ) -> CacheEntry:
        now = self._clock()
        return CacheEntry(
            question=question,
            normalized_question=normalized.normalized,
            question_hash=normalized.question_hash,
            answer=answer,
            category=category,
            model=model,
            token_estimate=estimate_tokens(answer),
            created_at=now,
            expires_at=now + self._ttl,
            embedding=embedding,
        )

    def schedule(
        self,
        question: str,
        normalized: NormalizedQuestion,
        category: Category,
        embedding: list[float] | None,
        answer: str,
        model: str,
    ) -> asyncio.Task | None:
        """Start a background write; returns the task, or None if nothing is written."""
        entry = self.build_entry(question, normalized, category, embedding, answer, model)
        if entry is None:
            log_cache_operation(
                logger,
                "writer",
                normalized.question_hash,
                skipped="answer_too_short",
                answer_chars=len(answer),
            )
            return None
        return self._tasks.spawn(self._write(entry), name=f"cache-write-{entry.question_hash[:12]}")

    async def _write(self, entry: CacheEntry) -> None:
        try:
            inserted = await self._exact.store(entry)
        except Exception as e:
            failure = CacheWriteFailure(f"Could not store answer: {e}")
            logger.error(
                "Cache write failed",
                kind=failure.kind,
                cache_key=entry.question_hash,
                error=str(e),
            )
            return
        log_cache_operation(
            logger,
            "writer",
            entry.question_hash,
            inserted=inserted,
            token_estimate=entry.token_estimate,
        )

    async def wait_idle(self) -> None:
        await self._tasks.wait_idle()
