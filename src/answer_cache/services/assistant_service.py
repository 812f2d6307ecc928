"""Answer orchestration: quota, cache tiers, upstream call, write-back.

This service coordinates the rate limiter, both cache tiers, the completion
provider, the stream emitter and the background writers. It depends on
protocols only; concrete backends are chosen in ``api.dependencies``.
"""

from collections.abc import AsyncIterator, Awaitable, Callable, Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from answer_cache.classifier import classify
from answer_cache.config import settings
from answer_cache.entities import ROLES, USER, ChatTurn, Identity, QuotaStatus
from answer_cache.errors import ValidationError
from answer_cache.logging import get_logger
from answer_cache.normalizer import normalize_question
from answer_cache.protocols import (
    AnswerStore,
    CompletionProvider,
    ConsumptionLogger,
    EmbeddingProvider,
    RateLimitStore,
)
from answer_cache.services.background import BackgroundTasks
from answer_cache.services.cache_writer import CacheWriter
from answer_cache.services.consumption import ConsumptionMeter
from answer_cache.services.exact_cache import ExactCache
from answer_cache.services.rate_limiter import RateLimiter, utc_now
from answer_cache.services.semantic_cache import SemanticCache
from answer_cache.services.stream_emitter import StreamEmitter, StreamEvent

logger = get_logger(__name__)

EXACT = "exact"
SEMANTIC = "semantic"
LIVE = "live"
SEED_MODEL = "seed"


@dataclass
class AnswerStream:
    """A started answer.

    Attributes:
        source: Where the answer comes from: "exact", "semantic" or "live"
        quota: The caller's quota after this request was admitted
        question_hash: Exact-cache key of the question
        events: Ordered text chunks, then one ``done`` event
        release: Frees the upstream call behind a live answer, if any
    """

    source: str
    quota: QuotaStatus
    question_hash: str
    events: AsyncIterator[StreamEvent]
    release: Callable[[], Awaitable[None]] | None = None

    def __aiter__(self) -> AsyncIterator[StreamEvent]:
        return self.events

    async def aclose(self) -> None:
        """Stop the stream; a live answer's upstream call is aborted.

        Safe to call more than once, and before the first event is read.
        """
        try:
            await self.events.aclose()
        finally:
            if self.release is not None:
                await self.release()

    async def text(self) -> str:
        """Consume the whole stream and return the concatenated answer."""
        return "".join([event.text async for event in self.events])


class AssistantService:
    """Answers questions from cache when possible, from the model otherwise.

    Example:
        ```python
        service = AssistantService.create(
            store=RedisCacheRepository.create(embedding_provider=provider),
            rate_limit_store=RedisRateLimitRepository.create(),
            embedding_provider=provider,
            completion_provider=CompletionClient.create(),
        )
        stream = await service.answer([ChatTurn("user", "O que é fé?")], identity)
        async for event in stream:
            ...
        ```
    """

    def __init__(
        self,
        store: AnswerStore,
        rate_limit_store: RateLimitStore,
        embedding_provider: EmbeddingProvider,
        completion_provider: CompletionProvider,
        consumption_logger: ConsumptionLogger | None = None,
        cache_enabled: bool | None = None,
        similarity_threshold: float | None = None,
        filter_by_category: bool | None = None,
        min_answer_chars: int | None = None,
        replay_delay_ms: int | None = None,
        default_daily_limit: int | None = None,
        max_question_chars: int | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        """Initialize the assistant service.

        Args:
            store: Answer storage backend (required).
            rate_limit_store: Daily counter storage (required).
            embedding_provider: Embedding generation service (required).
            completion_provider: Upstream model (required).
            consumption_logger: Metering sink. None disables metering.
            cache_enabled: Global cache switch. Defaults to settings.
            similarity_threshold: Minimum cosine similarity for a semantic hit.
            filter_by_category: Restrict semantic search to the question's category.
            min_answer_chars: Shorter answers are never cached.
            replay_delay_ms: Pause between replayed chunks.
            default_daily_limit: Quota for tenants without their own limit.
            max_question_chars: Longer questions are rejected.
            clock: Time source (UTC), shared by every component.
        """
        self._store = store
        self._completions = completion_provider
        self._tasks = BackgroundTasks()
        self._cache_enabled = settings.cache_enabled if cache_enabled is None else cache_enabled
        self._filter_by_category = (
            settings.semantic_filter_by_category if filter_by_category is None else filter_by_category
        )
        self._max_question_chars = max_question_chars or settings.max_question_chars

        self._rate_limiter = RateLimiter(rate_limit_store, default_limit=default_daily_limit, clock=clock)
        self._exact = ExactCache(store, clock=clock)
        self._semantic = SemanticCache(store, embedding_provider, threshold=similarity_threshold, clock=clock)
        self._writer = CacheWriter(self._exact, tasks=self._tasks, min_answer_chars=min_answer_chars, clock=clock)
        self._meter = ConsumptionMeter(consumption_logger, tasks=self._tasks, clock=clock)
        self._emitter = StreamEmitter(replay_delay_ms=replay_delay_ms)

    @classmethod
    def create(
        cls,
        store: AnswerStore,
        rate_limit_store: RateLimitStore,
        embedding_provider: EmbeddingProvider,
        completion_provider: CompletionProvider,
        consumption_logger: ConsumptionLogger | None = None,
    ) -> "AssistantService":
        """Factory method using configured defaults for every knob."""
        return cls(
            store=store,
            rate_limit_store=rate_limit_store,
            embedding_provider=embedding_provider,
            completion_provider=completion_provider,
            consumption_logger=consumption_logger,
        )

    def validate(self, turns: Sequence[ChatTurn]) -> str:
        """Check the conversation and return the question to answer.

        The question is the content of the last turn, which must come from
        the user. Earlier turns only matter to the upstream model.

        Raises:
            ValidationError: If the conversation cannot be answered
        """
        if not turns:
            raise ValidationError("The conversation is empty.")
        for turn in turns:
            if turn.role not in ROLES:
                raise ValidationError(f"Unknown message role: {turn.role!r}.")
        if turns[-1].role != USER:
            raise ValidationError("The last message must come from the user.")

        question = turns[-1].content.strip()
        if not question:
            raise ValidationError("The question is empty.")
        if len(question) > self._max_question_chars:
            raise ValidationError(
                f"The question is too long (maximum {self._max_question_chars} characters)."
            )
        return question

    async def answer(self, turns: Sequence[ChatTurn], identity: Identity) -> AnswerStream:
        """Start answering the last user turn of ``turns``.

        Lookup order: exact cache, then semantic cache, then the upstream
        model. Everything that can fail the request happens before this
        returns; the returned stream only fails if the upstream breaks
        mid-answer.

        Raises:
            ValidationError, AssistantDisabled, QuotaExceeded,
            UpstreamThrottled, UpstreamQuotaExhausted, UpstreamGenericFailure
        """
        question = self.validate(turns)
        quota = await self._rate_limiter.check_and_consume(identity)

        normalized = normalize_question(question)
        category = classify(question)
        log = logger.bind(
            user_id=identity.user_id,
            tenant_id=identity.tenant_id,
            cache_key=normalized.question_hash,
            category=category.value,
        )

        embedding = None
        if self._cache_enabled:
            entry = await self._exact.lookup(normalized.question_hash)
            if entry is not None:
                log.info("Answer served", source=EXACT, hit_count=entry.hit_count)
                self._meter.record(identity, EXACT, entry.question_hash, entry.model, entry.answer)
                return AnswerStream(EXACT, quota, normalized.question_hash, self._emitter.replay(entry.answer))

            if normalized.normalized:
                embedding = await self._semantic.embed(normalized.normalized)
            if embedding is not None:
                match = await self._semantic.lookup_similar(
                    embedding,
                    category=category if self._filter_by_category else None,
                )
                if match is not None:
                    log.info(
                        "Answer served",
                        source=SEMANTIC,
                        matched_key=match.question_hash,
                        similarity=round(match.similarity, 4),
                    )
                    self._meter.record(
                        identity, SEMANTIC, match.question_hash, match.model, match.answer
                    )
                    return AnswerStream(
                        SEMANTIC, quota, normalized.question_hash, self._emitter.replay(match.answer)
                    )

        live = await self._completions.open(turns)
        model = self._completions.model
        log.info("Answer served", source=LIVE, model=model)

        def on_complete(answer: str) -> None:
            if self._cache_enabled:
                self._writer.schedule(question, normalized, category, embedding, answer, model)
            self._meter.record(identity, LIVE, normalized.question_hash, model, answer)

        return AnswerStream(
            LIVE,
            quota,
            normalized.question_hash,
            self._emitter.relay(live, on_complete),
            release=live.aclose,
        )

    async def seed(self, pairs: Iterable[tuple[str, str]], model: str = SEED_MODEL) -> dict[str, int]:
        """Warm the cache with curated question and answer pairs.

        Each question gets the same key, category and embedding a live
        answer would get, so seeded entries are served by both tiers. An
        embedding failure stores the entry without a vector; it is then
        reachable by the exact tier only. Existing keys are left untouched.

        Raises:
            ValidationError: If a question or answer is blank
        """
        inserted = skipped = 0
        for question, answer in pairs:
            question, answer = question.strip(), answer.strip()
            if not question or not answer:
                raise ValidationError("Seed pairs need a question and an answer.")

            normalized = normalize_question(question)
            embedding = None
            if normalized.normalized:
                embedding = await self._semantic.embed(normalized.normalized)
            entry = self._writer.new_entry(
                question, normalized, classify(question), embedding, answer, model
            )
            if await self._exact.store(entry):
                inserted += 1
            else:
                skipped += 1

        logger.info("Cache seeded", inserted=inserted, skipped=skipped, model=model)
        return {"inserted": inserted, "skipped": skipped}

    async def get_stats(self) -> dict[str, Any]:
        """Get cache statistics."""
        return {
            "total_entries": await self._store.count_all(),
            "index_name": self._store.index_name,
            "cache_enabled": self._cache_enabled,
            "similarity_threshold": self._semantic.threshold,
            "embedding_model": self._semantic.embedding_provider.model_name,
            "completion_model": self._completions.model,
            "pending_writes": self._tasks.pending,
        }

    async def is_healthy(self) -> bool:
        return await self._store.health_check()

    async def is_embedding_available(self) -> bool:
        return await self._semantic.embedding_provider.is_available()

    async def drain(self) -> None:
        """Wait for pending cache writes and consumption records."""
        await self._tasks.wait_idle()

    @property
    def cache_enabled(self) -> bool:
        return self._cache_enabled

    @property
    def writer(self) -> CacheWriter:
        return self._writer
