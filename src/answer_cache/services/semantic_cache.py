"""Semantic tier: nearest-neighbour search over question embeddings."""

from collections.abc import Callable
from dataclasses import replace
from datetime import datetime

from answer_cache.config import settings
from answer_cache.entities import CacheMatch, Category
from answer_cache.errors import EmbeddingFailure
from answer_cache.logging import get_logger, log_cache_operation
from answer_cache.protocols import AnswerStore, EmbeddingProvider
from answer_cache.services.rate_limiter import utc_now

logger = get_logger(__name__)


class SemanticCache:
    """Embedding-similarity lookup over stored answers.

    A match is served only when its cosine similarity is at least
    ``threshold`` (0.92 unless configured otherwise). A hit does not alias
    the new question's hash to the matched entry, so the next occurrence of
    the same paraphrase searches again.
    """

    def __init__(
        self,
        store: AnswerStore,
        embedding_provider: EmbeddingProvider,
        threshold: float | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        """Initialize the semantic tier.

        Args:
            store: Storage backend with nearest-neighbour search.
            embedding_provider: Embedding generation service.
            threshold: Minimum cosine similarity for a hit (0-1). Defaults to settings.
            clock: Source of the last-hit timestamp.
        """
        threshold = threshold if threshold is not None else settings.cache_similarity_threshold
        if not 0 <= threshold <= 1:
            raise ValueError("Threshold must be between 0 and 1")
        self._store = store
        self._embeddings = embedding_provider
        self._threshold = threshold
        self._clock = clock

    async def embed(self, text: str) -> list[float] | None:
        """Embed ``text``; None when the provider fails (the tier is then skipped)."""
        try:
            return await self._embeddings.encode(text)
        except EmbeddingFailure as e:
            logger.warning("Embedding failed, skipping semantic cache", kind=e.kind, error=e.message)
            return None

    async def lookup_similar(
        self,
        embedding: list[float],
        category: Category | None = None,
    ) -> CacheMatch | None:
        """Best stored match with similarity >= threshold, or None.

        Args:
            embedding: Embedding of the incoming question
            category: Restrict the search to one category
        """
        matches = await self._store.find_similar(embedding, limit=1, category=category)
        if not matches or matches[0].similarity < self._threshold:
            best = round(matches[0].similarity, 4) if matches else None
            log_cache_operation(logger, "semantic", "-", hit=False, best_similarity=best)
            return None

        match = matches[0]
        hit_count = await self._store.record_hit(match.question_hash, self._clock())
        log_cache_operation(
            logger,
            "semantic",
            match.question_hash,
            hit=True,
            similarity=round(match.similarity, 4),
            hit_count=hit_count,
        )
        return replace(match, hit_count=hit_count)

    @property
    def threshold(self) -> float:
        return self._threshold

    @property
    def embedding_provider(self) -> EmbeddingProvider:
        return self._embeddings
