"""Shared fakes and fixtures. No network or Redis is needed by the suite."""

from collections.abc import AsyncIterator, Sequence
from datetime import datetime, timedelta, timezone

import pytest

from answer_cache.classifier import classify
from answer_cache.entities import CacheEntry, ChatTurn, Identity
from answer_cache.errors import EmbeddingFailure
from answer_cache.normalizer import normalize, normalize_question
from answer_cache.repositories import (
    InMemoryCacheRepository,
    InMemoryConsumptionLogger,
    InMemoryRateLimitRepository,
)
from answer_cache.services import AssistantService, split_for_replay

DIMENSION = 64

FE_QUESTION = "O que é fé?"
FE_PARAPHRASE = "O que significa ter fé?"
HOPE_QUESTION = "O que é esperança?"
FE_ANSWER = (
    "Fé é a certeza daquilo que esperamos e a prova das coisas que não vemos "
    "(Hebreus 11:1). É confiar em Deus mesmo sem ver."
)


def padded(*values: float) -> list[float]:
    return list(values) + [0.0] * (DIMENSION - len(values))


# cos(FE_QUESTION, FE_PARAPHRASE) ~ 0.950, cos(FE_QUESTION, HOPE_QUESTION) ~ 0.900
KNOWN_VECTORS = {
    FE_QUESTION: padded(1.0, 0.0, 0.0),
    FE_PARAPHRASE: padded(0.95, 0.312, 0.0),
    HOPE_QUESTION: padded(0.9, 0.436, 0.0),
}


class FakeClock:
    def __init__(self, now: datetime | None = None) -> None:
        self.now = now or datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class FakeEmbeddingProvider:
    """Known questions get fixed vectors; any other text gets its own orthogonal axis.

    Vectors are keyed by normalized text, so a question and its normalized
    form embed the same.
    """

    dimension = DIMENSION
    model_name = "fake-embedder"

    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.calls: list[str] = []
        self._vectors = {normalize(question): vector for question, vector in KNOWN_VECTORS.items()}

    async def encode(self, text: str) -> list[float]:
        self.calls.append(text)
        if self.fail:
            raise EmbeddingFailure("embedding service down")
        key = normalize(text)
        if key not in self._vectors:
            axis = 8 + len(self._vectors)
            vector = [0.0] * DIMENSION
            vector[axis] = 1.0
            self._vectors[key] = vector
        return self._vectors[key]

    async def is_available(self) -> bool:
        return not self.fail


class FakeLive:
    def __init__(self, chunks: list[str], error: Exception | None = None) -> None:
        self.chunks = chunks
        self.error = error
        self.closed = False

    async def _deltas(self) -> AsyncIterator[str]:
        for chunk in self.chunks:
            yield chunk
        if self.error is not None:
            raise self.error

    def __aiter__(self) -> AsyncIterator[str]:
        return self._deltas()

    async def aclose(self) -> None:
        self.closed = True


class FakeCompletionProvider:
    """Streams a fixed answer and records every conversation it was given."""

    model = "fake-model"

    def __init__(
        self,
        answer: str = FE_ANSWER,
        open_error: Exception | None = None,
        stream_error: Exception | None = None,
    ) -> None:
        self.answer = answer
        self.open_error = open_error
        self.stream_error = stream_error
        self.calls: list[list[ChatTurn]] = []
        self.lives: list[FakeLive] = []

    async def open(self, turns: Sequence[ChatTurn]) -> FakeLive:
        self.calls.append(list(turns))
        if self.open_error is not None:
            raise self.open_error
        live = FakeLive(split_for_replay(self.answer), self.stream_error)
        self.lives.append(live)
        return live


def make_entry(
    question: str,
    answer: str = FE_ANSWER,
    embedding: list[float] | None = None,
    hit_count: int = 0,
    created_at: datetime | None = None,
) -> CacheEntry:
    normalized = normalize_question(question)
    created_at = created_at or datetime(2026, 1, 1, tzinfo=timezone.utc)
    return CacheEntry(
        question=question,
        normalized_question=normalized.normalized,
        question_hash=normalized.question_hash,
        answer=answer,
        category=classify(question),
        model="seed-model",
        token_estimate=len(answer) // 4,
        created_at=created_at,
        expires_at=created_at + timedelta(days=365),
        embedding=embedding if embedding is not None else KNOWN_VECTORS.get(question),
        hit_count=hit_count,
    )


def user(content: str) -> ChatTurn:
    return ChatTurn("user", content)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    return InMemoryCacheRepository()


@pytest.fixture
def rate_limits():
    return InMemoryRateLimitRepository()


@pytest.fixture
def consumption():
    return InMemoryConsumptionLogger()


@pytest.fixture
def embeddings():
    return FakeEmbeddingProvider()


@pytest.fixture
def completions():
    return FakeCompletionProvider()


@pytest.fixture
def identity():
    return Identity(user_id="user-1", tenant_id="tenant-1")


@pytest.fixture
def make_service(store, rate_limits, embeddings, completions, consumption, clock):
    """Build an AssistantService on the shared fakes; keyword arguments override knobs."""

    def _make(**overrides) -> AssistantService:
        options = {
            "store": store,
            "rate_limit_store": rate_limits,
            "embedding_provider": embeddings,
            "completion_provider": completions,
            "consumption_logger": consumption,
            "cache_enabled": True,
            "similarity_threshold": 0.92,
            "filter_by_category": False,
            "min_answer_chars": 50,
            "replay_delay_ms": 0,
            "default_daily_limit": 50,
            "max_question_chars": 4000,
            "clock": clock,
        }
        options.update(overrides)
        return AssistantService(**options)

    return _make


@pytest.fixture
def service(make_service):
    return make_service()
