"""In-memory implementations of the storage protocols.

Used by the test-suite and by ``STORE_BACKEND=memory`` for local runs
without Redis. State lives only as long as the process.
"""

from dataclasses import replace
from datetime import date, datetime

import numpy as np

from answer_cache.entities import (
    CacheEntry,
    CacheMatch,
    Category,
    ConsumptionRecord,
    Identity,
    RateLimitRecord,
)


class InMemoryCacheRepository:
    """AnswerStore backed by a dict, with brute-force cosine search."""

    def __init__(self) -> None:
        self._entries: dict[str, CacheEntry] = {}

    async def get(self, question_hash: str) -> CacheEntry | None:
        return self._entries.get(question_hash)

    async def insert(self, entry: CacheEntry) -> bool:
        if entry.question_hash in self._entries:
            return False
        self._entries[entry.question_hash] = entry
        return True

    async def record_hit(self, question_hash: str, at: datetime) -> int:
        entry = self._entries[question_hash]
        entry = replace(entry, hit_count=entry.hit_count + 1, last_hit_at=at)
        self._entries[question_hash] = entry
        return entry.hit_count

    async def find_similar(
        self,
        vector: list[float],
        limit: int = 1,
        category: Category | None = None,
    ) -> list[CacheMatch]:
        candidates = [
            entry
            for entry in self._entries.values()
            if entry.embedding is not None and (category is None or entry.category == category)
        ]
        if not candidates:
            return []

        query = np.asarray(vector, dtype=np.float32)
        matrix = np.asarray([entry.embedding for entry in candidates], dtype=np.float32)
        norms = np.linalg.norm(matrix, axis=1) * np.linalg.norm(query)
        similarities = (matrix @ query) / np.where(norms == 0, 1.0, norms)

        best = np.argsort(-similarities)[:limit]
        return [
            CacheMatch(
                question_hash=candidates[i].question_hash,
                question=candidates[i].question,
                answer=candidates[i].answer,
                category=candidates[i].category,
                similarity=float(similarities[i]),
                model=candidates[i].model,
                hit_count=candidates[i].hit_count,
            )
            for i in best
        ]

    async def count_all(self) -> int:
        return len(self._entries)

    async def health_check(self) -> bool:
        return True

    @property
    def index_name(self) -> str:
        return "memory"

    @property
    def entries(self) -> dict[str, CacheEntry]:
        """Stored entries keyed by hash (for testing)."""
        return self._entries


class InMemoryRateLimitRepository:
    """RateLimitStore backed by a dict keyed on (user_id, day)."""

    def __init__(self) -> None:
        self._records: dict[tuple[str, date], RateLimitRecord] = {}

    async def get(self, user_id: str, day: date) -> RateLimitRecord | None:
        return self._records.get((user_id, day))

    async def increment(self, user_id: str, tenant_id: str, day: date, at: datetime) -> int:
        current = self._records.get((user_id, day))
        count = (current.request_count if current else 0) + 1
        self._records[(user_id, day)] = RateLimitRecord(
            user_id=user_id,
            tenant_id=tenant_id,
            day=day,
            request_count=count,
            last_request_at=at,
        )
        return count


class InMemoryConsumptionLogger:
    def __init__(self) -> None:
        self.records: list[ConsumptionRecord] = []

    async def record(self, record: ConsumptionRecord) -> None:
        self.records.append(record)


class InMemoryTenantResolver:
    """Resolves credentials from a fixed mapping."""

    def __init__(self, identities: dict[str, Identity] | None = None) -> None:
        self._identities = dict(identities or {})

    def register(self, credential: str, identity: Identity) -> None:
        self._identities[credential] = identity

    async def resolve(self, credential: str) -> Identity | None:
        return self._identities.get(credential)
