"""Redis implementation of AnswerStore.

This repository uses Redis Stack with vector search capabilities (HNSW index).
It's the default implementation and satisfies the AnswerStore protocol.

Entries live in hashes keyed ``<index_name>:<question_hash>``, so the exact
tier is a plain HGETALL and the hash is unique by construction.
"""

import struct
from datetime import datetime, timezone

from redis import asyncio as aioredis
from redis.exceptions import RedisError
from redisvl.index import AsyncSearchIndex
from redisvl.query import VectorQuery
from redisvl.query.filter import Tag

from answer_cache.config import get_redis_client, settings
from answer_cache.entities import CacheEntry, CacheMatch, Category
from answer_cache.logging import get_logger
from answer_cache.protocols import EmbeddingProvider

logger = get_logger(__name__)

# HSET only when the key does not exist yet; a single round-trip keeps it atomic.
INSERT_IF_ABSENT = """
if redis.call('EXISTS', KEYS[1]) == 1 then
    return 0
end
redis.call('HSET', KEYS[1], unpack(ARGV))
return 1
"""


def _to_ts(value: datetime) -> str:
    return str(value.timestamp())


def _from_ts(value: bytes | str) -> datetime:
    if isinstance(value, bytes):
        value = value.decode()
    return datetime.fromtimestamp(float(value), tz=timezone.utc)


def _pack(vector: list[float]) -> bytes:
    return struct.pack(f"{len(vector)}f", *vector)


def _unpack(raw: bytes) -> list[float]:
    return list(struct.unpack(f"{len(raw) // 4}f", raw))


class RedisCacheRepository:
    """Redis implementation using HNSW vector index.

    This class satisfies the AnswerStore protocol through structural
    typing - no explicit inheritance needed.

    Uses Redis Stack's vector search with:
    - HNSW (Hierarchical Navigable Small World) algorithm
    - COSINE distance metric (similarity = 1 - distance)
    - No TTL: expiration is advisory and enforced by a separate retention job
    """

    def __init__(
        self,
        redis_client: aioredis.Redis | None = None,
        embedding_provider: EmbeddingProvider | None = None,
        index_name: str | None = None,
    ) -> None:
        """Initialize the Redis cache repository.

        Args:
            redis_client: Async Redis client instance. If None, creates default.
            embedding_provider: Provider for getting vector dimension.
            index_name: Name of the Redis search index.
        """
        self._client = redis_client or get_redis_client()
        self._index_name = index_name or settings.cache_index_name
        # Default dimension for embeddinggemma
        self._dimension = embedding_provider.dimension if embedding_provider else 768
        self._index: AsyncSearchIndex | None = None
        self._insert_script = self._client.register_script(INSERT_IF_ABSENT)

    @classmethod
    def create(
        cls,
        embedding_provider: EmbeddingProvider | None = None,
        index_name: str | None = None,
    ) -> "RedisCacheRepository":
        """Factory method to create RedisCacheRepository with defaults.

        Args:
            embedding_provider: Provider for vector dimension.
            index_name: Redis index name. If None, uses settings.

        Returns:
            Configured RedisCacheRepository
        """
        return cls(embedding_provider=embedding_provider, index_name=index_name)

    def _key(self, question_hash: str) -> str:
        return f"{self._index_name}:{question_hash}"

    async def _ensure_index(self) -> AsyncSearchIndex:
        """Ensure the Redis vector index exists."""
        if self._index is not None:
            return self._index

        index_schema = {
            "index": {
                "name": self._index_name,
                "prefix": f"{self._index_name}:",
                "storage_type": "hash",
            },
            "fields": [
                {"name": "question_hash", "type": "tag"},
                {"name": "category", "type": "tag"},
                {"name": "question", "type": "text", "attrs": {"weight": 1.0}},
                {"name": "answer", "type": "text"},
                {
                    "name": "embedding",
                    "type": "vector",
                    "attrs": {
                        "dims": self._dimension,
                        "algorithm": "HNSW",
                        "metric": "COSINE",
                        "datatype": "FLOAT32",
                    },
                },
                {"name": "created_at", "type": "numeric"},
            ],
        }

        index = AsyncSearchIndex.from_dict(index_schema, redis_client=self._client)
        if await index.exists():
            logger.info("Using existing index", index=self._index_name)
        else:
            await index.create(overwrite=False)
            logger.info("Created new index", index=self._index_name, dims=self._dimension)

        self._index = index
        return index

    async def get(self, question_hash: str) -> CacheEntry | None:
        """Fetch an entry by question hash.

        Args:
            question_hash: The exact-cache key

        Returns:
            The entry, or None if absent
        """
        raw = await self._client.hgetall(self._key(question_hash))
        if not raw or b"answer" not in raw:
            return None

        fields = {k.decode(): v for k, v in raw.items()}
        text = {k: v.decode() for k, v in fields.items() if k != "embedding"}

        return CacheEntry(
            question=text["question"],
            normalized_question=text["normalized_question"],
            question_hash=text["question_hash"],
            answer=text["answer"],
            category=Category(text["category"]),
            model=text.get("model", ""),
            token_estimate=int(text.get("token_estimate", 0)),
            created_at=_from_ts(text["created_at"]),
            expires_at=_from_ts(text["expires_at"]),
            embedding=_unpack(fields["embedding"]) if "embedding" in fields else None,
            hit_count=int(text.get("hit_count", 0)),
            last_hit_at=_from_ts(text["last_hit_at"]) if "last_hit_at" in text else None,
        )

    async def insert(self, entry: CacheEntry) -> bool:
        """Store an entry unless its hash is already present.

        Args:
            entry: The entry to persist

        Returns:
            True if inserted, False if the hash already existed
        """
        await self._ensure_index()

        mapping: dict[str, str | bytes] = {
            "question": entry.question,
            "normalized_question": entry.normalized_question,
            "question_hash": entry.question_hash,
            "answer": entry.answer,
            "category": entry.category.value,
            "model": entry.model,
            "token_estimate": str(entry.token_estimate),
            "hit_count": str(entry.hit_count),
            "created_at": _to_ts(entry.created_at),
            "expires_at": _to_ts(entry.expires_at),
        }
        if entry.embedding is not None:
            mapping["embedding"] = _pack(entry.embedding)

        args: list[str | bytes] = []
        for name, value in mapping.items():
            args.extend((name, value))

        inserted = await self._insert_script(keys=[self._key(entry.question_hash)], args=args)
        return bool(inserted)

    async def record_hit(self, question_hash: str, at: datetime) -> int:
        """Bump hit count and last-hit timestamp of an entry.

        Returns:
            Hit count after the increment
        """
        key = self._key(question_hash)
        pipe = self._client.pipeline()
        pipe.hincrby(key, "hit_count", 1)
        pipe.hset(key, "last_hit_at", _to_ts(at))
        hit_count, _ = await pipe.execute()
        return int(hit_count)

    async def find_similar(
        self,
        vector: list[float],
        limit: int = 1,
        category: Category | None = None,
    ) -> list[CacheMatch]:
        """Find nearest entries by cosine similarity.

        Args:
            vector: The query embedding vector
            limit: Maximum number of results to return
            category: Restrict the search to one category

        Returns:
            Matches sorted by similarity, best first
        """
        index = await self._ensure_index()

        query = VectorQuery(
            vector=vector,
            vector_field_name="embedding",
            return_fields=["question_hash", "question", "answer", "category", "model", "hit_count"],
            num_results=limit,
            filter_expression=Tag("category") == category.value if category else None,
        )

        results = await index.query(query)

        matches = []
        for result in results:
            distance = float(result.get("vector_distance", 2.0))
            matches.append(
                CacheMatch(
                    question_hash=result["question_hash"],
                    question=result["question"],
                    answer=result["answer"],
                    category=Category(result["category"]),
                    similarity=1.0 - distance,
                    model=result.get("model", ""),
                    hit_count=int(result.get("hit_count", 0)),
                )
            )

        matches.sort(key=lambda m: m.similarity, reverse=True)
        return matches[:limit]

    async def count_all(self) -> int:
        """Count total entries in the cache."""
        count = 0
        async for _ in self._client.scan_iter(match=f"{self._index_name}:*"):
            count += 1
        return count

    async def health_check(self) -> bool:
        """Check if Redis is accessible.

        Returns:
            True if healthy, False otherwise
        """
        try:
            return bool(await self._client.ping())
        except RedisError:
            return False

    @property
    def index_name(self) -> str:
        return self._index_name

    @property
    def client(self) -> aioredis.Redis:
        """Get the Redis client."""
        return self._client
