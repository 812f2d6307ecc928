"""Redis implementation of RateLimitStore.

One hash per (user, UTC day): ``<prefix>:<user_id>:<YYYY-MM-DD>``. Keying on
the date is what resets the counter; nothing here deletes old records.
"""

from datetime import date, datetime, timezone

from redis import asyncio as aioredis

from answer_cache.config import get_redis_client, settings
from answer_cache.entities import RateLimitRecord


class RedisRateLimitRepository:
    """Daily request counters stored in Redis hashes."""

    def __init__(
        self,
        redis_client: aioredis.Redis | None = None,
        prefix: str | None = None,
    ) -> None:
        self._client = redis_client or get_redis_client()
        self._prefix = prefix or settings.rate_limit_prefix

    @classmethod
    def create(cls, prefix: str | None = None) -> "RedisRateLimitRepository":
        return cls(prefix=prefix)

    def _key(self, user_id: str, day: date) -> str:
        return f"{self._prefix}:{user_id}:{day.isoformat()}"

    async def get(self, user_id: str, day: date) -> RateLimitRecord | None:
        raw = await self._client.hgetall(self._key(user_id, day))
        if not raw:
            return None

        fields = {k.decode(): v.decode() for k, v in raw.items()}
        return RateLimitRecord(
            user_id=user_id,
            tenant_id=fields.get("tenant_id", ""),
            day=day,
            request_count=int(fields.get("request_count", 0)),
            last_request_at=datetime.fromtimestamp(
                float(fields.get("last_request_at", 0)), tz=timezone.utc
            ),
        )

    async def increment(self, user_id: str, tenant_id: str, day: date, at: datetime) -> int:
        key = self._key(user_id, day)
        pipe = self._client.pipeline(transaction=True)
        pipe.hincrby(key, "request_count", 1)
        pipe.hset(
            key,
            mapping={
                "tenant_id": tenant_id,
                "last_request_at": str(at.timestamp()),
            },
        )
        count, _ = await pipe.execute()
        return int(count)
