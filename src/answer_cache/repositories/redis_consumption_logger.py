"""Consumption records appended to a Redis stream."""

from redis import asyncio as aioredis

from answer_cache.config import get_redis_client, settings
from answer_cache.entities import ConsumptionRecord


class RedisConsumptionLogger:
    """Appends one stream entry per served answer (XADD).

    Aggregation into daily totals happens downstream of this layer.
    """

    def __init__(
        self,
        redis_client: aioredis.Redis | None = None,
        stream: str | None = None,
        maxlen: int | None = 100_000,
    ) -> None:
        self._client = redis_client or get_redis_client()
        self._stream = stream or settings.consumption_stream
        self._maxlen = maxlen

    @classmethod
    def create(cls, stream: str | None = None) -> "RedisConsumptionLogger":
        return cls(stream=stream)

    async def record(self, record: ConsumptionRecord) -> None:
        await self._client.xadd(
            self._stream,
            {
                "user_id": record.user_id,
                "tenant_id": record.tenant_id,
                "source": record.source,
                "from_cache": int(record.from_cache),
                "cache_key": record.cache_key,
                "model": record.model,
                "token_estimate": record.token_estimate,
                "estimated_cost": record.estimated_cost,
                "created_at": record.created_at.isoformat(),
            },
            maxlen=self._maxlen,
            approximate=True,
        )
