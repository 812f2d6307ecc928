"""Redis-backed identity and tenant settings lookup.

Credentials are written by the authentication service, tenant settings by
the admin panel; this layer only reads them:

- ``<prefix>:credential:<credential>`` -> {user_id, tenant_id}
- ``<prefix>:tenant:<tenant_id>`` -> {assistant_enabled, daily_limit}
"""

from redis import asyncio as aioredis

from answer_cache.config import get_redis_client
from answer_cache.entities import Identity, TenantSettings


class RedisTenantResolver:
    def __init__(
        self,
        redis_client: aioredis.Redis | None = None,
        prefix: str = "ai_identity",
    ) -> None:
        self._client = redis_client or get_redis_client()
        self._prefix = prefix

    @classmethod
    def create(cls, prefix: str = "ai_identity") -> "RedisTenantResolver":
        return cls(prefix=prefix)

    async def resolve(self, credential: str) -> Identity | None:
        raw = await self._client.hgetall(f"{self._prefix}:credential:{credential}")
        if not raw:
            return None
        who = {k.decode(): v.decode() for k, v in raw.items()}
        if "user_id" not in who or "tenant_id" not in who:
            return None

        tenant_raw = await self._client.hgetall(f"{self._prefix}:tenant:{who['tenant_id']}")
        tenant = {k.decode(): v.decode() for k, v in tenant_raw.items()}

        limit = tenant.get("daily_limit")
        return Identity(
            user_id=who["user_id"],
            tenant_id=who["tenant_id"],
            tenant=TenantSettings(
                assistant_enabled=tenant.get("assistant_enabled", "true").lower() == "true",
                daily_limit=int(limit) if limit else None,
            ),
        )
