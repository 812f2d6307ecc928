"""Identity / tenant resolver protocol."""

from typing import Protocol, runtime_checkable

from answer_cache.entities import Identity


@runtime_checkable
class TenantResolver(Protocol):
    async def resolve(self, credential: str) -> Identity | None:
        """Map an auth credential to the user, tenant and tenant settings.

        Returns:
            The identity, or None when the credential is unknown
        """
        ...
