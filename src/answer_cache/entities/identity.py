"""Caller identity resolved from a credential."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class TenantSettings:
    """Per-tenant assistant configuration.

    A ``daily_limit`` of None means the configured default applies.
    """

    assistant_enabled: bool = True
    daily_limit: int | None = None


@dataclass(frozen=True)
class Identity:
    user_id: str
    tenant_id: str
    tenant: TenantSettings = field(default_factory=TenantSettings)
