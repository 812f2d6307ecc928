"""Error taxonomy for the answer layer.

Every error carries a machine-readable ``kind`` and the HTTP status the
handler layer answers with. Errors raised before a stream starts are turned
into a single JSON body; see ``answer_cache.handlers``.
"""

from datetime import datetime
from typing import Any


class AssistantError(Exception):
    """Base class for all errors surfaced by the answer layer."""

    kind = "assistant_error"
    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the structured error body sent to callers."""
        return {"kind": self.kind, "message": self.message}


class ValidationError(AssistantError):
    """Malformed or empty input, rejected before any external call."""

    kind = "validation_error"
    status_code = 400


class Unauthorized(AssistantError):
    """The credential could not be resolved to a user and tenant."""

    kind = "unauthorized"
    status_code = 401


class AssistantDisabled(AssistantError):
    """The tenant has the assistant switched off."""

    kind = "assistant_disabled"
    status_code = 403

    def __init__(self, tenant_id: str) -> None:
        super().__init__("The assistant is disabled for this organization.")
        self.tenant_id = tenant_id


class QuotaExceeded(AssistantError):
    """The user's daily request quota is used up."""

    kind = "quota_exceeded"
    status_code = 429

    def __init__(self, limit: int, resets_at: datetime) -> None:
        super().__init__(f"Daily limit of {limit} questions reached. Try again tomorrow.")
        self.limit = limit
        self.remaining = 0
        self.resets_at = resets_at

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data.update(
            limit=self.limit,
            remaining=self.remaining,
            resets_at=self.resets_at.isoformat(),
        )
        return data


class EmbeddingFailure(AssistantError):
    """The embedding provider failed. Non-fatal: the semantic tier is skipped."""

    kind = "embedding_failure"


class UpstreamError(AssistantError):
    """Base class for failures of the upstream completion provider."""

    kind = "upstream_failure"
    status_code = 502

    def __init__(self, message: str, upstream_status: int | None = None) -> None:
        super().__init__(message)
        self.upstream_status = upstream_status


class UpstreamThrottled(UpstreamError):
    """The provider is rate limiting us. Retry later."""

    kind = "upstream_throttled"
    status_code = 429


class UpstreamQuotaExhausted(UpstreamError):
    """Provider credits or billing exhausted. Needs administrative action."""

    kind = "upstream_quota_exhausted"
    status_code = 402


class UpstreamGenericFailure(UpstreamError):
    """Any other provider failure. Retry is at the caller's discretion."""

    kind = "upstream_failure"
    status_code = 502


class CacheWriteFailure(AssistantError):
    """Persisting a new answer failed. Logged only, never surfaced."""

    kind = "cache_write_failure"
