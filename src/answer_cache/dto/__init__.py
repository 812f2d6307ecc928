"""Data Transfer Objects for API contracts.

These Pydantic models define the external API contract.
They are used for request/response validation and serialization.

Internal domain logic should use entities from the entities package.
"""

from .requests import ChatMessage, ChatRequest, SeedCacheRequest, SeedPair
from .responses import CacheStatsResponse, ErrorResponse, HealthCheckResponse, SeedCacheResponse

__all__ = [
    "ChatMessage",
    "ChatRequest",
    "CacheStatsResponse",
    "ErrorResponse",
    "HealthCheckResponse",
    "SeedCacheRequest",
    "SeedCacheResponse",
    "SeedPair",
]
