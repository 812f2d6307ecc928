"""Domain entities for internal representation.

These are pure dataclasses (frozen) used internally by services
and repositories. They are NOT used for API contracts - use DTOs
from the dto package for that.
"""

from .cache_entry import CacheEntry
from .cache_match import CacheMatch
from .category import Category
from .consumption import ConsumptionRecord
from .conversation import ASSISTANT, ROLES, USER, ChatTurn
from .identity import Identity, TenantSettings
from .rate_limit import QuotaStatus, RateLimitRecord

__all__ = [
    "CacheEntry",
    "CacheMatch",
    "Category",
    "ChatTurn",
    "ConsumptionRecord",
    "Identity",
    "QuotaStatus",
    "RateLimitRecord",
    "TenantSettings",
    "USER",
    "ASSISTANT",
    "ROLES",
]
