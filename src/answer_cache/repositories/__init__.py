"""Repository layer for data access.

This layer abstracts external dependencies (Redis, embedding services, the
completion gateway) behind protocol-based interfaces. This enables:
- Easy swapping of implementations (Redis -> in-memory, Ollama -> local, etc.)
- Unit testing with fake implementations
- Clear separation of concerns

The local sentence-transformers provider is not imported here to keep
package import light; import it from ``.local_embedding_provider``.
"""

from answer_cache.protocols import AnswerStore, EmbeddingProvider, RateLimitStore

from .completion_client import CompletionClient, LiveCompletion
from .memory_repository import (
    InMemoryCacheRepository,
    InMemoryConsumptionLogger,
    InMemoryRateLimitRepository,
    InMemoryTenantResolver,
)
from .ollama_embedding_provider import OllamaEmbeddingProvider
from .redis_consumption_logger import RedisConsumptionLogger
from .redis_rate_limit_repository import RedisRateLimitRepository
from .redis_repository import RedisCacheRepository
from .redis_tenant_resolver import RedisTenantResolver

__all__ = [
    "AnswerStore",
    "EmbeddingProvider",
    "RateLimitStore",
    "CompletionClient",
    "LiveCompletion",
    "InMemoryCacheRepository",
    "InMemoryConsumptionLogger",
    "InMemoryRateLimitRepository",
    "InMemoryTenantResolver",
    "OllamaEmbeddingProvider",
    "RedisCacheRepository",
    "RedisConsumptionLogger",
    "RedisRateLimitRepository",
    "RedisTenantResolver",
]
