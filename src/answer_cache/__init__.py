"""Answer Cache - cached, rate-limited answers for a community Bible assistant.

Questions are answered from an exact cache (hash of the normalized
question), then a semantic cache (embedding similarity), and only then by
the upstream model, whose answer is streamed and written back.

Layers:
    - protocols: Interface contracts (AnswerStore, EmbeddingProvider, ...)
    - repositories: Data access implementations (Redis, in-memory, HTTP clients)
    - services: Business logic
    - handlers: HTTP endpoint handlers
    - dto: Data transfer objects (API contracts)
    - entities: Domain models (internal)

Usage:
    ```python
    from answer_cache.services import AssistantService

    service = AssistantService.create(
        store=store,
        rate_limit_store=rate_limits,
        embedding_provider=embeddings,
        completion_provider=completions,
    )
    stream = await service.answer(turns, identity)
    ```

For HTTP API:
    ```python
    from answer_cache.api.app import app
    ```
"""

__version__ = "0.1.0"

from answer_cache.classifier import classify
from answer_cache.config import get_redis_client, settings
from answer_cache.dto import ChatMessage, ChatRequest
from answer_cache.entities import CacheEntry, CacheMatch, Category, ChatTurn, Identity, TenantSettings
from answer_cache.errors import AssistantError
from answer_cache.handlers import ChatHandler
from answer_cache.normalizer import normalize, normalize_question
from answer_cache.protocols import AnswerStore, CompletionProvider, EmbeddingProvider, RateLimitStore
from answer_cache.repositories import CompletionClient, OllamaEmbeddingProvider, RedisCacheRepository
from answer_cache.services import AnswerStream, AssistantService

__all__ = [
    "__version__",
    # Configuration
    "settings",
    "get_redis_client",
    # Protocols (interfaces)
    "AnswerStore",
    "CompletionProvider",
    "EmbeddingProvider",
    "RateLimitStore",
    # Services (business logic)
    "AnswerStream",
    "AssistantService",
    "classify",
    "normalize",
    "normalize_question",
    # Handlers (HTTP)
    "ChatHandler",
    # Repositories (data access)
    "CompletionClient",
    "OllamaEmbeddingProvider",
    "RedisCacheRepository",
    # Entities (domain models)
    "CacheEntry",
    "CacheMatch",
    "Category",
    "ChatTurn",
    "Identity",
    "TenantSettings",
    # Errors
    "AssistantError",
    # DTOs (API contracts)
    "ChatMessage",
    "ChatRequest",
]
