"""Protocol interfaces for swappable implementations.

This package contains protocol definitions using structural typing.
Protocols enable:
- Easy swapping of implementations (Redis -> in-memory, Ollama -> local, etc.)
- Unit testing with fake implementations
- Clear separation of concerns
"""

from .cache_store import AnswerStore
from .completion_provider import CompletionProvider, LiveStream
from .consumption_logger import ConsumptionLogger
from .embedding_provider import EmbeddingProvider
from .rate_limit_store import RateLimitStore
from .tenant_resolver import TenantResolver

__all__ = [
    "AnswerStore",
    "CompletionProvider",
    "ConsumptionLogger",
    "EmbeddingProvider",
    "LiveStream",
    "RateLimitStore",
    "TenantResolver",
]
