"""Service layer for business logic.

This layer contains the core business logic and orchestration.
Services depend on protocols (interfaces), not concrete implementations,
making them testable and flexible.

Architecture:
    Handler -> Service -> Repository
    (HTTP)  -> (Business) -> (Data Access)

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
"""

from .assistant_service import EXACT, LIVE, SEMANTIC, AnswerStream, AssistantService
from .background import BackgroundTasks
from .cache_writer import CacheWriter, estimate_tokens
from .consumption import ConsumptionMeter
from .exact_cache import ExactCache
from .rate_limiter import RateLimiter, utc_now
from .semantic_cache import SemanticCache
from .stream_emitter import DONE_EVENT, StreamEmitter, StreamEvent, split_for_replay

__all__ = [
    "AnswerStream",
    "AssistantService",
    "BackgroundTasks",
    "CacheWriter",
    "ConsumptionMeter",
    "DONE_EVENT",
    "EXACT",
    "ExactCache",
    "LIVE",
    "RateLimiter",
    "SEMANTIC",
    "SemanticCache",
    "StreamEmitter",
    "StreamEvent",
    "estimate_tokens",
    "split_for_replay",
    "utc_now",
]
