"""HTTP handlers for the assistant endpoints.

Handlers convert between DTOs (API contracts) and service calls.
They handle HTTP concerns like status codes, streaming framing, and error
bodies.
"""

import json
from collections.abc import AsyncIterator

from fastapi.responses import JSONResponse, StreamingResponse
from starlette.background import BackgroundTask

from answer_cache.dto import (
    CacheStatsResponse,
    ChatRequest,
    HealthCheckResponse,
    SeedCacheRequest,
    SeedCacheResponse,
)
from answer_cache.entities import Identity
from answer_cache.errors import AssistantError, UpstreamError
from answer_cache.logging import get_logger
from answer_cache.services import AnswerStream, AssistantService

logger = get_logger(__name__)

SSE_DONE = "data: [DONE]\n\n"


def sse_chunk(text: str) -> str:
    """Frame a text chunk in the chat-completions streaming shape."""
    payload = {"choices": [{"delta": {"content": text}}]}
    return f"data: {json.dumps(payload, ensure_ascii=False)}\n\n"


def error_response(error: AssistantError) -> JSONResponse:
    """Single JSON body for a failure raised before streaming started."""
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


class ChatHandler:
    """HTTP handlers for chat, stats and health.

    Example:
        ```python
        handler = ChatHandler(assistant_service=service)

        @app.post("/chat")
        async def chat(request: ChatRequest, identity: IdentityDep):
            return await handler.chat(request, identity)
        ```
    """

    def __init__(self, assistant_service: AssistantService) -> None:
        """Initialize the chat handler.

        Args:
            assistant_service: The service answering questions (required).
        """
        self._assistant = assistant_service

    async def chat(self, request: ChatRequest, identity: Identity) -> StreamingResponse | JSONResponse:
        """Handle POST /chat requests.

        Returns:
            An SSE stream on success, or a JSON error body with the
            error's status code when the request fails before streaming
        """
        try:
            stream = await self._assistant.answer(request.to_turns(), identity)
        except AssistantError as e:
            logger.info(
                "Request rejected",
                kind=e.kind,
                status=e.status_code,
                user_id=identity.user_id,
                tenant_id=identity.tenant_id,
            )
            return error_response(e)

        headers = {
            "Cache-Control": "no-cache",
            "X-Answer-Source": stream.source,
            "X-RateLimit-Limit": str(stream.quota.limit),
            "X-RateLimit-Remaining": str(stream.quota.remaining),
        }
        return StreamingResponse(
            self._sse(stream),
            media_type="text/event-stream",
            headers=headers,
            background=BackgroundTask(stream.aclose),
        )

    async def _sse(self, stream: AnswerStream) -> AsyncIterator[str]:
        # A mid-stream upstream failure ends the body without [DONE].
        try:
            async for event in stream:
                if event.done:
                    yield SSE_DONE
                elif event.text:
                    yield sse_chunk(event.text)
        except UpstreamError as e:
            logger.error(
                "Upstream failed mid-stream",
                kind=e.kind,
                cache_key=stream.question_hash,
                error=e.message,
            )
        finally:
            await stream.aclose()

    async def seed_cache(self, request: SeedCacheRequest) -> SeedCacheResponse:
        """Handle POST /cache/seed requests."""
        result = await self._assistant.seed(request.to_pairs(), model=request.model)
        return SeedCacheResponse(
            success=True,
            inserted=result["inserted"],
            skipped=result["skipped"],
            message=f"Seeded {result['inserted']} entries, {result['skipped']} already cached",
        )

    async def get_stats(self) -> CacheStatsResponse:
        """Handle GET /cache/stats requests."""
        stats = await self._assistant.get_stats()
        return CacheStatsResponse(**stats)

    async def health_check(self, check_embedding: bool = False) -> HealthCheckResponse:
        """Handle GET /health requests.

        Args:
            check_embedding: Also check the embedding service (one encode call)
        """
        cache_healthy = await self._assistant.is_healthy()
        embedding_healthy = None
        if check_embedding:
            embedding_healthy = await self._assistant.is_embedding_available()

        healthy = cache_healthy and embedding_healthy is not False
        return HealthCheckResponse(
            status="healthy" if healthy else "unhealthy",
            cache_healthy=cache_healthy,
            embedding_healthy=embedding_healthy,
        )
