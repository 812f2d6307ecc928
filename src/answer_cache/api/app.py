"""FastAPI application exposing the assistant over HTTP.

Run with ``python -m answer_cache.api.app`` or
``uvicorn answer_cache.api.app:app``.
"""

from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from answer_cache import __version__
from answer_cache.api.dependencies import HandlerDep, IdentityDep, lifespan
from answer_cache.config import settings
from answer_cache.dto import (
    CacheStatsResponse,
    ChatRequest,
    ErrorResponse,
    HealthCheckResponse,
    SeedCacheRequest,
    SeedCacheResponse,
)
from answer_cache.errors import AssistantError, ValidationError
from answer_cache.handlers import error_response

app = FastAPI(
    title="Answer Cache API",
    description="Cached, rate-limited streaming answers for the community Bible assistant",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,  # type: ignore[arg-type]
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Answer-Source", "X-RateLimit-Limit", "X-RateLimit-Remaining"],
)


@app.exception_handler(AssistantError)
async def assistant_error_handler(request: Request, exc: AssistantError) -> JSONResponse:
    return error_response(exc)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed bodies get the same 400 shape as service-side validation errors."""
    errors = exc.errors()
    detail = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
    return error_response(ValidationError(f"Invalid request body: {detail}"))


@app.get("/")
async def root() -> dict[str, Any]:
    """Root endpoint with API information."""
    return {
        "name": "Answer Cache API",
        "version": __version__,
        "description": "Cached, rate-limited streaming answers for the community Bible assistant",
        "endpoints": {
            "chat": "/chat",
            "stats": "/cache/stats",
            "seed": "/cache/seed",
            "health": "/health",
            "docs": "/docs",
        },
    }


@app.get("/health", response_model=HealthCheckResponse)
async def health(handler: HandlerDep, check_embedding: bool = False) -> HealthCheckResponse:
    """Health check endpoint."""
    return await handler.health_check(check_embedding=check_embedding)


@app.get("/cache/stats", response_model=CacheStatsResponse)
async def cache_stats(handler: HandlerDep) -> CacheStatsResponse:
    """Get cache statistics."""
    return await handler.get_stats()


@app.post(
    "/cache/seed",
    response_model=SeedCacheResponse,
    responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}},
)
async def seed_cache(request: SeedCacheRequest, identity: IdentityDep, handler: HandlerDep) -> SeedCacheResponse:
    """Warm the cache with curated question and answer pairs.

    Questions already cached keep their current answer.
    """
    return await handler.seed_cache(request)


@app.post(
    "/chat",
    responses={
        200: {"content": {"text/event-stream": {}}},
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        402: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        429: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
    },
)
async def chat(request: ChatRequest, identity: IdentityDep, handler: HandlerDep):
    """Answer the last user message as a server-sent event stream.

    The answer comes from the exact cache, the semantic cache or the model;
    ``X-Answer-Source`` says which.
    """
    return await handler.chat(request, identity)


def main() -> None:
    import uvicorn

    uvicorn.run(
        "answer_cache.api.app:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
    )


if __name__ == "__main__":
    main()
