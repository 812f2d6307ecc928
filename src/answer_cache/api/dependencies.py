"""Dependency injection configuration for FastAPI app.

Uses FastAPI's app.state pattern for storing service instances.

Pattern:
    - Services stored in app.state during lifespan
    - Dependency functions retrieve from request.app.state
    - Clean separation, no global mutable state
"""

from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, FastAPI, Header, Request

from answer_cache.config import Settings, get_redis_client, settings
from answer_cache.entities import Identity
from answer_cache.errors import Unauthorized
from answer_cache.handlers import ChatHandler
from answer_cache.logging import configure_logging, get_logger
from answer_cache.protocols import (
    AnswerStore,
    ConsumptionLogger,
    EmbeddingProvider,
    RateLimitStore,
    TenantResolver,
)
from answer_cache.repositories import (
    CompletionClient,
    InMemoryCacheRepository,
    InMemoryConsumptionLogger,
    InMemoryRateLimitRepository,
    InMemoryTenantResolver,
    OllamaEmbeddingProvider,
    RedisCacheRepository,
    RedisConsumptionLogger,
    RedisRateLimitRepository,
    RedisTenantResolver,
)
from answer_cache.services import AssistantService

logger = get_logger(__name__)


@dataclass
class Backends:
    """Storage adapters selected by STORE_BACKEND."""

    store: AnswerStore
    rate_limit_store: RateLimitStore
    tenant_resolver: TenantResolver
    consumption_logger: ConsumptionLogger


def build_embedding_provider(config: Settings) -> EmbeddingProvider:
    """Embedding provider selected by EMBEDDING_BACKEND.

    ⚠️ Switching providers or models changes the vector dimension; the
    Redis index must then be recreated under a new CACHE_INDEX_NAME.
    """
    if config.embedding_backend == "local":
        # sentence-transformers pulls in torch; only import it when asked for
        from answer_cache.repositories.local_embedding_provider import LocalEmbeddingProvider

        return LocalEmbeddingProvider.create(model_name=config.embedding_model)

    return OllamaEmbeddingProvider.create(
        model_name=config.embedding_model,
        base_url=config.ollama_base_url,
    )


def build_backends(config: Settings, embedding_provider: EmbeddingProvider) -> Backends:
    if config.store_backend == "memory":
        tenant_resolver = InMemoryTenantResolver()
        if config.dev_credential:
            tenant_resolver.register(config.dev_credential, Identity(user_id="dev", tenant_id="dev"))
        return Backends(
            store=InMemoryCacheRepository(),
            rate_limit_store=InMemoryRateLimitRepository(),
            tenant_resolver=tenant_resolver,
            consumption_logger=InMemoryConsumptionLogger(),
        )

    client = get_redis_client()
    return Backends(
        store=RedisCacheRepository(
            redis_client=client,
            embedding_provider=embedding_provider,
            index_name=config.cache_index_name,
        ),
        rate_limit_store=RedisRateLimitRepository(redis_client=client),
        tenant_resolver=RedisTenantResolver(redis_client=client),
        consumption_logger=RedisConsumptionLogger(redis_client=client),
    )


def get_assistant_service(request: Request) -> AssistantService:
    """Dependency injection for AssistantService from app.state.

    Raises:
        RuntimeError: If service is not initialized
    """
    service = getattr(request.app.state, "assistant_service", None)
    if service is None:
        raise RuntimeError("AssistantService not initialized. Check lifespan setup.")
    return service


def get_handler(request: Request) -> ChatHandler:
    """Dependency injection for ChatHandler from app.state.

    Raises:
        RuntimeError: If handler is not initialized
    """
    handler = getattr(request.app.state, "chat_handler", None)
    if handler is None:
        raise RuntimeError("ChatHandler not initialized. Check lifespan setup.")
    return handler


def get_tenant_resolver(request: Request) -> TenantResolver:
    resolver = getattr(request.app.state, "tenant_resolver", None)
    if resolver is None:
        raise RuntimeError("TenantResolver not initialized. Check lifespan setup.")
    return resolver


async def get_identity(
    resolver: Annotated[TenantResolver, Depends(get_tenant_resolver)],
    authorization: Annotated[str | None, Header()] = None,
) -> Identity:
    """Resolve the ``Authorization: Bearer <credential>`` header to an identity.

    Raises:
        Unauthorized: Missing header, wrong scheme or unknown credential
    """
    scheme, _, credential = (authorization or "").partition(" ")
    if scheme.lower() != "bearer" or not credential.strip():
        raise Unauthorized("Missing or malformed Authorization header.")

    identity = await resolver.resolve(credential.strip())
    if identity is None:
        raise Unauthorized("Invalid or expired credential.")
    return identity


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for FastAPI app.

    Initializes all layers and stores in app.state:
    1. Providers and repositories (data access), chosen from settings
    2. Service (business logic) - stored in app.state.assistant_service
    3. Handler (HTTP endpoints) - stored in app.state.chat_handler

    Cleanup:
        Waits for pending cache writes, closes HTTP clients and removes
        everything from app.state on shutdown
    """
    configure_logging(settings)

    embedding_provider = build_embedding_provider(settings)
    backends = build_backends(settings, embedding_provider)
    completion_client = CompletionClient.create()

    assistant_service = AssistantService.create(
        store=backends.store,
        rate_limit_store=backends.rate_limit_store,
        embedding_provider=embedding_provider,
        completion_provider=completion_client,
        consumption_logger=backends.consumption_logger,
    )

    app.state.assistant_service = assistant_service
    app.state.chat_handler = ChatHandler(assistant_service=assistant_service)
    app.state.tenant_resolver = backends.tenant_resolver

    logger.info(
        "Assistant service initialized",
        store_backend=settings.store_backend,
        embedding_model=embedding_provider.model_name,
        completion_model=completion_client.model,
        cache_enabled=assistant_service.cache_enabled,
        healthy=await assistant_service.is_healthy(),
    )

    yield

    await assistant_service.drain()
    await completion_client.close()
    if isinstance(embedding_provider, OllamaEmbeddingProvider):
        await embedding_provider.close()
    if isinstance(backends.store, RedisCacheRepository):
        await backends.store.client.aclose()

    del app.state.chat_handler
    del app.state.assistant_service
    del app.state.tenant_resolver
    logger.info("Assistant service shut down")


# Type aliases for cleaner dependency injection
HandlerDep = Annotated[ChatHandler, Depends(get_handler)]
ServiceDep = Annotated[AssistantService, Depends(get_assistant_service)]
IdentityDep = Annotated[Identity, Depends(get_identity)]
