"""Response DTOs for API endpoints."""

from datetime import datetime

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Structured error body for failures raised before streaming starts."""

    kind: str = Field(..., description="Machine-readable error kind, e.g. 'quota_exceeded'")
    message: str = Field(..., description="Human-readable message")
    limit: int | None = Field(None, description="Daily quota (quota errors only)")
    remaining: int | None = Field(None, description="Requests left today (quota errors only)")
    resets_at: datetime | None = Field(None, description="When the quota resets (quota errors only)")


class CacheStatsResponse(BaseModel):
    """Response DTO for cache statistics."""

    total_entries: int = Field(
        ...,
        description="Total number of cached answers",
        ge=0,
    )
    index_name: str = Field(..., description="Name of the vector index")
    cache_enabled: bool = Field(..., description="Whether the cache tiers are consulted")
    similarity_threshold: float = Field(
        ...,
        description="Minimum cosine similarity for a semantic hit",
        ge=0.0,
        le=1.0,
    )
    embedding_model: str = Field(..., description="Model used to embed questions")
    completion_model: str = Field(..., description="Model answering cache misses")
    pending_writes: int = Field(
        ...,
        description="Background cache writes and consumption records not yet finished",
        ge=0,
    )


class HealthCheckResponse(BaseModel):
    """Response DTO for health check."""

    status: str = Field(..., description="Health status: 'healthy' or 'unhealthy'")
    cache_healthy: bool = Field(..., description="Whether the cache backend is reachable")
    embedding_healthy: bool | None = Field(
        None,
        description="Whether the embedding service is reachable",
    )


class SeedCacheResponse(BaseModel):
    """Response DTO for cache seeding."""

    success: bool = Field(..., description="Whether the seeding finished")
    inserted: int = Field(..., description="Entries added", ge=0)
    skipped: int = Field(..., description="Pairs whose question was already cached", ge=0)
    message: str = Field(..., description="Status message")
