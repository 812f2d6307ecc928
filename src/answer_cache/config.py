import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv
from redis import asyncio as aioredis

load_dotenv()

DEFAULT_SYSTEM_PROMPT = (
    "You are a Bible study assistant for a church community app. "
    "Answer with care, cite the relevant passages (book, chapter and verse) "
    "and keep answers concise but complete."
)


@dataclass(frozen=True)
class Settings:
    """Application settings loaded from environment variables."""

    # Redis
    redis_url: str = os.getenv("REDIS_URL", "redis://localhost:6379")
    redis_password: str | None = os.getenv("REDIS_PASSWORD")

    # Storage backend: "redis" or "memory"
    store_backend: str = os.getenv("STORE_BACKEND", "redis")
    # Credential accepted by the in-memory tenant resolver (memory backend only)
    dev_credential: str | None = os.getenv("DEV_CREDENTIAL")

    # Cache
    cache_enabled: bool = os.getenv("CACHE_ENABLED", "true").lower() == "true"
    cache_index_name: str = os.getenv("CACHE_INDEX_NAME", "answer_cache")
    cache_similarity_threshold: float = float(os.getenv("CACHE_SIMILARITY_THRESHOLD", "0.92"))
    cache_min_answer_chars: int = int(os.getenv("CACHE_MIN_ANSWER_CHARS", "50"))
    cache_entry_ttl_days: int = int(os.getenv("CACHE_ENTRY_TTL_DAYS", "365"))
    semantic_filter_by_category: bool = (
        os.getenv("SEMANTIC_FILTER_BY_CATEGORY", "false").lower() == "true"
    )
    replay_delay_ms: int = int(os.getenv("REPLAY_DELAY_MS", "15"))
    max_question_chars: int = int(os.getenv("MAX_QUESTION_CHARS", "4000"))

    # Rate limiting
    default_daily_limit: int = int(os.getenv("DEFAULT_DAILY_LIMIT", "50"))
    rate_limit_prefix: str = os.getenv("RATE_LIMIT_PREFIX", "ai_rate_limit")

    # Embedding: "ollama" or "local" (sentence-transformers)
    embedding_backend: str = os.getenv("EMBEDDING_BACKEND", "ollama")
    embedding_model: str = os.getenv(
        "EMBEDDING_MODEL",
        "embeddinggemma",  # or "paraphrase-multilingual-MiniLM-L12-v2" with the local backend
    )
    ollama_base_url: str = os.getenv("OLLAMA_BASE_URL", "http://localhost:11434")

    # Upstream completions (OpenAI-compatible gateway)
    completion_base_url: str = os.getenv("COMPLETION_BASE_URL", "https://api.openai.com/v1")
    completion_api_key: str | None = os.getenv("COMPLETION_API_KEY")
    completion_model: str = os.getenv("COMPLETION_MODEL", "gpt-4o-mini")
    completion_timeout: float = float(os.getenv("COMPLETION_TIMEOUT", "120"))
    system_prompt: str = os.getenv("ASSISTANT_SYSTEM_PROMPT", DEFAULT_SYSTEM_PROMPT)

    # Metering
    cost_per_1k_output_tokens: float = float(os.getenv("COST_PER_1K_OUTPUT_TOKENS", "0.0"))
    consumption_stream: str = os.getenv("CONSUMPTION_STREAM", "ai_consumption")

    # API
    api_host: str = os.getenv("API_HOST", "0.0.0.0")
    api_port: int = int(os.getenv("API_PORT", "8000"))
    api_reload: bool = os.getenv("API_RELOAD", "true").lower() == "true"

    # Logging
    log_level: str = os.getenv("LOG_LEVEL", "info")
    log_format: str = os.getenv("LOG_FORMAT", "console")

    def __post_init__(self) -> None:
        """Validate settings after initialization."""
        if not 0 <= self.cache_similarity_threshold <= 1:
            raise ValueError("CACHE_SIMILARITY_THRESHOLD must be between 0 and 1 for cosine similarity")

        if self.store_backend not in ("redis", "memory"):
            raise ValueError(f"STORE_BACKEND must be 'redis' or 'memory', got {self.store_backend!r}")

        if self.embedding_backend not in ("ollama", "local"):
            raise ValueError(
                f"EMBEDDING_BACKEND must be 'ollama' or 'local', got {self.embedding_backend!r}"
            )

        if self.cache_min_answer_chars < 0 or self.replay_delay_ms < 0:
            raise ValueError("CACHE_MIN_ANSWER_CHARS and REPLAY_DELAY_MS must not be negative")

        if self.default_daily_limit < 0:
            raise ValueError("DEFAULT_DAILY_LIMIT must not be negative")

        if self.log_format not in ("console", "json"):
            raise ValueError(f"LOG_FORMAT must be 'console' or 'json', got {self.log_format!r}")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()


def get_redis_client() -> aioredis.Redis:
    """Create an asyncio Redis client instance."""
    return aioredis.from_url(
        settings.redis_url,
        password=settings.redis_password,
        decode_responses=False,
    )
