"""Ollama-based embedding provider.

Uses Ollama's HTTP API (``POST /api/embed``) to embed questions for the
semantic tier. Any failure is reported as ``EmbeddingFailure`` so the caller
can skip the semantic lookup and keep serving the request.

Requirements:
    - Model pulled: `ollama pull embeddinggemma`
    - Ollama running: `ollama serve`

Models and dimensions:
- embeddinggemma (768 dims, multilingual)
- nomic-embed-text (768 dims)
- mxbai-embed-large (1024 dims)
- all-minilm (384 dims)
"""

import httpx

from answer_cache.config import settings
from answer_cache.errors import EmbeddingFailure
from answer_cache.logging import get_logger

logger = get_logger(__name__)


class OllamaEmbeddingProvider:
    """Ollama-based implementation of EmbeddingProvider protocol.

    Example:
        ```python
        provider = OllamaEmbeddingProvider.create(model_name="embeddinggemma")
        vector = await provider.encode("O que é fé?")
        ```
    """

    # Known model dimensions (for common models)
    MODEL_DIMENSIONS = {
        "embeddinggemma": 768,
        "embeddinggemma:300m": 768,
        "nomic-embed-text": 768,
        "mxbai-embed-large": 1024,
        "all-minilm": 384,
    }

    def __init__(
        self,
        model_name: str | None = None,
        base_url: str | None = None,
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the Ollama embedding provider.

        Args:
            model_name: Name of the Ollama model. Defaults to settings.embedding_model.
            base_url: Ollama API base URL. Defaults to settings.ollama_base_url.
            timeout: Request timeout in seconds.
            client: Pre-built HTTP client (tests inject a mock transport here).
        """
        self._model_name = model_name or settings.embedding_model
        self._base_url = (base_url or settings.ollama_base_url).rstrip("/")
        self._timeout = timeout
        self._client = client

    @classmethod
    def create(
        cls,
        model_name: str | None = None,
        base_url: str | None = None,
    ) -> "OllamaEmbeddingProvider":
        """Factory method to create OllamaEmbeddingProvider with defaults."""
        return cls(model_name=model_name, base_url=base_url)

    @property
    def client(self) -> httpx.AsyncClient:
        """Lazy-load the async HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self._timeout,
                limits=httpx.Limits(max_connections=100, max_keepalive_connections=20),
            )
        return self._client

    @property
    def dimension(self) -> int:
        """Vector dimension for the model (768 for unknown models)."""
        return self.MODEL_DIMENSIONS.get(self._model_name, 768)

    @property
    def model_name(self) -> str:
        return self._model_name

    async def encode(self, text: str) -> list[float]:
        """Generate embedding vector for a single text.

        Raises:
            EmbeddingFailure: If the Ollama request fails or returns no vector
        """
        try:
            response = await self.client.post(
                f"{self._base_url}/api/embed",
                json={"model": self._model_name, "input": text},
            )
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise EmbeddingFailure(f"Ollama embedding request failed: {e}") from e

        # {"embeddings": [[...]]} for a single input; older servers answer {"embedding": [...]}
        if data.get("embeddings"):
            return data["embeddings"][0]
        if data.get("embedding"):
            return data["embedding"]

        raise EmbeddingFailure(f"Unexpected Ollama response format: {sorted(data)}")

    async def is_available(self) -> bool:
        """Check if Ollama is running and the model answers."""
        try:
            await self.encode("test")
            return True
        except EmbeddingFailure as e:
            logger.warning("Embedding provider unavailable", model=self._model_name, error=str(e))
            return False

    async def close(self) -> None:
        """Close the async HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
