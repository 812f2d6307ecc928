"""Local sentence-transformers embedding provider.

Runs the model in-process, so no embedding service is needed. Encoding is
CPU-bound and is pushed to a worker thread to keep the event loop free.
"""

import asyncio
import time

import numpy as np
from sentence_transformers import SentenceTransformer

from answer_cache.config import settings
from answer_cache.errors import EmbeddingFailure
from answer_cache.logging import get_logger

logger = get_logger(__name__)


class LocalEmbeddingProvider:
    """Local sentence-transformers implementation of EmbeddingProvider.

    Default multilingual model: paraphrase-multilingual-MiniLM-L12-v2 (384 dimensions)
    """

    DEFAULT_MODEL = "paraphrase-multilingual-MiniLM-L12-v2"

    def __init__(self, model_name: str | None = None) -> None:
        """Initialize the local embedding provider.

        Args:
            model_name: Name of the sentence-transformers model.
                       Defaults to settings.embedding_model.
        """
        self._model_name = model_name or settings.embedding_model
        self._model: SentenceTransformer | None = None

    @classmethod
    def create(cls, model_name: str | None = None) -> "LocalEmbeddingProvider":
        return cls(model_name=model_name)

    @property
    def model(self) -> SentenceTransformer:
        """Lazy-load the embedding model."""
        if self._model is None:
            start_time = time.time()
            self._model = SentenceTransformer(self._model_name)
            logger.info(
                "Embedding model loaded",
                model=self._model_name,
                load_seconds=round(time.time() - start_time, 2),
            )
        return self._model

    @property
    def dimension(self) -> int:
        return int(self.model.get_sentence_embedding_dimension())

    @property
    def model_name(self) -> str:
        return self._model_name

    def _encode_sync(self, text: str) -> list[float]:
        embedding = self.model.encode(
            text,
            show_progress_bar=False,
            normalize_embeddings=True,
        )
        return np.asarray(embedding, dtype=np.float32).reshape(-1).tolist()

    async def encode(self, text: str) -> list[float]:
        """Generate embedding vector for a single text.

        Raises:
            EmbeddingFailure: If the model cannot be loaded or fails to encode
        """
        try:
            return await asyncio.to_thread(self._encode_sync, text)
        except (OSError, RuntimeError, ValueError) as e:
            raise EmbeddingFailure(f"Local embedding failed: {e}") from e

    async def is_available(self) -> bool:
        try:
            await self.encode("test")
            return True
        except EmbeddingFailure:
            return False
