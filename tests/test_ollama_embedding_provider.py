"""
Tests for the Ollama embedding provider (httpx mock transport, no network).
"""

import json

import httpx
import pytest

from answer_cache.errors import EmbeddingFailure
from answer_cache.repositories import OllamaEmbeddingProvider


def make_provider(handler, model_name="embeddinggemma") -> OllamaEmbeddingProvider:
    return OllamaEmbeddingProvider(
        model_name=model_name,
        base_url="http://ollama.test:11434/",
        client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )


@pytest.mark.asyncio
async def test_encode():
    seen = {}

    def handler(request):
        seen["url"] = str(request.url)
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"embeddings": [[0.1, 0.2, 0.3]]})

    vector = await make_provider(handler).encode("O que é fé?")

    assert vector == [0.1, 0.2, 0.3]
    assert seen["url"] == "http://ollama.test:11434/api/embed"
    assert seen["body"] == {"model": "embeddinggemma", "input": "O que é fé?"}


@pytest.mark.asyncio
async def test_encode_legacy_response_shape():
    def handler(request):
        return httpx.Response(200, json={"embedding": [0.5, 0.5]})

    assert await make_provider(handler).encode("fé") == [0.5, 0.5]


@pytest.mark.asyncio
async def test_http_error_is_embedding_failure():
    def handler(request):
        return httpx.Response(500, text="model not loaded")

    with pytest.raises(EmbeddingFailure):
        await make_provider(handler).encode("fé")


@pytest.mark.asyncio
async def test_unexpected_payload_is_embedding_failure():
    def handler(request):
        return httpx.Response(200, json={"error": "unknown model"})

    with pytest.raises(EmbeddingFailure):
        await make_provider(handler).encode("fé")


@pytest.mark.asyncio
async def test_is_available():
    def healthy(request):
        return httpx.Response(200, json={"embeddings": [[1.0]]})

    def down(request):
        raise httpx.ConnectError("refused", request=request)

    assert await make_provider(healthy).is_available() is True
    assert await make_provider(down).is_available() is False


@pytest.mark.parametrize(("model", "dimension"), [("embeddinggemma", 768), ("all-minilm", 384), ("custom", 768)])
def test_dimension(model, dimension):
    provider = make_provider(lambda request: httpx.Response(200), model_name=model)
    assert provider.dimension == dimension
