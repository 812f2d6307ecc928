"""Streaming client for an OpenAI-compatible chat-completions gateway.

The upstream answers with server-sent events::

    data: {"choices": [{"delta": {"content": "..."}}]}
    ...
    data: [DONE]

``open()`` sends the request and inspects the status line before returning,
so the three upstream failure classes are raised while nothing has been
streamed yet. No retries happen here.
"""

import json
from collections.abc import AsyncIterator, Sequence

import httpx

from answer_cache.config import settings
from answer_cache.entities import ChatTurn
from answer_cache.errors import (
    UpstreamError,
    UpstreamGenericFailure,
    UpstreamQuotaExhausted,
    UpstreamThrottled,
)
from answer_cache.logging import get_logger, log_upstream_call

logger = get_logger(__name__)

DONE = "[DONE]"


def error_for_status(status_code: int, body: str = "") -> UpstreamError:
    """Map an upstream HTTP status to the matching error class."""
    if status_code == 429:
        return UpstreamThrottled(
            "Too many requests to the assistant. Please wait a moment and try again.",
            upstream_status=status_code,
        )
    if status_code == 402:
        return UpstreamQuotaExhausted(
            "Assistant usage limit reached. Please contact your administrator.",
            upstream_status=status_code,
        )
    return UpstreamGenericFailure(
        f"Upstream completion failed with status {status_code}: {body[:200]}",
        upstream_status=status_code,
    )


def parse_sse_line(line: str) -> str | None:
    """Extract the text delta from one SSE line.

    Returns:
        The delta text, ``DONE`` at end of stream, or None for lines that
        carry no text (comments, keep-alives, role-only deltas).
    """
    line = line.rstrip("\r")
    if not line.startswith("data:"):
        return None

    payload = line[5:].strip()
    if payload == DONE:
        return DONE

    try:
        data = json.loads(payload)
    except json.JSONDecodeError:
        logger.debug("Skipping malformed SSE line", line=line[:120])
        return None

    choices = data.get("choices") or [{}]
    return (choices[0].get("delta") or {}).get("content") or None


class LiveCompletion:
    """An open upstream response, consumed as an async iterable of deltas."""

    def __init__(self, response: httpx.Response, model: str) -> None:
        self._response = response
        self._model = model
        self._iterator: AsyncIterator[str] | None = None

    def __aiter__(self) -> AsyncIterator[str]:
        if self._iterator is None:
            self._iterator = self._deltas()
        return self._iterator

    async def _deltas(self) -> AsyncIterator[str]:
        try:
            async for line in self._response.aiter_lines():
                delta = parse_sse_line(line)
                if delta == DONE:
                    break
                if delta:
                    yield delta
        except httpx.HTTPError as e:
            log_upstream_call(logger, "gateway", self._model, success=False, stage="stream", error=str(e))
            raise UpstreamGenericFailure(f"Upstream stream interrupted: {e}") from e
        finally:
            await self._response.aclose()

    async def aclose(self) -> None:
        """Abort the upstream response and release its connection."""
        if self._iterator is not None:
            await self._iterator.aclose()
        await self._response.aclose()


class CompletionClient:
    """CompletionProvider that talks to an OpenAI-compatible endpoint.

    Example:
        ```python
        client = CompletionClient.create()
        live = await client.open([ChatTurn("user", "O que é fé?")])
        async for delta in live:
            print(delta, end="")
        ```
    """

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        model: str | None = None,
        system_prompt: str | None = None,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the completion client.

        Args:
            base_url: Gateway base URL (up to and including ``/v1``).
            api_key: Bearer token for the gateway.
            model: Model identifier sent with each request.
            system_prompt: Fixed system instruction prepended to every conversation.
            timeout: Request timeout in seconds.
            client: Pre-built HTTP client (tests inject a mock transport here).
        """
        self._base_url = (base_url or settings.completion_base_url).rstrip("/")
        self._api_key = api_key if api_key is not None else settings.completion_api_key
        self._model = model or settings.completion_model
        self._system_prompt = system_prompt or settings.system_prompt
        self._timeout = timeout or settings.completion_timeout
        self._client = client

    @classmethod
    def create(cls, model: str | None = None) -> "CompletionClient":
        return cls(model=model)

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout)
        return self._client

    @property
    def model(self) -> str:
        return self._model

    def build_payload(self, turns: Sequence[ChatTurn]) -> dict:
        return {
            "model": self._model,
            "messages": [
                {"role": "system", "content": self._system_prompt},
                *(turn.to_message() for turn in turns),
            ],
            "stream": True,
        }

    async def open(self, turns: Sequence[ChatTurn]) -> LiveCompletion:
        """Start a streaming completion.

        Raises:
            UpstreamThrottled: upstream answered 429
            UpstreamQuotaExhausted: upstream answered 402
            UpstreamGenericFailure: any other status, transport error or missing API key
        """
        if not self._api_key:
            raise UpstreamGenericFailure("Completion API key is not configured")

        request = self.client.build_request(
            "POST",
            f"{self._base_url}/chat/completions",
            json=self.build_payload(turns),
            headers={"Authorization": f"Bearer {self._api_key}"},
        )

        try:
            response = await self.client.send(request, stream=True)
        except httpx.HTTPError as e:
            log_upstream_call(logger, "gateway", self._model, success=False, error=str(e))
            raise UpstreamGenericFailure(f"Upstream completion request failed: {e}") from e

        if response.status_code != 200:
            body = (await response.aread()).decode(errors="replace")
            await response.aclose()
            log_upstream_call(logger, "gateway", self._model, success=False, status=response.status_code)
            raise error_for_status(response.status_code, body)

        log_upstream_call(logger, "gateway", self._model, success=True, status=response.status_code)
        return LiveCompletion(response, self._model)

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
