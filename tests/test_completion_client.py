"""
Tests for the streaming completion client (httpx mock transport, no network).
"""

import json

import httpx
import pytest

from answer_cache.entities import ChatTurn
from answer_cache.errors import UpstreamGenericFailure, UpstreamQuotaExhausted, UpstreamThrottled
from answer_cache.repositories import CompletionClient
from answer_cache.repositories.completion_client import DONE, parse_sse_line

BASE_URL = "https://gateway.test/v1"


def sse_body(*chunks: str) -> bytes:
    lines = [": keep-alive", 'data: {"choices":[{"delta":{"role":"assistant"}}]}']
    for chunk in chunks:
        lines.append("data: " + json.dumps({"choices": [{"delta": {"content": chunk}}]}))
    lines.append("data: [DONE]")
    return ("\n\n".join(lines) + "\n\n").encode()


def make_client(handler, api_key="test-key") -> CompletionClient:
    return CompletionClient(
        base_url=BASE_URL,
        api_key=api_key,
        model="test-model",
        system_prompt="Be helpful.",
        client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )


@pytest.mark.parametrize(
    ("line", "expected"),
    [
        ('data: {"choices":[{"delta":{"content":"Fé"}}]}', "Fé"),
        ('data:{"choices":[{"delta":{"content":" é"}}]}\r', " é"),
        ("data: [DONE]", DONE),
        ('data: {"choices":[{"delta":{"role":"assistant"}}]}', None),
        ('data: {"choices":[]}', None),
        ("data: not json", None),
        (": keep-alive", None),
        ("", None),
    ],
)
def test_parse_sse_line(line, expected):
    assert parse_sse_line(line) == expected


@pytest.mark.asyncio
async def test_streams_deltas_and_sends_conversation():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["auth"] = request.headers["authorization"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, content=sse_body("Fé", " é", " confiança"))

    client = make_client(handler)
    turns = [
        ChatTurn("user", "Quem escreveu Hebreus?"),
        ChatTurn("assistant", "A autoria é incerta."),
        ChatTurn("user", "O que é fé?"),
    ]
    live = await client.open(turns)
    chunks = [chunk async for chunk in live]

    assert chunks == ["Fé", " é", " confiança"]
    assert seen["url"] == f"{BASE_URL}/chat/completions"
    assert seen["auth"] == "Bearer test-key"
    assert seen["body"]["model"] == "test-model"
    assert seen["body"]["stream"] is True
    assert seen["body"]["messages"][0] == {"role": "system", "content": "Be helpful."}
    assert seen["body"]["messages"][1:] == [turn.to_message() for turn in turns]


@pytest.mark.asyncio
async def test_stops_at_done():
    def handler(request):
        body = sse_body("um") + b'data: {"choices":[{"delta":{"content":"ignored"}}]}\n\n'
        return httpx.Response(200, content=body)

    live = await make_client(handler).open([ChatTurn("user", "?")])
    assert [chunk async for chunk in live] == ["um"]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("status", "error_class", "kind"),
    [
        (429, UpstreamThrottled, "upstream_throttled"),
        (402, UpstreamQuotaExhausted, "upstream_quota_exhausted"),
        (500, UpstreamGenericFailure, "upstream_failure"),
        (401, UpstreamGenericFailure, "upstream_failure"),
    ],
)
async def test_status_mapping(status, error_class, kind):
    def handler(request):
        return httpx.Response(status, json={"error": "nope"})

    with pytest.raises(error_class) as exc_info:
        await make_client(handler).open([ChatTurn("user", "O que é fé?")])

    assert exc_info.value.kind == kind
    assert exc_info.value.upstream_status == status


@pytest.mark.asyncio
async def test_transport_error_is_generic_failure():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(UpstreamGenericFailure):
        await make_client(handler).open([ChatTurn("user", "O que é fé?")])


@pytest.mark.asyncio
async def test_missing_api_key_fails_without_calling_upstream():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200, content=sse_body("x"))

    with pytest.raises(UpstreamGenericFailure):
        await make_client(handler, api_key="").open([ChatTurn("user", "O que é fé?")])
    assert calls == []


@pytest.mark.asyncio
async def test_aclose_before_reading():
    def handler(request):
        return httpx.Response(200, content=sse_body("Fé", " é"))

    live = await make_client(handler).open([ChatTurn("user", "O que é fé?")])
    await live.aclose()
    await live.aclose()
