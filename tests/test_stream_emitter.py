"""
Tests for live relay and cached replay.
"""

import pytest

from answer_cache.errors import UpstreamGenericFailure
from answer_cache.services import StreamEmitter, split_for_replay
from conftest import FE_ANSWER, FakeLive


@pytest.fixture
def emitter():
    return StreamEmitter(replay_delay_ms=0)


@pytest.mark.parametrize(
    "answer",
    [
        FE_ANSWER,
        "Amém",
        "duas  palavras",
        " espaço no início",
        "espaço no fim ",
        "linha\nquebrada e\ttab",
    ],
)
def test_split_for_replay_round_trip(answer):
    assert "".join(split_for_replay(answer)) == answer


def test_split_for_replay_leading_spaces():
    assert split_for_replay("Fé é confiança") == ["Fé", " é", " confiança"]


def test_split_for_replay_empty():
    assert split_for_replay("") == []


def test_replay_delay_defaults_to_milliseconds():
    assert StreamEmitter(replay_delay_ms=15).replay_delay == pytest.approx(0.015)


@pytest.mark.asyncio
async def test_replay_reproduces_answer_then_done(emitter):
    events = [event async for event in emitter.replay(FE_ANSWER)]

    assert events[-1].done
    assert not any(event.done for event in events[:-1])
    assert "".join(event.text for event in events) == FE_ANSWER
    assert len(events) - 1 == len(FE_ANSWER.split(" "))


@pytest.mark.asyncio
async def test_replay_empty_answer_only_done(emitter):
    events = [event async for event in emitter.replay("")]
    assert len(events) == 1
    assert events[0].done


@pytest.mark.asyncio
async def test_replay_stops_when_closed(emitter):
    events = emitter.replay(FE_ANSWER, delay=0.001)
    first = await events.__anext__()
    await events.aclose()

    assert first.text == FE_ANSWER.split(" ")[0]
    with pytest.raises(StopAsyncIteration):
        await events.__anext__()


@pytest.mark.asyncio
async def test_relay_flushes_before_done(emitter):
    order = []
    live = FakeLive(["Fé", " é", " confiança"])

    async for event in emitter.relay(live, lambda text: order.append(("complete", text))):
        order.append(("done",) if event.done else ("chunk", event.text))

    assert order == [
        ("chunk", "Fé"),
        ("chunk", " é"),
        ("chunk", " confiança"),
        ("complete", "Fé é confiança"),
        ("done",),
    ]
    assert live.closed


@pytest.mark.asyncio
async def test_relay_cancel_closes_upstream_without_flush(emitter):
    completed = []
    live = FakeLive(["Fé", " é", " confiança"])

    events = emitter.relay(live, completed.append)
    await events.__anext__()
    await events.aclose()

    assert live.closed
    assert completed == []


@pytest.mark.asyncio
async def test_relay_upstream_failure(emitter):
    completed = []
    live = FakeLive(["Fé", " é"], error=UpstreamGenericFailure("connection reset"))

    received = []
    with pytest.raises(UpstreamGenericFailure):
        async for event in emitter.relay(live, completed.append):
            received.append(event.text)

    assert received == ["Fé", " é"]
    assert live.closed
    assert completed == []
