"""Delivery of answers as an ordered stream of text chunks.

Two modes, same event shape:

- live relay: chunks from the upstream model are forwarded as they arrive,
  and the full text is handed to a completion callback at the end
- cached replay: a stored answer is split on spaces and re-emitted with a
  small fixed delay, so cached answers look like a live stream
"""

import asyncio
from collections.abc import AsyncIterator, Callable
from dataclasses import dataclass

from answer_cache.config import settings
from answer_cache.logging import get_logger
from answer_cache.protocols import LiveStream

logger = get_logger(__name__)


@dataclass(frozen=True)
class StreamEvent:
    """One chunk of text, or the end-of-stream marker when ``done`` is set."""

    text: str = ""
    done: bool = False


DONE_EVENT = StreamEvent(done=True)


def split_for_replay(answer: str) -> list[str]:
    """Split ``answer`` into replay chunks whose concatenation is ``answer``.

    >>> split_for_replay("Fé é confiança")
    ['Fé', ' é', ' confiança']
    """
    if not answer:
        return []
    tokens = answer.split(" ")
    return [tokens[0]] + [" " + token for token in tokens[1:]]


class StreamEmitter:
    """Produces StreamEvent iterators for live and cached answers.

    Both iterators are async generators: closing one (``aclose()``) or
    cancelling the task consuming it stops emission. For a live relay this
    also closes the upstream response.
    """

    def __init__(self, replay_delay_ms: int | None = None) -> None:
        delay_ms = replay_delay_ms if replay_delay_ms is not None else settings.replay_delay_ms
        self._replay_delay = delay_ms / 1000

    @property
    def replay_delay(self) -> float:
        """Pause between replayed chunks, in seconds."""
        return self._replay_delay

    async def relay(
        self,
        live: LiveStream,
        on_complete: Callable[[str], None],
    ) -> AsyncIterator[StreamEvent]:
        """Forward upstream chunks, then flush the full text to ``on_complete``.

        ``on_complete`` runs exactly once, only when the upstream finished
        normally, and before the final ``done`` event is emitted.
        """
        parts: list[str] = []
        try:
            async for chunk in live:
                parts.append(chunk)
                yield StreamEvent(text=chunk)
        finally:
            await live.aclose()

        on_complete("".join(parts))
        yield DONE_EVENT

    async def replay(self, answer: str, delay: float | None = None) -> AsyncIterator[StreamEvent]:
        """Re-emit a stored answer chunk by chunk.

        Args:
            answer: The cached answer text
            delay: Seconds between chunks. Defaults to the configured replay delay.
        """
        delay = self._replay_delay if delay is None else delay
        for i, chunk in enumerate(split_for_replay(answer)):
            if i and delay:
                await asyncio.sleep(delay)
            if chunk:
                yield StreamEvent(text=chunk)
        yield DONE_EVENT
