"""Upstream completion provider protocol."""

from collections.abc import AsyncIterator, Sequence
from typing import Protocol, runtime_checkable

from answer_cache.entities import ChatTurn


@runtime_checkable
class LiveStream(Protocol):
    """A cancellable stream of text deltas from the upstream model."""

    def __aiter__(self) -> AsyncIterator[str]: ...

    async def aclose(self) -> None:
        """Abort the upstream call and release its connection."""
        ...


@runtime_checkable
class CompletionProvider(Protocol):
    @property
    def model(self) -> str:
        """Identifier of the model answers are requested from."""
        ...

    async def open(self, turns: Sequence[ChatTurn]) -> LiveStream:
        """Start a streaming completion for the conversation.

        The upstream status is checked before returning, so throttling,
        quota and generic failures raise here, before any text exists.

        Raises:
            UpstreamThrottled, UpstreamQuotaExhausted, UpstreamGenericFailure
        """
        ...
