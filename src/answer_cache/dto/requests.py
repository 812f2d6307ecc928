"""Request DTOs for API endpoints."""

from typing import Literal

from pydantic import BaseModel, Field

from answer_cache.entities import ChatTurn


class ChatMessage(BaseModel):
    """One conversation turn as sent by the client."""

    role: Literal["user", "assistant"] = Field(..., description="Who wrote the message")
    content: str = Field(..., description="Message text")

    def to_turn(self) -> ChatTurn:
        return ChatTurn(role=self.role, content=self.content)


class ChatRequest(BaseModel):
    """Request DTO for POST /chat.

    The last message is the question being answered; earlier ones are
    history for the upstream model. Emptiness and length are checked by
    the service, so every caller gets the same validation error body.
    """

    messages: list[ChatMessage] = Field(
        default_factory=list,
        description="Conversation so far, oldest first, ending with the user's question",
    )

    def to_turns(self) -> list[ChatTurn]:
        return [message.to_turn() for message in self.messages]


class SeedPair(BaseModel):
    """A curated question and its answer."""

    question: str = Field(..., min_length=1, description="Question as a member would ask it")
    answer: str = Field(..., min_length=1, description="Answer to serve from cache")


class SeedCacheRequest(BaseModel):
    """Request DTO for POST /cache/seed."""

    pairs: list[SeedPair] = Field(..., min_length=1, description="Question and answer pairs to cache")
    model: str = Field("seed", description="Recorded as the model that produced the answers")

    def to_pairs(self) -> list[tuple[str, str]]:
        return [(pair.question, pair.answer) for pair in self.pairs]
