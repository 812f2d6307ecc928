"""Conversation turns passed to the answer layer."""

from dataclasses import dataclass

USER = "user"
ASSISTANT = "assistant"
ROLES = (USER, ASSISTANT)


@dataclass(frozen=True)
class ChatTurn:
    role: str
    content: str

    def to_message(self) -> dict[str, str]:
        """Render in the chat-completions message shape."""
        return {"role": self.role, "content": self.content}
