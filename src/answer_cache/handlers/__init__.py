"""Handler layer for HTTP endpoints.

This layer contains the HTTP request/response handlers.
Handlers depend on services (business logic), not directly on repositories.

Architecture:
    Handler -> Service -> Repository
    (HTTP)  -> (Business) -> (Data Access)
"""

from .chat_handler import ChatHandler, error_response, sse_chunk

__all__ = [
    "ChatHandler",
    "error_response",
    "sse_chunk",
]
