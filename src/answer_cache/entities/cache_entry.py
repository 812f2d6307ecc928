"""Cache entry domain entity."""

from dataclasses import dataclass
from datetime import datetime

from .category import Category


@dataclass(frozen=True)
class CacheEntry:
    """Domain entity for a cached question-answer pair.

    This is an internal representation used by services and repositories.
    For API contracts, use the DTO classes from the dto package.

    Attributes:
        question: The raw question as the user typed it
        normalized_question: Canonical form used for hashing
        question_hash: SHA-256 hex digest of the normalized question (unique key)
        answer: The cached model answer
        category: Topical category computed at request time
        model: Identifier of the model that produced the answer
        token_estimate: Rough token count (len(answer) // 4), not a billing figure
        created_at: When this entry was created
        expires_at: Advisory expiration, set once at creation
        embedding: Embedding of the question, None if embedding failed
        hit_count: Number of times this entry was served from cache
        last_hit_at: When this entry was last served from cache
    """

    question: str
    normalized_question: str
    question_hash: str
    answer: str
    category: Category
    model: str
    token_estimate: int
    created_at: datetime
    expires_at: datetime
    embedding: list[float] | None = None
    hit_count: int = 0
    last_hit_at: datetime | None = None
