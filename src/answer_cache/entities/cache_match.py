"""Cache match domain entity."""

from dataclasses import dataclass

from .category import Category


@dataclass(frozen=True)
class CacheMatch:
    """Domain entity for a semantic search result.

    Attributes:
        question_hash: Key of the matched entry
        question: The matched question from the cache
        answer: The cached answer
        category: Category of the matched entry
        similarity: Cosine similarity (1 = identical, -1 = opposite)
        model: Model that produced the cached answer
        hit_count: Hit count of the entry after bookkeeping
    """

    question_hash: str
    question: str
    answer: str
    category: Category
    similarity: float
    model: str = ""
    hit_count: int = 0
