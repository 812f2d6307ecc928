"""Answer storage protocol.

Defines the narrow interface the answer layer needs from its persistent
store: get by key, insert-if-absent, counter increment and nearest-neighbour
search. Schema, indexing and retention are the store's own business.

Implementations:
- Redis Stack with vector search (default)
- In-memory (tests, local development)
"""

from datetime import datetime
from typing import Protocol, runtime_checkable

from answer_cache.entities import CacheEntry, CacheMatch, Category


@runtime_checkable
class AnswerStore(Protocol):
    """Protocol for answer storage backends.

    Any type that implements these methods satisfies the protocol,
    no explicit inheritance needed.
    """

    async def get(self, question_hash: str) -> CacheEntry | None:
        """Fetch an entry by its question hash.

        Returns:
            The entry, or None when absent
        """
        ...

    async def insert(self, entry: CacheEntry) -> bool:
        """Insert an entry unless one with the same hash exists.

        Returns:
            True if inserted, False if an entry with that hash already existed
        """
        ...

    async def record_hit(self, question_hash: str, at: datetime) -> int:
        """Increment the hit count and set the last-hit timestamp.

        Returns:
            The hit count after the increment
        """
        ...

    async def find_similar(
        self,
        vector: list[float],
        limit: int = 1,
        category: Category | None = None,
    ) -> list[CacheMatch]:
        """Nearest neighbours by cosine similarity, best first.

        No threshold is applied here; callers filter by similarity.
        """
        ...

    async def count_all(self) -> int:
        """Count total entries in the store."""
        ...

    async def health_check(self) -> bool:
        """Check if the store is accessible."""
        ...

    @property
    def index_name(self) -> str:
        """Name of the index or namespace holding the entries."""
        ...
