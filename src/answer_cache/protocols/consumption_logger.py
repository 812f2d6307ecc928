"""Consumption logger protocol (metering, fire-and-forget)."""

from typing import Protocol, runtime_checkable

from answer_cache.entities import ConsumptionRecord


@runtime_checkable
class ConsumptionLogger(Protocol):
    async def record(self, record: ConsumptionRecord) -> None:
        """Persist one consumption record. Failures are the caller's to ignore."""
        ...
