"""Consumption (metering) domain entity."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class ConsumptionRecord:
    """One served answer, for metering.

    Attributes:
        user_id: Who asked
        tenant_id: Organization of the user
        source: "exact", "semantic" or "live"
        cache_key: Question hash of the served or stored entry
        model: Model that produced the answer
        token_estimate: Estimated output tokens (len // 4)
        estimated_cost: token_estimate / 1000 * configured price
        created_at: When the answer was served
    """

    user_id: str
    tenant_id: str
    source: str
    cache_key: str
    model: str
    token_estimate: int
    estimated_cost: float
    created_at: datetime

    @property
    def from_cache(self) -> bool:
        return self.source != "live"
