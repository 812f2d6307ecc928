"""Metering of served answers, cached and live."""

from collections.abc import Callable
from datetime import datetime

from answer_cache.config import settings
from answer_cache.entities import ConsumptionRecord, Identity
from answer_cache.logging import get_logger
from answer_cache.protocols import ConsumptionLogger
from answer_cache.services.background import BackgroundTasks
from answer_cache.services.cache_writer import estimate_tokens
from answer_cache.services.rate_limiter import utc_now

logger = get_logger(__name__)


class ConsumptionMeter:
    """Builds consumption records and hands them to a logger without waiting.

    A missing logger turns metering off.
    """

    def __init__(
        self,
        consumption_logger: ConsumptionLogger | None,
        tasks: BackgroundTasks | None = None,
        cost_per_1k_tokens: float | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._logger = consumption_logger
        self._tasks = tasks or BackgroundTasks()
        self._cost_per_1k = (
            cost_per_1k_tokens if cost_per_1k_tokens is not None else settings.cost_per_1k_output_tokens
        )
        self._clock = clock

    def build_record(
        self,
        identity: Identity,
        source: str,
        cache_key: str,
        model: str,
        answer: str,
    ) -> ConsumptionRecord:
        tokens = estimate_tokens(answer)
        return ConsumptionRecord(
            user_id=identity.user_id,
            tenant_id=identity.tenant_id,
            source=source,
            cache_key=cache_key,
            model=model,
            token_estimate=tokens,
            # Cache hits cost nothing upstream.
            estimated_cost=0.0 if source != "live" else tokens / 1000 * self._cost_per_1k,
            created_at=self._clock(),
        )

    def record(self, identity: Identity, source: str, cache_key: str, model: str, answer: str) -> None:
        if self._logger is None:
            return
        record = self.build_record(identity, source, cache_key, model, answer)
        self._tasks.spawn(self._send(record), name=f"consumption-{source}")

    async def _send(self, record: ConsumptionRecord) -> None:
        try:
            await self._logger.record(record)
        except Exception as e:
            logger.debug("Consumption record dropped", source=record.source, error=str(e))
