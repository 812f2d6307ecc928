"""
Tests for the daily request quota.
"""

from datetime import datetime, timezone

import pytest

from answer_cache.entities import Identity, TenantSettings
from answer_cache.errors import AssistantDisabled, QuotaExceeded
from answer_cache.services import RateLimiter


@pytest.fixture
def limiter(rate_limits, clock):
    return RateLimiter(rate_limits, default_limit=2, clock=clock)


@pytest.mark.asyncio
async def test_limit_of_two(limiter, identity, clock):
    first = await limiter.check_and_consume(identity)
    second = await limiter.check_and_consume(identity)
    assert (first.limit, first.remaining) == (2, 1)
    assert (second.limit, second.remaining) == (2, 0)

    with pytest.raises(QuotaExceeded) as exc_info:
        await limiter.check_and_consume(identity)

    error = exc_info.value
    assert error.limit == 2
    assert error.remaining == 0
    assert error.resets_at == datetime(2026, 3, 11, tzinfo=timezone.utc)
    assert error.to_dict()["resets_at"] == "2026-03-11T00:00:00+00:00"


@pytest.mark.asyncio
async def test_next_day_starts_a_fresh_window(limiter, identity, clock):
    await limiter.check_and_consume(identity)
    await limiter.check_and_consume(identity)

    clock.advance(days=1)
    status = await limiter.check_and_consume(identity)
    assert status.remaining == 1


@pytest.mark.asyncio
async def test_rejected_request_is_not_counted(limiter, rate_limits, identity, clock):
    await limiter.check_and_consume(identity)
    await limiter.check_and_consume(identity)
    with pytest.raises(QuotaExceeded):
        await limiter.check_and_consume(identity)

    record = await rate_limits.get(identity.user_id, clock().date())
    assert record.request_count == 2
    assert record.tenant_id == identity.tenant_id


@pytest.mark.asyncio
async def test_tenant_limit_overrides_default(limiter):
    generous = Identity("user-2", "tenant-2", TenantSettings(daily_limit=10))
    status = await limiter.check_and_consume(generous)
    assert (status.limit, status.remaining) == (10, 9)


@pytest.mark.asyncio
async def test_zero_limit_rejects_immediately(limiter):
    blocked = Identity("user-3", "tenant-3", TenantSettings(daily_limit=0))
    with pytest.raises(QuotaExceeded):
        await limiter.check_and_consume(blocked)


@pytest.mark.asyncio
async def test_disabled_tenant(limiter, rate_limits, clock):
    disabled = Identity("user-4", "tenant-4", TenantSettings(assistant_enabled=False))
    with pytest.raises(AssistantDisabled) as exc_info:
        await limiter.check_and_consume(disabled)

    assert exc_info.value.status_code == 403
    assert await rate_limits.get("user-4", clock().date()) is None


@pytest.mark.asyncio
async def test_users_are_counted_separately(limiter, identity):
    await limiter.check_and_consume(identity)
    await limiter.check_and_consume(identity)

    other = Identity("user-5", identity.tenant_id)
    status = await limiter.check_and_consume(other)
    assert status.remaining == 1
