"""
Tests for the error taxonomy.
"""

from datetime import datetime, timezone

import pytest

from answer_cache.errors import (
    AssistantDisabled,
    AssistantError,
    CacheWriteFailure,
    EmbeddingFailure,
    QuotaExceeded,
    Unauthorized,
    UpstreamError,
    UpstreamGenericFailure,
    UpstreamQuotaExhausted,
    UpstreamThrottled,
    ValidationError,
)


@pytest.mark.parametrize(
    ("error", "kind", "status"),
    [
        (ValidationError("bad"), "validation_error", 400),
        (Unauthorized("who?"), "unauthorized", 401),
        (AssistantDisabled("tenant-1"), "assistant_disabled", 403),
        (UpstreamThrottled("slow"), "upstream_throttled", 429),
        (UpstreamQuotaExhausted("pay"), "upstream_quota_exhausted", 402),
        (UpstreamGenericFailure("boom"), "upstream_failure", 502),
    ],
)
def test_kind_and_status(error, kind, status):
    assert isinstance(error, AssistantError)
    assert error.kind == kind
    assert error.status_code == status
    assert error.to_dict() == {"kind": kind, "message": error.message}


def test_upstream_errors_share_a_base():
    for error_class in (UpstreamThrottled, UpstreamQuotaExhausted, UpstreamGenericFailure):
        assert issubclass(error_class, UpstreamError)


def test_quota_exceeded_body():
    error = QuotaExceeded(limit=20, resets_at=datetime(2026, 3, 11, tzinfo=timezone.utc))
    assert error.to_dict() == {
        "kind": "quota_exceeded",
        "message": error.message,
        "limit": 20,
        "remaining": 0,
        "resets_at": "2026-03-11T00:00:00+00:00",
    }


def test_internal_kinds():
    assert EmbeddingFailure("x").kind == "embedding_failure"
    assert CacheWriteFailure("x").kind == "cache_write_failure"
