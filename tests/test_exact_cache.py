"""
Tests for the exact (hash) cache tier.
"""

import pytest

from answer_cache.normalizer import question_hash
from answer_cache.services import ExactCache
from conftest import FE_QUESTION, make_entry


@pytest.fixture
def exact(store, clock):
    return ExactCache(store, clock=clock)


@pytest.mark.asyncio
async def test_miss(exact):
    assert await exact.lookup(question_hash(FE_QUESTION)) is None


@pytest.mark.asyncio
async def test_hit_count_grows_by_one_per_lookup(exact, store, clock):
    await store.insert(make_entry(FE_QUESTION, hit_count=3))
    key = question_hash(FE_QUESTION)

    for _ in range(5):
        entry = await exact.lookup(key)

    assert entry.hit_count == 8
    assert entry.last_hit_at == clock()
    assert store.entries[key].hit_count == 8


@pytest.mark.asyncio
async def test_lookup_by_any_variant(exact, store):
    await store.insert(make_entry(FE_QUESTION))
    entry = await exact.lookup(question_hash("  o que E FE!! "))
    assert entry is not None
    assert entry.question == FE_QUESTION


@pytest.mark.asyncio
async def test_store_is_insert_or_ignore(exact, store):
    assert await exact.store(make_entry(FE_QUESTION, answer="first answer " * 5)) is True
    assert await exact.store(make_entry(FE_QUESTION, answer="second answer " * 5)) is False

    assert await store.count_all() == 1
    assert store.entries[question_hash(FE_QUESTION)].answer.startswith("first")
