"""Tests for the Redis-backed session store."""

import json
from unittest.mock import AsyncMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from onboarding_wizard.core.exceptions import StoreReadError, StoreWriteError
from onboarding_wizard.services.session_store import SessionStore

pytestmark = pytest.mark.unit


@pytest.mark.asyncio
async def test_create_writes_initial_state(store, redis):
    session_id, state = await store.create()

    raw = json.loads(await redis.get(f"session:{session_id}"))

    assert state.question_index == 0
    assert state.reprompted_index is None
    assert state.last_interaction_timestamp > 0
    assert raw["questionIndex"] == 0
    assert raw["repromptedIndex"] is None
    assert raw["accumulatedData"]["sessionId"] == session_id


@pytest.mark.asyncio
async def test_create_sets_ttl(store, redis):
    session_id, _ = await store.create()

    ttl = await redis.ttl(f"session:{session_id}")

    assert 0 < ttl <= 3600


@pytest.mark.asyncio
async def test_get_round_trips_state(store):
    session_id, _ = await store.create()

    state = await store.get(session_id)

    assert state is not None
    assert state.accumulated_data.session_id == session_id


@pytest.mark.asyncio
async def test_get_missing_or_expired_returns_none(store, redis):
    session_id, _ = await store.create()
    await redis.delete(f"session:{session_id}")

    assert await store.get(session_id) is None
    assert await store.get("missing-id") is None
    assert await store.get(None) is None


@pytest.mark.asyncio
async def test_get_unreadable_record_returns_none(store, redis):
    await redis.set("session:garbled", "{not json")

    assert await store.get("garbled") is None


@pytest.mark.asyncio
async def test_update_resets_ttl_and_stamps_time(store, redis):
    session_id, state = await store.create()
    key = f"session:{session_id}"
    await redis.expire(key, 10)

    state.question_index = 3
    state.last_interaction_timestamp = 0
    await store.update(session_id, state)

    assert await redis.ttl(key) > 10
    reloaded = await store.get(session_id)
    assert reloaded.question_index == 3
    assert reloaded.last_interaction_timestamp > 0


@pytest.mark.asyncio
async def test_delete_is_best_effort(store):
    session_id, _ = await store.create()

    await store.delete(session_id)
    await store.delete(session_id)
    await store.delete(None)

    assert await store.get(session_id) is None


@pytest.mark.asyncio
async def test_unconfirmed_write_raises():
    redis = AsyncMock()
    redis.set.return_value = None
    store = SessionStore(redis)

    with pytest.raises(StoreWriteError):
        await store.create()


@pytest.mark.asyncio
async def test_write_error_raises_store_write_error():
    redis = AsyncMock()
    redis.set.side_effect = RedisConnectionError("connection refused")
    store = SessionStore(redis)

    with pytest.raises(StoreWriteError):
        await store.create()


@pytest.mark.asyncio
async def test_read_error_raises_store_read_error():
    redis = AsyncMock()
    redis.get.side_effect = RedisConnectionError("connection refused")
    store = SessionStore(redis)

    with pytest.raises(StoreReadError):
        await store.get("some-id")


@pytest.mark.asyncio
async def test_delete_swallows_store_errors():
    redis = AsyncMock()
    redis.delete.side_effect = RedisConnectionError("connection refused")
    store = SessionStore(redis)

    await store.delete("some-id")
