import asyncio
from datetime import timedelta

import pytest
from uuid6 import uuid7

from economy.exceptions import AlreadyConsumed, NotOwner, SessionNotFound
from economy.memory_session_store import MemorySessionStore

from conftest import make_character


@pytest.fixture
def store(clock):
    return MemorySessionStore(max_age=timedelta(minutes=5), clock=clock)


async def test_create_stores_unconsumed_session(store, clock):
    user_id = uuid7()
    session = await store.create(user_id, make_character())

    assert session.correct_position in (0, 1, 2)
    assert session.created_at == clock.now
    assert session.consumed is False
    assert store.sessions[session.session_id].user_id == user_id


async def test_session_ids_are_unique(store):
    user_id = uuid7()
    sessions = [await store.create(user_id, make_character()) for _ in range(50)]
    assert len({s.session_id for s in sessions}) == 50


async def test_positions_cover_all_cards(store):
    positions = {(await store.create(uuid7(), make_character())).correct_position for _ in range(200)}
    assert positions == {0, 1, 2}


async def test_consume_succeeds_exactly_once(store):
    user_id = uuid7()
    session = await store.create(user_id, make_character())

    consumed = await store.consume(session.session_id, user_id)
    assert consumed.session_id == session.session_id
    assert consumed.consumed is True

    with pytest.raises(AlreadyConsumed):
        await store.consume(session.session_id, user_id)


async def test_concurrent_consumes_only_one_wins(store):
    user_id = uuid7()
    session = await store.create(user_id, make_character())

    results = await asyncio.gather(
        *(store.consume(session.session_id, user_id) for _ in range(5)),
        return_exceptions=True,
    )

    assert sum(not isinstance(r, Exception) for r in results) == 1
    assert sum(isinstance(r, AlreadyConsumed) for r in results) == 4


async def test_consume_unknown_session(store):
    with pytest.raises(SessionNotFound):
        await store.consume(uuid7(), uuid7())


async def test_consume_by_other_account_leaves_session_open(store):
    owner = uuid7()
    session = await store.create(owner, make_character())

    with pytest.raises(NotOwner):
        await store.consume(session.session_id, uuid7())

    assert (await store.consume(session.session_id, owner)).consumed is True


async def test_expired_session_cannot_be_consumed(store, clock):
    user_id = uuid7()
    session = await store.create(user_id, make_character())

    clock.now = clock.now + timedelta(minutes=5, seconds=1)

    with pytest.raises(SessionNotFound):
        await store.consume(session.session_id, user_id)
    assert session.session_id not in store.sessions


async def test_sweep_removes_old_sessions_regardless_of_state(store, clock):
    user_id = uuid7()
    consumed = await store.create(user_id, make_character())
    await store.consume(consumed.session_id, user_id)
    open_session = await store.create(user_id, make_character())

    clock.now = clock.now + timedelta(minutes=3)
    fresh = await store.create(user_id, make_character())
    clock.now = clock.now + timedelta(minutes=3)

    assert await store.sweep_expired() == 2
    assert list(store.sessions) == [fresh.session_id]
    assert open_session.session_id not in store.sessions


async def test_sweep_with_explicit_max_age(store, clock):
    await store.create(uuid7(), make_character())
    clock.now = clock.now + timedelta(seconds=30)

    assert await store.sweep_expired(timedelta(minutes=10)) == 0
    assert await store.sweep_expired(timedelta(seconds=10)) == 1
    assert len(store) == 0
