from datetime import timedelta

import pytest
from uuid6 import uuid7

from economy.crud import ReadData
from economy.exceptions import AlreadyConsumed, InsufficientFunds, NotOwner, SessionNotFound
from economy.memory_session_store import MemorySessionStore
from economy.services.memory_game import MemoryGameFlow

from conftest import FakeCatalog, make_character


@pytest.fixture
def store(clock):
    return MemorySessionStore(max_age=timedelta(minutes=5), clock=clock, choose_position=lambda: 1)


@pytest.fixture
def catalog():
    return FakeCatalog(make_character(character_id=42, name="Squanchy", status="Alive"))


@pytest.fixture
def memory_game(Session, ledger, store, catalog):
    return MemoryGameFlow(Session, ledger, store, catalog)


async def read_results(Session, user_id):
    async with Session() as session:
        return await ReadData.read_memory_game_results(user_id, session)


async def test_start_charges_and_hides_answer_server_side(memory_game, make_account, read_balance, store):
    user_id = await make_account(coins=100)

    started = await memory_game.play_start(user_id)

    assert await read_balance(user_id) == 95
    assert started.coins_spent == 5
    assert started.character.name == "Squanchy"
    assert [card.has_character for card in started.cards] == [False, True, False]
    assert started.time_to_memorize == 3000
    assert store.sessions[started.game_id].correct_position == 1


async def test_start_without_funds(memory_game, make_account, catalog, store):
    user_id = await make_account(coins=4)

    with pytest.raises(InsufficientFunds) as excinfo:
        await memory_game.play_start(user_id)

    assert (excinfo.value.required, excinfo.value.current) == (5, 4)
    assert catalog.calls == 0
    assert len(store) == 0


async def test_correct_guess_unlocks_new_character(memory_game, make_account, read_balance, Session):
    user_id = await make_account(coins=100)
    started = await memory_game.play_start(user_id)

    result = await memory_game.submit_guess(started.game_id, user_id, 1)

    assert result.correct is True
    assert result.coins_earned == 15
    assert result.total_coins == 110
    assert await read_balance(user_id) == 110
    async with Session() as session:
        characters = await ReadData.read_unlocked_characters(user_id, session)
    assert [(c.character_id, c.rarity) for c in characters] == [(42, "common")]

    with pytest.raises(AlreadyConsumed):
        await memory_game.submit_guess(started.game_id, user_id, 1)
    assert await read_balance(user_id) == 110

    results = await read_results(Session, user_id)
    assert [(r.character_id, r.correct_guess, r.coins_earned) for r in results] == [(42, True, 15)]


async def test_correct_guess_on_owned_character_pays_less(memory_game, make_account, read_balance):
    user_id = await make_account(coins=100)
    first = await memory_game.play_start(user_id)
    await memory_game.submit_guess(first.game_id, user_id, 1)

    second = await memory_game.play_start(user_id)
    result = await memory_game.submit_guess(second.game_id, user_id, 1)

    assert result.coins_earned == 8
    assert await read_balance(user_id) == 100 - 5 + 15 - 5 + 8


async def test_wrong_guess_earns_nothing_but_is_recorded(memory_game, make_account, read_balance, Session, read_transactions):
    user_id = await make_account(coins=100)
    started = await memory_game.play_start(user_id)

    result = await memory_game.submit_guess(started.game_id, user_id, 2)

    assert result.correct is False
    assert result.correct_position == 1
    assert result.coins_earned == 0
    assert result.total_coins == 95
    assert await read_balance(user_id) == 95
    assert [(t.transaction_type, t.amount) for t in await read_transactions(user_id)] == [("spend", 5)]

    results = await read_results(Session, user_id)
    assert [(r.correct_guess, r.coins_earned) for r in results] == [(False, 0)]

    async with Session() as session:
        assert await ReadData.read_unlocked_characters(user_id, session) == []


async def test_guess_on_other_players_game(memory_game, make_account, read_balance):
    owner = await make_account(coins=100)
    intruder = await make_account(coins=100)
    started = await memory_game.play_start(owner)

    with pytest.raises(NotOwner):
        await memory_game.submit_guess(started.game_id, intruder, 1)

    assert await read_balance(intruder) == 100
    result = await memory_game.submit_guess(started.game_id, owner, 1)
    assert result.correct is True


async def test_expired_game_pays_nothing(memory_game, make_account, read_balance, clock, Session):
    user_id = await make_account(coins=100)
    started = await memory_game.play_start(user_id)

    clock.now = clock.now + timedelta(minutes=6)

    with pytest.raises(SessionNotFound):
        await memory_game.submit_guess(started.game_id, user_id, 1)
    assert await read_balance(user_id) == 95
    assert await read_results(Session, user_id) == []


async def test_unknown_game(memory_game, make_account):
    user_id = await make_account(coins=100)
    with pytest.raises(SessionNotFound):
        await memory_game.submit_guess(uuid7(), user_id, 0)
