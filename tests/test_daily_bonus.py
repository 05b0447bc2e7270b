import asyncio
from datetime import timedelta

import pytest

from economy.exceptions import AlreadyClaimedToday
from economy.services.daily_bonus import DailyBonus


@pytest.fixture
def daily_bonus(Session, gate):
    return DailyBonus(Session, gate)


async def test_claim_credits_bonus(daily_bonus, make_account, read_transactions):
    user_id = await make_account(coins=20)

    result = await daily_bonus.claim(user_id)

    assert result.coins_received == 5
    assert result.total_coins == 25
    assert [(t.transaction_type, t.amount, t.reason) for t in await read_transactions(user_id)] == [
        ("earn", 5, "daily_bonus")
    ]


async def test_second_claim_same_day_moves_no_coins(daily_bonus, make_account, read_balance):
    user_id = await make_account(coins=20)
    await daily_bonus.claim(user_id)

    with pytest.raises(AlreadyClaimedToday):
        await daily_bonus.claim(user_id)
    assert await read_balance(user_id) == 25


async def test_simultaneous_claims_credit_once(daily_bonus, make_account, read_balance, read_transactions):
    user_id = await make_account(coins=0)

    results = await asyncio.gather(
        daily_bonus.claim(user_id), daily_bonus.claim(user_id), return_exceptions=True
    )

    assert sum(isinstance(r, AlreadyClaimedToday) for r in results) == 1
    assert sum(not isinstance(r, Exception) for r in results) == 1
    assert await read_balance(user_id) == 5
    assert sum(t.amount for t in await read_transactions(user_id)) == 5


async def test_login_bonus_once_per_day(daily_bonus, make_account, read_balance, clock):
    user_id = await make_account(coins=0)

    assert await daily_bonus.claim_login(user_id) is True
    assert await daily_bonus.claim_login(user_id) is False
    assert await read_balance(user_id) == 10

    clock.now = clock.now + timedelta(days=1)
    assert await daily_bonus.claim_login(user_id) is True
    assert await read_balance(user_id) == 20


async def test_claim_for_missing_account_leaves_no_gate_record(daily_bonus, Session):
    from uuid6 import uuid7

    from economy.crud import ReadData
    from economy.exceptions import AccountNotFound

    user_id = uuid7()
    with pytest.raises(AccountNotFound):
        await daily_bonus.claim(user_id)

    async with Session() as session:
        assert await ReadData.count_daily_activities(user_id, "daily_bonus", session) == 0
