import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from economy.crud import ReadData
from economy.exceptions import AlreadyClaimedToday
from economy.models.schemas import DailyActivity
from economy.services.daily_gate import DailyGate
from sqlalchemy import func, select


async def count_records(Session, user_id, activity_kind):
    async with Session() as session:
        return await ReadData.count_daily_activities(user_id, activity_kind, session)


async def test_claim_once_per_day(gate, make_account, clock):
    user_id = await make_account()

    assert await gate.try_claim(user_id, "daily_bonus") == clock.now.date()
    with pytest.raises(AlreadyClaimedToday) as excinfo:
        await gate.try_claim(user_id, "daily_bonus")

    assert excinfo.value.next_available == "2024-05-18T00:00:00+00:00"
    assert excinfo.value.context["time_remaining"] == {
        "hours": 8,
        "minutes": 30,
        "total": 8 * 3600 * 1000 + 30 * 60 * 1000,
    }


async def test_kinds_and_accounts_are_independent(gate, make_account):
    first = await make_account()
    second = await make_account()

    await gate.try_claim(first, "daily_bonus")
    await gate.try_claim(first, "random_character")
    await gate.try_claim(second, "daily_bonus")


async def test_next_day_can_claim_again(Session, make_account, clock):
    gate = DailyGate(Session, clock=clock)
    user_id = await make_account()
    await gate.try_claim(user_id, "random_character")

    clock.now = clock.now + timedelta(hours=9)
    await gate.try_claim(user_id, "random_character")

    assert await count_records(Session, user_id, "random_character") == 2


async def test_day_boundary_is_utc(Session, make_account):
    # 23:30 at UTC-05:00 is already the next UTC day
    late_evening = datetime(2024, 5, 17, 23, 30, tzinfo=timezone(timedelta(hours=-5)))
    gate = DailyGate(Session, clock=lambda: late_evening)
    user_id = await make_account()

    assert await gate.try_claim(user_id, "daily_bonus") == datetime(2024, 5, 18).date()
    assert gate.next_available() == datetime(2024, 5, 19, tzinfo=timezone.utc)


async def test_concurrent_claims_insert_one_record(gate, make_account, Session):
    user_id = await make_account()

    results = await asyncio.gather(
        *(gate.try_claim(user_id, "daily_bonus") for _ in range(10)),
        return_exceptions=True,
    )

    assert sum(not isinstance(r, Exception) for r in results) == 1
    assert sum(isinstance(r, AlreadyClaimedToday) for r in results) == 9
    async with Session() as session:
        total = await session.execute(select(func.count(DailyActivity.id)))
    assert total.scalar_one() == 1


async def test_availability(gate, make_account):
    user_id = await make_account()

    before = await gate.availability(user_id, "random_character")
    assert before == {"can_play": True, "next_available": None, "time_remaining": None}

    await gate.try_claim(user_id, "random_character")
    after = await gate.availability(user_id, "random_character")
    assert after["can_play"] is False
    assert after["next_available"] == datetime(2024, 5, 18, tzinfo=timezone.utc)


async def test_settle_is_write_once(gate, make_account, Session, clock):
    user_id = await make_account()
    day = await gate.try_claim(user_id, "random_character")

    async with Session() as session:
        async with session.begin():
            assert await gate.settle(
                session, user_id, "random_character", day,
                {"character_id": 7, "already_owned": False, "coins_spent": 10},
            )
            assert not await gate.settle(
                session, user_id, "random_character", day,
                {"character_id": 8, "already_owned": True, "coins_earned": 5},
            )

    async with Session() as session:
        record = await ReadData.read_daily_activity(user_id, "random_character", day, session)
    assert (record.character_id, record.already_owned, record.coins_spent) == (7, False, 10)
