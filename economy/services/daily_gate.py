"""Once-per-UTC-day gate for named daily activities.

The unique key (user, activity kind, day) on ``daily_activities`` is the only
source of truth. A claim is a single insert-if-absent; losing the race shows up
as ``already_exists`` and becomes ``AlreadyClaimedToday``.
"""

import logging
from datetime import date, datetime, timezone
from typing import Callable
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from economy.crud import CreateData, ReadData, UpdateData
from economy.domain.economy_rules import next_utc_midnight, time_remaining, utc_day
from economy.exceptions import AlreadyClaimedToday, StorageFailure
from economy.models.dc_models import InsertOutcome


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class DailyGate:
    def __init__(self, Session: async_sessionmaker, clock: Callable[[], datetime] = utc_now):
        self.Session: async_sessionmaker = Session
        self.clock = clock

    def today(self) -> date:
        return utc_day(self.clock())

    def next_available(self) -> datetime:
        """Start of the next UTC day. Informational only, never used to enforce the gate."""
        return next_utc_midnight(self.clock())

    def already_claimed(self, activity_kind: str) -> AlreadyClaimedToday:
        now = self.clock()
        next_time = next_utc_midnight(now)
        return AlreadyClaimedToday(
            activity_kind=activity_kind,
            next_available=next_time.isoformat(),
            time_remaining=time_remaining(now, next_time),
        )

    async def try_claim(
        self, user_id: UUID, activity_kind: str, activity_fields: dict | None = None
    ) -> date:
        """Claim today's slot of the activity in its own committed transaction

        Args:
            user_id (UUID): To identify the account
            activity_kind (str): Name of the daily activity
            activity_fields (dict | None): Activity-specific columns known up front

        Raises:
            AlreadyClaimedToday: Today's slot is already taken
            StorageFailure: The store rejected the insert

        Returns:
            date: The claimed UTC day
        """
        try:
            async with self.Session() as session:
                async with session.begin():
                    return await self.claim_in(session, user_id, activity_kind, activity_fields)
        except SQLAlchemyError as e:
            logging.error(f"Failed to claim {activity_kind} for {user_id}: {e}")
            raise StorageFailure() from e

    async def claim_in(
        self,
        session: AsyncSession,
        user_id: UUID,
        activity_kind: str,
        activity_fields: dict | None = None,
    ) -> date:
        """Claim inside the caller's transaction. Does not commit."""
        activity_date = self.today()
        outcome = await CreateData.add_daily_activity_if_absent(
            user_id, activity_kind, activity_date, activity_fields or {}, session
        )
        if outcome == InsertOutcome.already_exists:
            logging.info(f"{activity_kind} already claimed today by {user_id}")
            raise self.already_claimed(activity_kind)
        return activity_date

    async def settle(
        self, session: AsyncSession, user_id: UUID, activity_kind: str, activity_date: date, activity_fields: dict
    ) -> bool:
        """Record the outcome of a claimed activity. Does not commit."""
        return await UpdateData.settle_daily_activity(
            user_id, activity_kind, activity_date, activity_fields, session
        )

    async def availability(self, user_id: UUID, activity_kind: str) -> dict:
        """Whether the activity can still be played today, with the time until the next slot

        Returns:
            dict: can_play, next_available, time_remaining
        """
        now = self.clock()
        try:
            async with self.Session() as session:
                record = await ReadData.read_daily_activity(
                    user_id, activity_kind, utc_day(now), session
                )
        except SQLAlchemyError as e:
            logging.error(f"Failed to read {activity_kind} availability for {user_id}: {e}")
            raise StorageFailure() from e

        if record is None:
            return {"can_play": True, "next_available": None, "time_remaining": None}
        next_time = next_utc_midnight(now)
        return {
            "can_play": False,
            "next_available": next_time,
            "time_remaining": time_remaining(now, next_time),
        }
