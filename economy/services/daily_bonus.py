"""Daily coin bonuses (the claimable bonus and the first-login-of-the-day bonus).

The gate claim and the credit share one transaction: either both land or
neither does, so concurrent claims credit the bonus exactly once.
"""

import logging
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker

from economy.domain.economy_rules import DAILY_BONUS, DAILY_LOGIN_BONUS
from economy.exceptions import AlreadyClaimedToday, StorageFailure
from economy.models.dc_models import ActivityKindModel, DailyBonusResultModel, TransactionTypeModel
from economy.services.daily_gate import DailyGate
from economy.services.ledger import CoinLedger


class DailyBonus:
    def __init__(self, Session: async_sessionmaker, gate: DailyGate):
        self.Session: async_sessionmaker = Session
        self.gate = gate

    async def _grant(self, user_id: UUID, activity_kind: ActivityKindModel, amount: int) -> int:
        try:
            async with self.Session() as session:
                async with session.begin():
                    await self.gate.claim_in(
                        session, user_id, activity_kind.value, {"coins_earned": amount}
                    )
                    return await CoinLedger.post(
                        session, user_id, amount, TransactionTypeModel.earn, activity_kind.value
                    )
        except SQLAlchemyError as e:
            logging.error(f"Failed to grant {activity_kind.value} to {user_id}: {e}")
            raise StorageFailure() from e

    async def claim(self, user_id: UUID) -> DailyBonusResultModel:
        """Claim today's bonus

        Raises:
            AlreadyClaimedToday: The bonus was already claimed today

        Returns:
            DailyBonusResultModel: Coins received and new balance
        """
        total_coins = await self._grant(user_id, ActivityKindModel.daily_bonus, DAILY_BONUS)
        return DailyBonusResultModel(
            message="Daily bonus claimed!",
            coins_received=DAILY_BONUS,
            total_coins=total_coins,
        )

    async def claim_login(self, user_id: UUID) -> bool:
        """Grant the first-login-of-the-day bonus. Returns False when already granted today."""
        try:
            await self._grant(user_id, ActivityKindModel.daily_login, DAILY_LOGIN_BONUS)
        except AlreadyClaimedToday:
            return False
        return True
