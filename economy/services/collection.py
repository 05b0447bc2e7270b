"""Read models over an account's collection and activity."""

import logging
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker

from economy.crud import ReadData
from economy.exceptions import AccountNotFound, StorageFailure
from economy.models.dc_models import (
    AccountProfileModel,
    ActivityKindModel,
    CollectionModel,
    RarityCountModel,
    RarityModel,
    StatsModel,
)
from economy.models.schema_models import AccountSchema


def to_profile(account: AccountSchema) -> AccountProfileModel:
    return AccountProfileModel(
        user_id=account.user_id,
        username=account.username,
        coins=account.coins,
        total_coins_earned=account.total_coins_earned,
        member_since=account.created_at,
    )


class Collection:
    def __init__(self, Session: async_sessionmaker):
        self.Session: async_sessionmaker = Session

    async def profile(self, user_id: UUID) -> AccountProfileModel:
        try:
            async with self.Session() as session:
                account = await ReadData.read_account(user_id, session)
        except SQLAlchemyError as e:
            logging.error(f"Failed to read profile of {user_id}: {e}")
            raise StorageFailure() from e
        if account is None:
            raise AccountNotFound()
        return to_profile(account)

    async def characters(self, user_id: UUID) -> CollectionModel:
        """Unlocked characters of the account, newest first"""
        try:
            async with self.Session() as session:
                characters = await ReadData.read_unlocked_characters(user_id, session)
        except SQLAlchemyError as e:
            logging.error(f"Failed to read characters of {user_id}: {e}")
            raise StorageFailure() from e
        return CollectionModel(characters=characters, total_unlocked=len(characters))

    async def stats(self, user_id: UUID) -> StatsModel:
        """Balance, characters per rarity tier and number of login days

        Raises:
            AccountNotFound: The account does not exist

        Returns:
            StatsModel: Account statistics
        """
        try:
            async with self.Session() as session:
                account = await ReadData.read_account(user_id, session)
                if account is None:
                    raise AccountNotFound()
                by_rarity = await ReadData.count_characters_by_rarity(user_id, session)
                login_days = await ReadData.count_daily_activities(
                    user_id, ActivityKindModel.daily_login.value, session
                )
        except SQLAlchemyError as e:
            logging.error(f"Failed to read stats of {user_id}: {e}")
            raise StorageFailure() from e

        counts = {rarity.value: by_rarity.get(rarity.value, 0) for rarity in RarityModel}
        return StatsModel(
            user=to_profile(account),
            characters=RarityCountModel(total=sum(counts.values()), **counts),
            login_days=login_days,
        )
