"""Storage primitives.

None of these helpers commit: the services in ``economy.services`` own the
session and transaction boundaries and call these inside ``session.begin()``.
"""

from datetime import date
from typing import List
from uuid import UUID

from sqlalchemy import desc, func, select, update
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession
from uuid6 import uuid7

from economy.models.dc_models import (
    BalanceDelta,
    CharacterModel,
    DeltaOutcome,
    InsertOutcome,
    RarityModel,
    TransactionTypeModel,
)
from economy.models.schema_models import (
    AccountSchema,
    CoinTransactionSchema,
    CredentialSchema,
    DailyActivitySchema,
    MemoryGameResultSchema,
    UnlockedCharacterSchema,
)
from economy.models.schemas import (
    Account,
    CoinTransaction,
    DailyActivity,
    MemoryGameResult,
    UnlockedCharacter,
)


async def insert_if_absent(
    session: AsyncSession, table, values: dict, index_elements: List[str]
) -> InsertOutcome:
    """Insert a row unless one with the same unique key exists.

    Uses the dialect's ON CONFLICT DO NOTHING so concurrent callers racing on the
    same key see exactly one ``inserted`` and the rest ``already_exists``.

    Args:
        session (AsyncSession): Session inside an open transaction
        table: ORM class to insert into
        values (dict): Column values of the new row
        index_elements (List[str]): Columns of the unique constraint

    Returns:
        InsertOutcome: inserted or already_exists
    """
    if session.bind.dialect.name == "postgresql":
        stmt = postgresql_insert(table.__table__)
    else:
        stmt = sqlite_insert(table.__table__)
    stmt = stmt.values(**values).on_conflict_do_nothing(index_elements=index_elements)
    result = await session.execute(stmt)
    if result.rowcount == 1:
        return InsertOutcome.inserted
    return InsertOutcome.already_exists


class ReadData:
    @staticmethod
    async def read_account(user_id: UUID, session: AsyncSession) -> AccountSchema | None:
        """Read account data

        Args:
            user_id (UUID): To identify the account

        Returns:
            AccountSchema | None: Account data, None if it does not exist
        """
        stmt = select(Account).where(Account.user_id == user_id)
        result = await session.execute(stmt)
        result = result.scalars().first()
        if result is None:
            return None
        return AccountSchema.model_validate(result)

    @staticmethod
    async def read_credentials(username: str, session: AsyncSession) -> CredentialSchema | None:
        stmt = select(Account).where(Account.username == username)
        result = await session.execute(stmt)
        result = result.scalars().first()
        if result is None:
            return None
        return CredentialSchema.model_validate(result)

    @staticmethod
    async def read_balance(user_id: UUID, session: AsyncSession) -> int | None:
        stmt = select(Account.coins).where(Account.user_id == user_id)
        result = await session.execute(stmt)
        return result.scalars().first()

    @staticmethod
    async def read_unlocked_characters(
        user_id: UUID, session: AsyncSession
    ) -> List[UnlockedCharacterSchema]:
        """Read every character the account unlocked, newest first

        Args:
            user_id (UUID): To identify the account

        Returns:
            List[UnlockedCharacterSchema]: Unlocked characters
        """
        stmt = (
            select(UnlockedCharacter)
            .where(UnlockedCharacter.user_id == user_id)
            .order_by(desc(UnlockedCharacter.unlocked_at), desc(UnlockedCharacter.id))
        )
        result = await session.execute(stmt)
        return [UnlockedCharacterSchema.model_validate(row) for row in result.scalars().all()]

    @staticmethod
    async def count_characters_by_rarity(user_id: UUID, session: AsyncSession) -> dict:
        stmt = (
            select(UnlockedCharacter.rarity, func.count(UnlockedCharacter.id))
            .where(UnlockedCharacter.user_id == user_id)
            .group_by(UnlockedCharacter.rarity)
        )
        result = await session.execute(stmt)
        return {rarity: count for rarity, count in result.all()}

    @staticmethod
    async def read_daily_activity(
        user_id: UUID, activity_kind: str, activity_date: date, session: AsyncSession
    ) -> DailyActivitySchema | None:
        stmt = select(DailyActivity).where(
            DailyActivity.user_id == user_id,
            DailyActivity.activity_kind == activity_kind,
            DailyActivity.activity_date == activity_date,
        )
        result = await session.execute(stmt)
        result = result.scalars().first()
        if result is None:
            return None
        return DailyActivitySchema.model_validate(result)

    @staticmethod
    async def count_daily_activities(user_id: UUID, activity_kind: str, session: AsyncSession) -> int:
        stmt = select(func.count(DailyActivity.id)).where(
            DailyActivity.user_id == user_id,
            DailyActivity.activity_kind == activity_kind,
        )
        result = await session.execute(stmt)
        return result.scalar_one()

    @staticmethod
    async def read_transactions(user_id: UUID, session: AsyncSession) -> List[CoinTransactionSchema]:
        """Read the coin ledger of an account in insertion order

        Args:
            user_id (UUID): To identify the account

        Returns:
            List[CoinTransactionSchema]: Transaction records, oldest first
        """
        stmt = (
            select(CoinTransaction)
            .where(CoinTransaction.user_id == user_id)
            .order_by(CoinTransaction.transaction_id)
        )
        result = await session.execute(stmt)
        return [CoinTransactionSchema.model_validate(row) for row in result.scalars().all()]

    @staticmethod
    async def read_memory_game_results(
        user_id: UUID, session: AsyncSession
    ) -> List[MemoryGameResultSchema]:
        stmt = (
            select(MemoryGameResult)
            .where(MemoryGameResult.user_id == user_id)
            .order_by(MemoryGameResult.id)
        )
        result = await session.execute(stmt)
        return [MemoryGameResultSchema.model_validate(row) for row in result.scalars().all()]


class CreateData:
    @staticmethod
    async def add_account(
        username: str, hash_password: str, salt: str, session: AsyncSession
    ) -> UUID | None:
        """Add an account with an empty balance

        Args:
            username (str): Unique login name
            hash_password (str): Peppered and salted password hash
            salt (str): Per-account salt

        Returns:
            UUID | None: New account id, None if the username is taken
        """
        user_id = uuid7()
        outcome = await insert_if_absent(
            session,
            Account,
            {
                "user_id": user_id,
                "username": username,
                "hash_password": hash_password,
                "salt": salt,
                "coins": 0,
                "total_coins_earned": 0,
            },
            ["username"],
        )
        if outcome == InsertOutcome.already_exists:
            return None
        return user_id

    @staticmethod
    async def add_coin_transaction(
        user_id: UUID,
        transaction_type: TransactionTypeModel,
        amount: int,
        reason: str,
        session: AsyncSession,
    ) -> None:
        session.add(
            CoinTransaction(
                transaction_id=uuid7(),
                user_id=user_id,
                transaction_type=transaction_type.value,
                amount=amount,
                reason=reason,
            )
        )
        await session.flush()

    @staticmethod
    async def add_daily_activity_if_absent(
        user_id: UUID,
        activity_kind: str,
        activity_date: date,
        activity_fields: dict,
        session: AsyncSession,
    ) -> InsertOutcome:
        values = {
            "coins_spent": 0,
            "coins_earned": 0,
            **activity_fields,
            "user_id": user_id,
            "activity_kind": activity_kind,
            "activity_date": activity_date,
        }
        return await insert_if_absent(
            session, DailyActivity, values, ["user_id", "activity_kind", "activity_date"]
        )

    @staticmethod
    async def add_unlocked_character_if_absent(
        user_id: UUID, character: CharacterModel, rarity: RarityModel, session: AsyncSession
    ) -> InsertOutcome:
        """Add a character to the account's collection unless it is already there

        Args:
            user_id (UUID): To identify the account
            character (CharacterModel): Catalog record to store
            rarity (RarityModel): Classified rarity tier

        Returns:
            InsertOutcome: inserted or already_exists
        """
        return await insert_if_absent(
            session,
            UnlockedCharacter,
            {
                "user_id": user_id,
                "character_id": character.id,
                "character_name": character.name,
                "character_image": character.image,
                "character_status": character.status,
                "character_species": character.species,
                "character_location": character.location.name,
                "rarity": rarity.value,
            },
            ["user_id", "character_id"],
        )

    @staticmethod
    async def add_memory_game_result(
        user_id: UUID, character_id: int, correct_guess: bool, coins_earned: int, session: AsyncSession
    ) -> None:
        session.add(
            MemoryGameResult(
                user_id=user_id,
                character_id=character_id,
                correct_guess=correct_guess,
                coins_earned=coins_earned,
            )
        )
        await session.flush()


class UpdateData:
    @staticmethod
    async def apply_balance_delta(user_id: UUID, delta: int, session: AsyncSession) -> BalanceDelta:
        """Change the balance in one conditional UPDATE

        A negative delta only applies while the balance stays non-negative, so two
        concurrent debits can never both pass a stale check. A positive delta also
        raises total_coins_earned.

        Args:
            user_id (UUID): To identify the account
            delta (int): Signed amount of coins

        Returns:
            BalanceDelta: Outcome tag and the resulting (or current) balance
        """
        values = {"coins": Account.coins + delta}
        if delta > 0:
            values["total_coins_earned"] = Account.total_coins_earned + delta

        stmt = update(Account).where(Account.user_id == user_id)
        if delta < 0:
            stmt = stmt.where(Account.coins >= -delta)
        stmt = (
            stmt.values(**values)
            .returning(Account.coins)
            .execution_options(synchronize_session=False)
        )
        result = await session.execute(stmt)
        new_balance = result.scalars().first()
        if new_balance is not None:
            return BalanceDelta(outcome=DeltaOutcome.applied, balance=new_balance)

        current = await ReadData.read_balance(user_id, session)
        if current is None:
            return BalanceDelta(outcome=DeltaOutcome.account_not_found)
        return BalanceDelta(outcome=DeltaOutcome.insufficient_funds, balance=current)

    @staticmethod
    async def settle_daily_activity(
        user_id: UUID,
        activity_kind: str,
        activity_date: date,
        activity_fields: dict,
        session: AsyncSession,
    ) -> bool:
        """Fill the outcome columns of a claimed daily activity exactly once

        Returns:
            bool: True if the row was settled, False if it was already settled
        """
        stmt = (
            update(DailyActivity)
            .where(
                DailyActivity.user_id == user_id,
                DailyActivity.activity_kind == activity_kind,
                DailyActivity.activity_date == activity_date,
                DailyActivity.already_owned.is_(None),
            )
            .values(**activity_fields)
            .execution_options(synchronize_session=False)
        )
        result = await session.execute(stmt)
        return result.rowcount == 1
