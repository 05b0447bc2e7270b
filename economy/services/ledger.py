"""Coin ledger: balance mutation paired with an append-only transaction record."""

import logging
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from economy.crud import CreateData, ReadData, UpdateData
from economy.exceptions import AccountNotFound, InsufficientFunds, StorageFailure
from economy.models.dc_models import DeltaOutcome, TransactionTypeModel


class CoinLedger:
    def __init__(self, Session: async_sessionmaker):
        self.Session: async_sessionmaker = Session

    async def credit(self, user_id: UUID, amount: int, reason: str) -> int:
        """Add coins to the account and record an ``earn`` transaction

        Args:
            user_id (UUID): To identify the account
            amount (int): Coins to add, must be positive
            reason (str): Why the coins were granted

        Raises:
            AccountNotFound: The account does not exist
            StorageFailure: The store rejected the operation

        Returns:
            int: New balance
        """
        return await self._run(user_id, amount, TransactionTypeModel.earn, reason)

    async def debit(self, user_id: UUID, amount: int, reason: str) -> int:
        """Take coins from the account and record a ``spend`` transaction

        Nothing is taken when the balance is lower than the amount.

        Raises:
            AccountNotFound: The account does not exist
            InsufficientFunds: The balance does not cover the amount
            StorageFailure: The store rejected the operation

        Returns:
            int: New balance
        """
        return await self._run(user_id, amount, TransactionTypeModel.spend, reason)

    async def balance(self, user_id: UUID) -> int:
        try:
            async with self.Session() as session:
                coins = await ReadData.read_balance(user_id, session)
        except SQLAlchemyError as e:
            logging.error(f"Failed to read balance of {user_id}: {e}")
            raise StorageFailure() from e
        if coins is None:
            raise AccountNotFound()
        return coins

    async def _run(
        self, user_id: UUID, amount: int, transaction_type: TransactionTypeModel, reason: str
    ) -> int:
        try:
            async with self.Session() as session:
                async with session.begin():
                    return await self.post(session, user_id, amount, transaction_type, reason)
        except SQLAlchemyError as e:
            logging.error(f"Failed to {transaction_type.value} {amount} coins for {user_id} ({reason}): {e}")
            raise StorageFailure() from e

    @staticmethod
    async def post(
        session: AsyncSession,
        user_id: UUID,
        amount: int,
        transaction_type: TransactionTypeModel,
        reason: str,
    ) -> int:
        """Apply one ledger entry inside the caller's transaction.

        NOTE: Does not commit. A raised error must roll the caller's transaction back.
        """
        if amount <= 0:
            raise ValueError("amount must be > 0")

        delta = amount if transaction_type == TransactionTypeModel.earn else -amount
        result = await UpdateData.apply_balance_delta(user_id, delta, session)

        if result.outcome == DeltaOutcome.account_not_found:
            raise AccountNotFound()
        if result.outcome == DeltaOutcome.insufficient_funds:
            raise InsufficientFunds(required=amount, current=result.balance)

        await CreateData.add_coin_transaction(user_id, transaction_type, amount, reason, session)
        logging.info(f"{transaction_type.value} {amount} coins for {user_id} ({reason}), balance {result.balance}")
        return result.balance
