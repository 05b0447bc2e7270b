"""Random character unlock, once per UTC day.

Order: daily gate -> funds check -> catalog fetch -> settle.

The gate is claimed in its own committed transaction before anything else, so
an attempt that later fails (not enough coins, catalog or storage trouble) still
uses up the day. Settlement runs in one transaction: the character insert, the
debit or duplicate bonus and the activity outcome commit together or not at all.
"""

import logging
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker

from economy.crud import CreateData
from economy.domain.economy_rules import UNLOCK_COST, UNLOCK_DUPLICATE_BONUS
from economy.domain.rarity import classify
from economy.exceptions import InsufficientFunds, StorageFailure
from economy.models.dc_models import (
    ActivityKindModel,
    InsertOutcome,
    RarityCharacterModel,
    TransactionTypeModel,
    UnlockResultModel,
)
from economy.services.daily_gate import DailyGate
from economy.services.ledger import CoinLedger

ACTIVITY_KIND = ActivityKindModel.random_character.value


class UnlockFlow:
    def __init__(self, Session: async_sessionmaker, ledger: CoinLedger, gate: DailyGate, catalog):
        self.Session: async_sessionmaker = Session
        self.ledger = ledger
        self.gate = gate
        self.catalog = catalog

    async def play(self, user_id: UUID) -> UnlockResultModel:
        """Unlock a random character for the account

        Args:
            user_id (UUID): To identify the account

        Raises:
            AlreadyClaimedToday: The account already played today
            InsufficientFunds: Balance below UNLOCK_COST (the day is still used up)
            CatalogUnavailable: No character could be fetched
            StorageFailure: The store failed after the gate was claimed

        Returns:
            UnlockResultModel: Unlocked (or already owned) character and remaining coins
        """
        activity_date = await self.gate.try_claim(user_id, ACTIVITY_KIND)

        current = await self.ledger.balance(user_id)
        if current < UNLOCK_COST:
            logging.info(f"{user_id} cannot afford an unlock ({current}/{UNLOCK_COST})")
            raise InsufficientFunds(required=UNLOCK_COST, current=current)

        character = await self.catalog.random_character()
        rarity = classify(character)

        try:
            async with self.Session() as session:
                async with session.begin():
                    outcome = await CreateData.add_unlocked_character_if_absent(
                        user_id, character, rarity, session
                    )
                    if outcome == InsertOutcome.already_exists:
                        balance = await CoinLedger.post(
                            session,
                            user_id,
                            UNLOCK_DUPLICATE_BONUS,
                            TransactionTypeModel.earn,
                            "random_character_duplicate",
                        )
                        activity_fields = {
                            "character_id": character.id,
                            "already_owned": True,
                            "coins_earned": UNLOCK_DUPLICATE_BONUS,
                        }
                    else:
                        balance = await CoinLedger.post(
                            session,
                            user_id,
                            UNLOCK_COST,
                            TransactionTypeModel.spend,
                            "random_character_game",
                        )
                        activity_fields = {
                            "character_id": character.id,
                            "already_owned": False,
                            "coins_spent": UNLOCK_COST,
                        }
                    await self.gate.settle(session, user_id, ACTIVITY_KIND, activity_date, activity_fields)
        except SQLAlchemyError as e:
            logging.error(f"Failed to settle character unlock for {user_id}: {e}")
            raise StorageFailure() from e

        result_character = RarityCharacterModel(**character.model_dump(), rarity=rarity)
        if outcome == InsertOutcome.already_exists:
            return UnlockResultModel(
                message="Character already unlocked! Bonus coins received.",
                character=result_character,
                already_unlocked=True,
                bonus_coins=UNLOCK_DUPLICATE_BONUS,
                remaining_coins=balance,
            )
        return UnlockResultModel(
            message="Character unlocked successfully!",
            character=result_character,
            already_unlocked=False,
            coins_spent=UNLOCK_COST,
            remaining_coins=balance,
        )
