"""Memory card game: pay to start, guess which of three cards hides the character."""

import logging
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker

from economy.crud import CreateData, ReadData
from economy.domain.economy_rules import (
    GAME_COST,
    MEMORY_DUPLICATE_REWARD,
    MEMORY_TIME_TO_MEMORIZE_MS,
    MEMORY_WIN_REWARD,
    card_layout,
)
from economy.domain.rarity import classify
from economy.exceptions import InsufficientFunds, StorageFailure
from economy.memory_session_store import MemorySessionStore
from economy.models.dc_models import (
    CharacterDisplayModel,
    InsertOutcome,
    MemoryGameStartModel,
    MemoryGuessResultModel,
    TransactionTypeModel,
)
from economy.services.ledger import CoinLedger


class MemoryGameFlow:
    def __init__(
        self, Session: async_sessionmaker, ledger: CoinLedger, store: MemorySessionStore, catalog
    ):
        self.Session: async_sessionmaker = Session
        self.ledger = ledger
        self.store = store
        self.catalog = catalog

    async def play_start(self, user_id: UUID) -> MemoryGameStartModel:
        """Charge GAME_COST and open a memory session

        The correct position only lives in the session store; the card layout in
        the response is what the client shows during the memorisation phase.

        Raises:
            InsufficientFunds: Balance below GAME_COST
            CatalogUnavailable: No character could be fetched

        Returns:
            MemoryGameStartModel: Game id, character display fields and cards
        """
        current = await self.ledger.balance(user_id)
        if current < GAME_COST:
            logging.info(f"{user_id} cannot afford a memory game ({current}/{GAME_COST})")
            raise InsufficientFunds(required=GAME_COST, current=current)

        character = await self.catalog.random_character()
        await self.ledger.debit(user_id, GAME_COST, "memory_game")
        session = await self.store.create(user_id, character)

        return MemoryGameStartModel(
            game_id=session.session_id,
            character=CharacterDisplayModel(
                name=character.name, image=character.image, species=character.species
            ),
            cards=card_layout(session.correct_position),
            message="Memorize the character position! Cards will be shuffled.",
            time_to_memorize=MEMORY_TIME_TO_MEMORIZE_MS,
            coins_spent=GAME_COST,
        )

    async def submit_guess(
        self, game_id: UUID, user_id: UUID, selected_position: int
    ) -> MemoryGuessResultModel:
        """Consume the session and settle the guess

        Args:
            game_id (UUID): Session id returned by play_start
            user_id (UUID): Caller, must own the session
            selected_position (int): Card picked by the player

        Raises:
            SessionNotFound: Unknown or expired game
            NotOwner: The game belongs to another account
            AlreadyConsumed: The game was already guessed
            StorageFailure: The store failed while settling

        Returns:
            MemoryGuessResultModel: Outcome, reward and new balance
        """
        session = await self.store.consume(game_id, user_id)
        character = session.character
        is_correct = selected_position == session.correct_position
        reward = 0

        try:
            async with self.Session() as db_session:
                async with db_session.begin():
                    if is_correct:
                        outcome = await CreateData.add_unlocked_character_if_absent(
                            user_id, character, classify(character), db_session
                        )
                        if outcome == InsertOutcome.inserted:
                            reward = MEMORY_WIN_REWARD
                        else:
                            reward = MEMORY_DUPLICATE_REWARD
                        await CoinLedger.post(
                            db_session, user_id, reward, TransactionTypeModel.earn, "memory_game_win"
                        )
                    await CreateData.add_memory_game_result(
                        user_id, character.id, is_correct, reward, db_session
                    )
                    total_coins = await ReadData.read_balance(user_id, db_session)
        except SQLAlchemyError as e:
            logging.error(f"Failed to settle memory game {game_id} for {user_id}: {e}")
            raise StorageFailure() from e

        return MemoryGuessResultModel(
            correct=is_correct,
            correct_position=session.correct_position,
            character=character,
            coins_earned=reward,
            total_coins=total_coins,
            message="Correct! Well done!" if is_correct else "Wrong choice! Better luck next time.",
        )
