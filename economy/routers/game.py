from uuid import UUID

from fastapi import APIRouter, Depends

from economy.dependencies import (
    current_account,
    get_collection,
    get_daily_bonus,
    get_daily_gate,
    get_memory_game,
    get_unlock_flow,
)
from economy.models.dc_models import (
    ActivityKindModel,
    AvailabilityModel,
    CollectionModel,
    DailyBonusResultModel,
    MemoryGameStartModel,
    MemoryGuessModel,
    MemoryGuessResultModel,
    StatsModel,
    UnlockResultModel,
)
from economy.services.collection import Collection
from economy.services.daily_bonus import DailyBonus
from economy.services.daily_gate import DailyGate
from economy.services.memory_game import MemoryGameFlow
from economy.services.unlock_flow import UnlockFlow

game_router = APIRouter(prefix="/game", tags=["game"])


class RandomCharacterAPI:
    @staticmethod
    @game_router.post("/random-character", response_model=UnlockResultModel)
    @game_router.post("/unlock-character", response_model=UnlockResultModel)
    async def play_random_character(
        user_id: UUID = Depends(current_account),
        unlock_flow: UnlockFlow = Depends(get_unlock_flow),
    ):
        return await unlock_flow.play(user_id)

    @staticmethod
    @game_router.get("/can-play-random", response_model=AvailabilityModel)
    async def can_play_random(
        user_id: UUID = Depends(current_account),
        daily_gate: DailyGate = Depends(get_daily_gate),
    ):
        availability = await daily_gate.availability(
            user_id, ActivityKindModel.random_character.value
        )
        if availability["can_play"]:
            message = "You can play the random character game!"
        else:
            message = "You can only play once per day"
        return AvailabilityModel(message=message, **availability)


class MemoryGameAPI:
    @staticmethod
    @game_router.post("/memory-game/start", response_model=MemoryGameStartModel)
    async def start(
        user_id: UUID = Depends(current_account),
        memory_game: MemoryGameFlow = Depends(get_memory_game),
    ):
        return await memory_game.play_start(user_id)

    @staticmethod
    @game_router.post("/memory-game/guess", response_model=MemoryGuessResultModel)
    async def guess(
        guess: MemoryGuessModel,
        user_id: UUID = Depends(current_account),
        memory_game: MemoryGameFlow = Depends(get_memory_game),
    ):
        return await memory_game.submit_guess(guess.game_id, user_id, guess.selected_position)


class CollectionAPI:
    @staticmethod
    @game_router.get("/characters", response_model=CollectionModel)
    async def characters(
        user_id: UUID = Depends(current_account),
        collection: Collection = Depends(get_collection),
    ):
        return await collection.characters(user_id)

    @staticmethod
    @game_router.post("/daily-bonus", response_model=DailyBonusResultModel)
    async def daily_bonus(
        user_id: UUID = Depends(current_account),
        daily_bonus: DailyBonus = Depends(get_daily_bonus),
    ):
        return await daily_bonus.claim(user_id)

    @staticmethod
    @game_router.get("/stats", response_model=StatsModel)
    async def stats(
        user_id: UUID = Depends(current_account),
        collection: Collection = Depends(get_collection),
    ):
        return await collection.stats(user_id)
