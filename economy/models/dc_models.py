from pydantic import BaseModel, Field
from enum import Enum
from uuid import UUID
from typing import Optional, List
from datetime import datetime

from economy.models.schema_models import UnlockedCharacterSchema


class RarityModel(str, Enum):
    common = "common"
    rare = "rare"
    epic = "epic"
    legendary = "legendary"


class TransactionTypeModel(str, Enum):
    earn = "earn"
    spend = "spend"


class ActivityKindModel(str, Enum):
    random_character = "random_character"
    daily_bonus = "daily_bonus"
    daily_login = "daily_login"


class InsertOutcome(str, Enum):
    """Result of an insert-if-absent against a unique key."""
    inserted = "inserted"
    already_exists = "already_exists"


class DeltaOutcome(str, Enum):
    applied = "applied"
    insufficient_funds = "insufficient_funds"
    account_not_found = "account_not_found"


class BalanceDelta(BaseModel):
    """Result of a conditional balance update.

    ``balance`` is the new balance when applied, the untouched current balance
    on insufficient funds and None when the account does not exist.
    """
    outcome: DeltaOutcome
    balance: Optional[int] = None


class LocationModel(BaseModel):
    name: str = "unknown"


class CharacterModel(BaseModel):
    """Character record as returned by the catalog."""
    id: int
    name: str
    status: str
    species: str
    image: str
    location: LocationModel = LocationModel()


class RarityCharacterModel(CharacterModel):
    rarity: RarityModel


class CharacterDisplayModel(BaseModel):
    name: str
    image: str
    species: str


class CardModel(BaseModel):
    id: int
    has_character: bool


class TimeRemainingModel(BaseModel):
    hours: int
    minutes: int
    total: int  # milliseconds


class CredentialsModel(BaseModel):
    username: str
    password: str


class AccountProfileModel(BaseModel):
    user_id: UUID
    username: str
    coins: int
    total_coins_earned: int
    member_since: Optional[datetime] = None


class LoginResultModel(BaseModel):
    message: str
    user: AccountProfileModel
    daily_bonus_received: bool


class UnlockResultModel(BaseModel):
    success: bool = True
    message: str
    character: RarityCharacterModel
    already_unlocked: bool
    coins_spent: int = 0
    bonus_coins: int = 0
    remaining_coins: int


class AvailabilityModel(BaseModel):
    can_play: bool
    message: str
    next_available: Optional[datetime] = None
    time_remaining: Optional[TimeRemainingModel] = None


class MemoryGameStartModel(BaseModel):
    success: bool = True
    game_id: UUID
    character: CharacterDisplayModel
    cards: List[CardModel]
    message: str
    time_to_memorize: int  # milliseconds
    coins_spent: int


class MemoryGuessModel(BaseModel):
    game_id: UUID
    selected_position: int = Field(ge=0, le=2)


class MemoryGuessResultModel(BaseModel):
    success: bool = True
    correct: bool
    correct_position: int
    character: CharacterModel
    coins_earned: int
    total_coins: int
    message: str


class DailyBonusResultModel(BaseModel):
    message: str
    coins_received: int
    total_coins: int


class CollectionModel(BaseModel):
    characters: List[UnlockedCharacterSchema]
    total_unlocked: int


class RarityCountModel(BaseModel):
    total: int = 0
    common: int = 0
    rare: int = 0
    epic: int = 0
    legendary: int = 0


class StatsModel(BaseModel):
    user: AccountProfileModel
    characters: RarityCountModel
    login_days: int
