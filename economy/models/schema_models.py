from pydantic import BaseModel
from typing import Optional
from uuid import UUID
from datetime import date, datetime


class AccountSchema(BaseModel):
    user_id: UUID
    username: str
    coins: int
    total_coins_earned: int
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class CredentialSchema(BaseModel):
    """Credential view of an account row, only used by the identity adapter."""
    user_id: UUID
    username: str
    hash_password: str
    salt: str

    class Config:
        from_attributes = True


class CoinTransactionSchema(BaseModel):
    transaction_id: UUID
    user_id: UUID
    transaction_type: str
    amount: int
    reason: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class UnlockedCharacterSchema(BaseModel):
    user_id: UUID
    character_id: int
    character_name: Optional[str] = None
    character_image: Optional[str] = None
    character_status: Optional[str] = None
    character_species: Optional[str] = None
    character_location: Optional[str] = None
    rarity: str
    unlocked_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class DailyActivitySchema(BaseModel):
    user_id: UUID
    activity_kind: str
    activity_date: date
    character_id: Optional[int] = None
    already_owned: Optional[bool] = None
    coins_spent: int = 0
    coins_earned: int = 0
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class MemoryGameResultSchema(BaseModel):
    user_id: UUID
    character_id: int
    correct_guess: bool
    coins_earned: int
    played_at: Optional[datetime] = None

    class Config:
        from_attributes = True
