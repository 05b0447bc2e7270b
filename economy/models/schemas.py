from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.schema import CheckConstraint, Column, UniqueConstraint
from sqlalchemy.types import Boolean, Date, DateTime, Integer, String, Uuid
from uuid6 import uuid7
from datetime import datetime


class Base(DeclarativeBase):
    pass


class Account(Base):
    __tablename__ = "users"
    __table_args__ = (CheckConstraint("coins >= 0", name="ck_users_coins_non_negative"),)
    user_id = Column(Uuid, primary_key=True, default=uuid7)
    username = Column(String, unique=True, index=True, nullable=False)
    hash_password = Column(String, nullable=False)
    salt = Column(String, nullable=False)
    coins = Column(Integer, nullable=False, default=0)
    total_coins_earned = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=datetime.now)


class CoinTransaction(Base):
    """Append-only coin ledger. Rows are never updated or deleted."""

    __tablename__ = "coin_transactions"
    transaction_id = Column(Uuid, primary_key=True, default=uuid7)
    user_id = Column(Uuid, index=True, nullable=False)
    transaction_type = Column(String, nullable=False)  # "earn" or "spend"
    amount = Column(Integer, nullable=False)
    reason = Column(String, nullable=False)
    created_at = Column(DateTime, default=datetime.now)


class UnlockedCharacter(Base):
    __tablename__ = "unlocked_characters"
    __table_args__ = (
        UniqueConstraint("user_id", "character_id", name="uq_unlocked_characters_user_character"),
    )
    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    user_id = Column(Uuid, index=True, nullable=False)
    character_id = Column(Integer, nullable=False)
    character_name = Column(String)
    character_image = Column(String)
    character_status = Column(String)
    character_species = Column(String)
    character_location = Column(String)
    rarity = Column(String, nullable=False)
    unlocked_at = Column(DateTime, default=datetime.now)


class DailyActivity(Base):
    """One row per (user, activity kind, UTC day). The row's existence is the gate."""

    __tablename__ = "daily_activities"
    __table_args__ = (
        UniqueConstraint(
            "user_id", "activity_kind", "activity_date", name="uq_daily_activities_user_kind_date"
        ),
    )
    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    user_id = Column(Uuid, index=True, nullable=False)
    activity_kind = Column(String, nullable=False)
    activity_date = Column(Date, nullable=False)
    character_id = Column(Integer, nullable=True)
    already_owned = Column(Boolean, nullable=True)
    coins_spent = Column(Integer, nullable=False, default=0)
    coins_earned = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=datetime.now)


class MemoryGameResult(Base):
    __tablename__ = "memory_game_results"
    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    user_id = Column(Uuid, index=True, nullable=False)
    character_id = Column(Integer, nullable=False)
    correct_guess = Column(Boolean, nullable=False)
    coins_earned = Column(Integer, nullable=False, default=0)
    played_at = Column(DateTime, default=datetime.now)
