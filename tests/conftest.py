from datetime import datetime, timezone
from uuid import UUID

import pytest
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import NullPool
from uuid6 import uuid7

from economy.crud import ReadData
from economy.db import create_session_factory, create_table
from economy.models.dc_models import CharacterModel, LocationModel
from economy.models.schemas import Account
from economy.services.daily_gate import DailyGate
from economy.services.ledger import CoinLedger


def make_character(
    character_id: int = 1,
    name: str = "Abradolf Lincler",
    status: str = "unknown",
    species: str = "Human",
    location: str = "Testicle Monster Dimension",
) -> CharacterModel:
    return CharacterModel(
        id=character_id,
        name=name,
        status=status,
        species=species,
        image=f"https://rickandmortyapi.com/api/character/avatar/{character_id}.jpeg",
        location=LocationModel(name=location),
    )


class FakeCatalog:
    """Catalog stand-in returning the given characters in order, cycling."""

    def __init__(self, *characters: CharacterModel):
        self.characters = list(characters) or [make_character()]
        self.calls = 0

    async def random_character(self) -> CharacterModel:
        character = self.characters[self.calls % len(self.characters)]
        self.calls += 1
        return character


class FixedClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
async def engine(tmp_path):
    # NullPool: every session gets its own connection so concurrent writers contend
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'economy.sqlite3'}", poolclass=NullPool
    )
    await create_table(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def Session(engine):
    return create_session_factory(engine)


@pytest.fixture
def clock():
    return FixedClock(datetime(2024, 5, 17, 15, 30, tzinfo=timezone.utc))


@pytest.fixture
def ledger(Session):
    return CoinLedger(Session)


@pytest.fixture
def gate(Session, clock):
    return DailyGate(Session, clock=clock)


@pytest.fixture
def make_account(Session):
    """Insert an account with an initial grant that has no transaction record."""

    async def _make_account(coins: int = 0, username: str | None = None) -> UUID:
        user_id = uuid7()
        async with Session() as session:
            async with session.begin():
                session.add(
                    Account(
                        user_id=user_id,
                        username=username or f"user-{user_id.hex[:12]}",
                        hash_password="x",
                        salt="y",
                        coins=coins,
                        total_coins_earned=coins,
                    )
                )
        return user_id

    return _make_account


@pytest.fixture
def read_balance(Session):
    async def _read_balance(user_id: UUID) -> int | None:
        async with Session() as session:
            return await ReadData.read_balance(user_id, session)

    return _read_balance


@pytest.fixture
def read_transactions(Session):
    async def _read_transactions(user_id: UUID):
        async with Session() as session:
            return await ReadData.read_transactions(user_id, session)

    return _read_transactions
