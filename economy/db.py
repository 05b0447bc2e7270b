import logging

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from economy.load_secrets import db_backend
from economy.models.schemas import Base


def get_engine() -> AsyncEngine:
    """Engine of the configured backend. Imported lazily so only that driver is needed."""
    if db_backend == "sqlite":
        from economy.create_sqlite_engine import engine
    else:
        from economy.create_postgres_engine import engine
    return engine


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker:
    # Centralized session factory; services receive it instead of building their own.
    return async_sessionmaker(
        autocommit=False,
        class_=AsyncSession,
        autoflush=True,
        expire_on_commit=False,
        bind=engine,
    )


async def create_table(engine: AsyncEngine) -> None:
    """Create tables if not exists"""
    async with engine.begin() as conn:
        # 既存テーブルがある場合はスキップされる
        await conn.run_sync(Base.metadata.create_all)
    logging.info("Database tables are ready")
