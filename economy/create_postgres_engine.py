from sqlalchemy.ext.asyncio import create_async_engine
from economy.load_secrets import user, password, host, port, db_name, db_pool_size, db_max_overflow

POSTGRES_DATABASE_URL = (
    f"postgresql+asyncpg://{user}:{password}@{host}:{port}/{db_name}"
)

engine = create_async_engine(
    POSTGRES_DATABASE_URL,
    pool_size=db_pool_size,
    max_overflow=db_max_overflow,
    pool_pre_ping=True,
)
