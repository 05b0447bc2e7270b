import logging
from contextlib import asynccontextmanager
from datetime import timedelta

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncEngine

from economy.authentication.basic_authentication import BasicAuthentication
from economy.catalog import CatalogClient
from economy.db import create_session_factory, create_table, get_engine
from economy.exceptions import EconomyError
from economy.load_secrets import (
    catalog_base_url,
    catalog_max_attempts,
    catalog_size,
    catalog_timeout,
    log_level,
    memory_session_max_age,
    pepper_data,
    sweep_interval_seconds,
)
from economy.memory_session_store import MemorySessionStore
from economy.routers.account import account_router
from economy.routers.game import game_router
from economy.services.collection import Collection
from economy.services.daily_bonus import DailyBonus
from economy.services.daily_gate import DailyGate
from economy.services.ledger import CoinLedger
from economy.services.memory_game import MemoryGameFlow
from economy.services.unlock_flow import UnlockFlow

logging.basicConfig(level=log_level)
logging.getLogger("aiosqlite").setLevel(logging.WARNING)
logging.getLogger("httpx").setLevel(logging.WARNING)


def build_services(
    app: FastAPI,
    engine: AsyncEngine,
    catalog=None,
    memory_store: MemorySessionStore | None = None,
) -> None:
    """Construct the per-process services once and keep them on app.state."""
    if catalog is None:
        catalog = CatalogClient(
            base_url=catalog_base_url,
            catalog_size=catalog_size,
            timeout=catalog_timeout,
            max_attempts=catalog_max_attempts,
        )
    if memory_store is None:
        memory_store = MemorySessionStore(max_age=timedelta(seconds=memory_session_max_age))

    Session = create_session_factory(engine)
    ledger = CoinLedger(Session)
    daily_gate = DailyGate(Session)
    daily_bonus = DailyBonus(Session, daily_gate)
    collection = Collection(Session)

    app.state.engine = engine
    app.state.catalog = catalog
    app.state.memory_store = memory_store
    app.state.ledger = ledger
    app.state.daily_gate = daily_gate
    app.state.daily_bonus = daily_bonus
    app.state.collection = collection
    app.state.unlock_flow = UnlockFlow(Session, ledger, daily_gate, catalog)
    app.state.memory_game = MemoryGameFlow(Session, ledger, memory_store, catalog)
    app.state.basic_auth = BasicAuthentication(Session, daily_bonus, collection, pepper_data)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables and start the memory session sweep.
    This function is called to start the server.
    """
    if getattr(app.state, "engine", None) is None:
        build_services(app, get_engine())
    await create_table(app.state.engine)

    scheduler = AsyncIOScheduler()
    # Expired memory games are only dropped by this job
    scheduler.add_job(
        app.state.memory_store.sweep_expired,
        "interval",
        seconds=sweep_interval_seconds,
    )
    scheduler.start()
    try:
        yield
    finally:
        scheduler.shutdown()
        if isinstance(app.state.catalog, CatalogClient):
            await app.state.catalog.aclose()
        logging.info("Stop Server")


async def economy_error_handler(request: Request, exc: EconomyError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=jsonable_encoder(exc.to_dict()))


def create_app(
    engine: AsyncEngine | None = None,
    catalog=None,
    memory_store: MemorySessionStore | None = None,
) -> FastAPI:
    app = FastAPI(lifespan=lifespan)
    app.add_exception_handler(EconomyError, economy_error_handler)
    app.include_router(account_router)
    app.include_router(game_router)
    if engine is not None:
        build_services(app, engine, catalog, memory_store)
    return app


app = create_app()


# if __name__ == "__main__":
#     uvicorn.run(app, host="0.0.0.0", port=8080, reload=True)
