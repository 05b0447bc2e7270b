"""FastAPI dependencies resolving the per-process services stored on ``app.state``."""

from uuid import UUID

from fastapi import Depends, Request
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from economy.authentication.basic_authentication import BasicAuthentication
from economy.services.collection import Collection
from economy.services.daily_bonus import DailyBonus
from economy.services.daily_gate import DailyGate
from economy.services.memory_game import MemoryGameFlow
from economy.services.unlock_flow import UnlockFlow

security = HTTPBasic()


def get_basic_auth(request: Request) -> BasicAuthentication:
    return request.app.state.basic_auth


def get_daily_gate(request: Request) -> DailyGate:
    return request.app.state.daily_gate


def get_daily_bonus(request: Request) -> DailyBonus:
    return request.app.state.daily_bonus


def get_unlock_flow(request: Request) -> UnlockFlow:
    return request.app.state.unlock_flow


def get_memory_game(request: Request) -> MemoryGameFlow:
    return request.app.state.memory_game


def get_collection(request: Request) -> Collection:
    return request.app.state.collection


async def current_account(
    credentials: HTTPBasicCredentials = Depends(security),
    basic_auth: BasicAuthentication = Depends(get_basic_auth),
) -> UUID:
    return await basic_auth.check_user_data(credentials)
