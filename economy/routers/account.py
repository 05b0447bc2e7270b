from uuid import UUID

from fastapi import APIRouter, Depends, status
from fastapi.security import HTTPBasicCredentials

from economy.authentication.basic_authentication import BasicAuthentication
from economy.dependencies import current_account, get_basic_auth, get_collection, security
from economy.models.dc_models import AccountProfileModel, CredentialsModel, LoginResultModel
from economy.services.collection import Collection

account_router = APIRouter(prefix="/account", tags=["account"])


@account_router.post(
    "/register", response_model=AccountProfileModel, status_code=status.HTTP_201_CREATED
)
async def register(
    credentials: CredentialsModel,
    basic_auth: BasicAuthentication = Depends(get_basic_auth),
):
    return await basic_auth.register(credentials.username, credentials.password)


@account_router.post("/login", response_model=LoginResultModel)
async def login(
    credentials: HTTPBasicCredentials = Depends(security),
    basic_auth: BasicAuthentication = Depends(get_basic_auth),
):
    return await basic_auth.login(credentials)


@account_router.get("/me", response_model=AccountProfileModel)
async def me(
    user_id: UUID = Depends(current_account),
    collection: Collection = Depends(get_collection),
):
    return await collection.profile(user_id)
