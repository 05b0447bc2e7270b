import argparse
import asyncio
import hashlib
import logging
import secrets
from uuid import UUID

from fastapi import HTTPException, status
from fastapi.security import HTTPBasicCredentials
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker

from economy.crud import CreateData, ReadData
from economy.domain.economy_rules import SIGNUP_BONUS
from economy.exceptions import StorageFailure, UsernameTaken
from economy.models.dc_models import AccountProfileModel, LoginResultModel, TransactionTypeModel
from economy.services.collection import Collection
from economy.services.daily_bonus import DailyBonus
from economy.services.ledger import CoinLedger


class BasicAuthentication:
    """Identity adapter: HTTP Basic credentials mapped to an account id."""

    def __init__(
        self,
        Session: async_sessionmaker,
        daily_bonus: DailyBonus,
        collection: Collection,
        pepper: str = "",
    ):
        self.Session: async_sessionmaker = Session
        self.daily_bonus = daily_bonus
        self.collection = collection
        self.pepper = pepper

    def hash_password(self, password: str, salt: str) -> str:
        return hashlib.sha256((password + salt + self.pepper).encode()).hexdigest()

    async def register(self, username: str, password: str) -> AccountProfileModel:
        """Create an account and grant the signup bonus through the ledger

        Args:
            username (str): Unique login name
            password (str): Plain password, only its hash is stored

        Raises:
            UsernameTaken: The username already exists

        Returns:
            AccountProfileModel: The new account
        """
        salt = secrets.token_hex(8)
        try:
            async with self.Session() as session:
                async with session.begin():
                    user_id = await CreateData.add_account(
                        username, self.hash_password(password, salt), salt, session
                    )
                    if user_id is None:
                        raise UsernameTaken()
                    await CoinLedger.post(
                        session, user_id, SIGNUP_BONUS, TransactionTypeModel.earn, "signup_bonus"
                    )
        except SQLAlchemyError as e:
            logging.error(f"Error creating user data: {e}")
            raise StorageFailure() from e
        logging.info(f"Registered {username} ({user_id})")
        return await self.collection.profile(user_id)

    async def check_user_data(self, credentials: HTTPBasicCredentials) -> UUID:
        """Check the credentials and return the account id

        Raises:
            HTTPException: Unknown username or wrong password

        Returns:
            UUID: Authenticated account id
        """
        try:
            async with self.Session() as session:
                user_data = await ReadData.read_credentials(credentials.username, session)
        except SQLAlchemyError as e:
            logging.error(f"Error reading user data: {e}")
            raise StorageFailure() from e

        if user_data is None:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid username",
                headers={"WWW-Authenticate": "Basic"},
            )

        hashed_password = self.hash_password(credentials.password, user_data.salt)
        if not secrets.compare_digest(hashed_password, user_data.hash_password):
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid password",
                headers={"WWW-Authenticate": "Basic"},
            )
        return user_data.user_id

    async def login(self, credentials: HTTPBasicCredentials) -> LoginResultModel:
        """Authenticate and grant the first-login-of-the-day bonus"""
        user_id = await self.check_user_data(credentials)
        daily_bonus_received = await self.daily_bonus.claim_login(user_id)
        return LoginResultModel(
            message="Login successful",
            user=await self.collection.profile(user_id),
            daily_bonus_received=daily_bonus_received,
        )


def get_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Create an account")
    parser.add_argument("--username", type=str, help="Username", required=True)
    parser.add_argument("--password", type=str, help="Password", required=True)
    return parser


async def main(user_name: str, password: str):
    from economy.db import create_session_factory, create_table, get_engine
    from economy.load_secrets import pepper_data
    from economy.services.daily_gate import DailyGate

    engine = get_engine()
    await create_table(engine)
    Session = create_session_factory(engine)
    collection = Collection(Session)
    basic_auth = BasicAuthentication(
        Session, DailyBonus(Session, DailyGate(Session)), collection, pepper_data
    )
    profile = await basic_auth.register(user_name, password)
    print(profile.user_id, profile.username, profile.coins)


if __name__ == "__main__":
    parser = get_parser()
    args = parser.parse_args()
    asyncio.run(main(args.username, args.password))
