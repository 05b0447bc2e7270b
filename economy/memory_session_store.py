import logging
import secrets
from asyncio import Lock
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict
from uuid import UUID

from pydantic import BaseModel
from uuid6 import uuid7

from economy.domain.economy_rules import MEMORY_CARD_COUNT
from economy.exceptions import AlreadyConsumed, NotOwner, SessionNotFound
from economy.models.dc_models import CharacterModel

DEFAULT_MAX_AGE = timedelta(minutes=5)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def random_position() -> int:
    return secrets.randbelow(MEMORY_CARD_COUNT)


class MemorySession(BaseModel):
    session_id: UUID
    user_id: UUID
    character: CharacterModel
    correct_position: int
    created_at: datetime
    consumed: bool = False


class MemorySessionStore:
    """Process-local registry of open memory games.

    Constructed once per process and injected into the memory game flow. Nothing
    is persisted: a restart drops every open game.
    """

    def __init__(
        self,
        max_age: timedelta = DEFAULT_MAX_AGE,
        clock: Callable[[], datetime] = utc_now,
        choose_position: Callable[[], int] = random_position,
    ):
        self.sessions: Dict[UUID, MemorySession] = {}
        self.max_age = max_age
        self.clock = clock
        self.choose_position = choose_position
        self.lock = Lock()  # sessionsへのアクセスを保護

    def __len__(self) -> int:
        return len(self.sessions)

    async def create(self, user_id: UUID, character: CharacterModel) -> MemorySession:
        """Open a new game with a hidden correct position

        Args:
            user_id (UUID): Owner of the game
            character (CharacterModel): Character hidden behind one of the cards

        Returns:
            MemorySession: The stored session
        """
        session = MemorySession(
            session_id=uuid7(),
            user_id=user_id,
            character=character,
            correct_position=self.choose_position(),
            created_at=self.clock(),
        )
        async with self.lock:
            self.sessions[session.session_id] = session
        return session

    async def consume(self, session_id: UUID, user_id: UUID) -> MemorySession:
        """Mark the session consumed and return it. Succeeds once per session.

        Args:
            session_id (UUID): ID to identify the game
            user_id (UUID): Caller, must own the game

        Raises:
            SessionNotFound: Unknown or expired session
            NotOwner: The session belongs to another account
            AlreadyConsumed: A guess was already submitted for this session

        Returns:
            MemorySession: Snapshot of the consumed session
        """
        async with self.lock:
            session = self.sessions.get(session_id)
            if session is None:
                raise SessionNotFound()
            if self.clock() - session.created_at > self.max_age:
                del self.sessions[session_id]
                raise SessionNotFound()
            if session.user_id != user_id:
                raise NotOwner()
            if session.consumed:
                raise AlreadyConsumed()
            session.consumed = True
            return session.model_copy()

    async def sweep_expired(self, max_age: timedelta | None = None) -> int:
        """Drop sessions older than max_age, consumed or not

        Returns:
            int: Number of sessions removed
        """
        max_age = max_age or self.max_age
        now = self.clock()
        async with self.lock:
            expired = [
                session_id
                for session_id, session in self.sessions.items()
                if now - session.created_at > max_age
            ]
            for session_id in expired:
                del self.sessions[session_id]
        if expired:
            logging.info(f"Swept {len(expired)} expired memory sessions")
        return len(expired)
