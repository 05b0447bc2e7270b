from fastapi import status


class EconomyError(Exception):
    """Base error of the economy engine.

    Every error carries a machine-readable ``kind``, the HTTP status it maps to
    and a ``context`` dict with whatever the client needs to render the outcome.
    """

    kind = "economy_error"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = "Unexpected error"

    def __init__(self, message: str | None = None, **context):
        self.message = message or self.message
        self.context = context
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"error": self.kind, "message": self.message, **self.context}


class AccountNotFound(EconomyError):
    kind = "account_not_found"
    status_code = status.HTTP_404_NOT_FOUND
    message = "User not found"


class InsufficientFunds(EconomyError):
    kind = "insufficient_funds"
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Not enough coins"

    def __init__(self, required: int, current: int):
        super().__init__(required=required, current=current)
        self.required = required
        self.current = current


class AlreadyClaimedToday(EconomyError):
    kind = "already_claimed_today"
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Already played today"

    def __init__(self, activity_kind: str, next_available: str, time_remaining: dict | None = None):
        super().__init__(
            activity_kind=activity_kind,
            next_available=next_available,
            time_remaining=time_remaining,
        )
        self.activity_kind = activity_kind
        self.next_available = next_available


class SessionNotFound(EconomyError):
    kind = "session_not_found"
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Game not found or expired"


class NotOwner(EconomyError):
    kind = "not_owner"
    status_code = status.HTTP_403_FORBIDDEN
    message = "Not your game"


class AlreadyConsumed(EconomyError):
    kind = "already_consumed"
    status_code = status.HTTP_409_CONFLICT
    message = "Guess already submitted for this game"


class CatalogUnavailable(EconomyError):
    kind = "catalog_unavailable"
    status_code = status.HTTP_502_BAD_GATEWAY
    message = "Character catalog is unavailable"


class StorageFailure(EconomyError):
    kind = "storage_failure"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = "Internal server error"


class UsernameTaken(EconomyError):
    kind = "username_taken"
    status_code = status.HTTP_409_CONFLICT
    message = "Username is already in use"
