"""Prices, rewards and calendar rules of the coin economy.

Rule of thumb:
- OK: constants, day arithmetic on datetimes passed in by the caller.
- Not OK: datetime.now(), random, DB sessions.
"""

from datetime import date, datetime, time, timedelta, timezone

SIGNUP_BONUS = 50
DAILY_LOGIN_BONUS = 10
DAILY_BONUS = 5

UNLOCK_COST = 10
UNLOCK_DUPLICATE_BONUS = 5

GAME_COST = 5
MEMORY_WIN_REWARD = 15
MEMORY_DUPLICATE_REWARD = 8
MEMORY_CARD_COUNT = 3
MEMORY_TIME_TO_MEMORIZE_MS = 3000


def utc_day(now: datetime) -> date:
    """Calendar day (UTC) the given instant falls on. Naive datetimes are taken as UTC."""
    if now.tzinfo is None:
        return now.date()
    return now.astimezone(timezone.utc).date()


def next_utc_midnight(now: datetime) -> datetime:
    """Start of the next UTC calendar day after ``now``."""
    return datetime.combine(utc_day(now) + timedelta(days=1), time.min, tzinfo=timezone.utc)


def time_remaining(now: datetime, target: datetime) -> dict | None:
    """Hours, minutes and total milliseconds from ``now`` until ``target``.

    Returns None when the target is already due.
    """
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    diff_ms = int((target - now).total_seconds() * 1000)
    if diff_ms <= 0:
        return None
    return {
        "hours": diff_ms // (1000 * 60 * 60),
        "minutes": (diff_ms % (1000 * 60 * 60)) // (1000 * 60),
        "total": diff_ms,
    }


def card_layout(correct_position: int) -> list[dict]:
    """Card list for the memorisation phase; only the character's card is flagged."""
    return [
        {"id": position, "has_character": position == correct_position}
        for position in range(MEMORY_CARD_COUNT)
    ]
