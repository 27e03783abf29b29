"""
Clock - Single source of "now" for expiry arithmetic.

Tests pin the clock with set_for_test()/freeze_for_test() and must call
reset_for_test() afterwards.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

_fake_now: Optional[datetime] = None


def now() -> datetime:
    """Current time as an aware UTC datetime."""
    if _fake_now is not None:
        return _fake_now
    return datetime.now(timezone.utc)


def calculate_expires_at(expires_in: int) -> datetime:
    """Absolute expiry for a relative lifetime in seconds."""
    return now() + timedelta(seconds=expires_in)


def set_for_test(value: datetime) -> None:
    global _fake_now
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    _fake_now = value


def freeze_for_test() -> None:
    set_for_test(now())


def reset_for_test() -> None:
    global _fake_now
    _fake_now = None
