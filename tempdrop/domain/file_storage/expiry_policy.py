"""
Expiry Policy

Pure functions deciding whether a file is expired, how long it has left,
and when a newly registered file should expire. No I/O.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

from ..errors import InvalidExpirationError
from .value_objects import ExpirationOption

MINUTES_PER_HOUR = 60
MINUTES_PER_DAY = 1440

# A client clock running ahead by up to this much still gets the option it picked
CLOCK_SKEW_TOLERANCE = timedelta(minutes=1)


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def is_expired(expiration_time: datetime, now: datetime) -> bool:
    """A file is expired from the instant its expiration time is reached."""
    return now >= expiration_time


def remaining(expiration_time: datetime, now: datetime) -> timedelta:
    """Time left until expiration; zero or negative means expired."""
    return expiration_time - now


def format_remaining(expiration_time: datetime, now: datetime) -> str:
    """
    Format the remaining time in coarse units.

    Minutes below one hour, hours below one day, days otherwise. Each
    tier floors, so 119 minutes reads as "1 hours".

    Args:
        expiration_time: When the file expires
        now: Reference time

    Returns:
        "Expired", or e.g. "9 minutes", "23 hours", "6 days"
    """
    left = remaining(expiration_time, now)
    if left <= timedelta(0):
        return "Expired"

    minutes = int(left.total_seconds()) // 60
    if minutes < MINUTES_PER_HOUR:
        return f"{minutes} minutes"
    if minutes < MINUTES_PER_DAY:
        return f"{minutes // MINUTES_PER_HOUR} hours"
    return f"{minutes // MINUTES_PER_DAY} days"


def compute_expiration(now: datetime, requested_minutes: int) -> datetime:
    """
    Compute the absolute expiration for a requested retention period.

    Args:
        now: Creation time
        requested_minutes: One of the ExpirationOption values

    Returns:
        now + requested_minutes

    Raises:
        InvalidExpirationError: If requested_minutes is not allowed
    """
    option = ExpirationOption.from_minutes(requested_minutes)
    return now + timedelta(minutes=option.value)


def resolve_expiration(
    now: datetime,
    expires_in_minutes: Optional[int] = None,
    expiration_time: Optional[datetime] = None,
) -> datetime:
    """
    Turn client input into an absolute expiration time.

    A relative duration wins when both are supplied. An absolute time must
    lie in the future; the duration it implies is snapped up to the shortest
    allowed retention covering it (the longest option past that), so every
    stored expiration is now plus an ExpirationOption.

    Raises:
        InvalidExpirationError: If neither value is usable
    """
    if expires_in_minutes is not None:
        return compute_expiration(now, expires_in_minutes)

    if expiration_time is None:
        raise InvalidExpirationError(
            "Either 'expiresInMinutes' or 'expirationTime' is required"
        )

    if expiration_time.tzinfo is None:
        # Naive timestamps from clients are taken as UTC
        expiration_time = expiration_time.replace(tzinfo=timezone.utc)
    expiration_time = expiration_time.astimezone(timezone.utc)

    if is_expired(expiration_time, now):
        raise InvalidExpirationError("'expirationTime' must be in the future")

    option = ExpirationOption.covering(
        remaining(expiration_time, now), tolerance=CLOCK_SKEW_TOLERANCE
    )
    return compute_expiration(now, option.value)
