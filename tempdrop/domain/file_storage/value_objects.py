"""
File Storage Value Objects

Immutable value objects for type safety and validation.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import List, Tuple

from ..errors import InvalidExpirationError, ValidationError


class ExpirationOption(Enum):
    """
    Allowed retention periods, in minutes.

    The requested duration decides how long a blob occupies storage, so
    only these values are accepted from clients.
    """

    TEN_MINUTES = 10
    ONE_HOUR = 60
    ONE_DAY = 1440
    SEVEN_DAYS = 10080

    @property
    def label(self) -> str:
        return _OPTION_LABELS[self]

    @classmethod
    def from_minutes(cls, minutes: int) -> "ExpirationOption":
        """
        Look up the option for a requested number of minutes.

        Raises:
            InvalidExpirationError: If minutes is not an allowed value
        """
        # bool is an int subclass; True must not pass as 1 minute
        if isinstance(minutes, bool) or not isinstance(minutes, int):
            raise InvalidExpirationError(
                f"Expiration must be an integer number of minutes, got {minutes!r}"
            )
        try:
            return cls(minutes)
        except ValueError:
            allowed = ", ".join(str(option.value) for option in cls)
            raise InvalidExpirationError(
                f"Unsupported expiration of {minutes} minutes (allowed: {allowed})"
            ) from None

    @classmethod
    def longest(cls) -> "ExpirationOption":
        return max(cls, key=lambda option: option.value)

    @classmethod
    def covering(
        cls, requested: timedelta, tolerance: timedelta = timedelta(0)
    ) -> "ExpirationOption":
        """
        Snap a requested retention to the allow-list.

        Args:
            requested: Duration the client asked for
            tolerance: Slack for client clock skew; a request up to this much
                longer than an option still maps to that option

        Returns:
            The shortest option covering the request, or the longest option
            when none does
        """
        for option in sorted(cls, key=lambda o: o.value):
            if requested <= timedelta(minutes=option.value) + tolerance:
                return option
        return cls.longest()

    @classmethod
    def default(cls) -> "ExpirationOption":
        return cls.TEN_MINUTES

    @classmethod
    def choices(cls) -> List[Tuple[str, int]]:
        """Return (label, minutes) pairs in ascending order."""
        return [(option.label, option.value) for option in cls]


_OPTION_LABELS = {
    ExpirationOption.TEN_MINUTES: "10 minutes",
    ExpirationOption.ONE_HOUR: "1 hour",
    ExpirationOption.ONE_DAY: "24 hours",
    ExpirationOption.SEVEN_DAYS: "7 days",
}


@dataclass(frozen=True)
class NewFileRecord:
    """
    Fields supplied by the uploader when registering a file.

    The repository assigns id, upload_time and download_count.
    """

    filename: str
    original_filename: str
    mime_type: str
    size: int
    object_path: str
    expiration_time: datetime

    def __post_init__(self):
        for name in ("filename", "original_filename", "mime_type", "object_path"):
            value = getattr(self, name)
            if not isinstance(value, str) or not value.strip():
                raise ValidationError(f"'{name}' must be a non-empty string")

        if isinstance(self.size, bool) or not isinstance(self.size, int):
            raise ValidationError("'size' must be an integer")
        if self.size < 0:
            raise ValidationError("'size' must not be negative")

        if not isinstance(self.expiration_time, datetime):
            raise ValidationError("'expiration_time' must be a datetime")
        if self.expiration_time.tzinfo is None:
            raise ValidationError("'expiration_time' must be timezone-aware")
