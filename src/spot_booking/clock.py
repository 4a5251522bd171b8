"""Civil time handling in a single reference timezone."""

import re
from datetime import date, datetime
from typing import Callable, Optional
from zoneinfo import ZoneInfo

from .errors import InvalidRequestError

CIVIL_DATETIME_FORMAT = "%Y-%m-%dT%H:%M:%S"
CIVIL_DATE_FORMAT = "%Y-%m-%d"

# Booking dates are compared as strings. This only orders correctly because
# the format is fixed-width and zero-padded.
_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_DATETIME_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}(:\d{2})?$")


class Clock:
    """
    Source of "now" rendered in one fixed civil timezone.

    Every timestamp that leaves the service is a timezone-naive civil
    string (YYYY-MM-DDTHH:MM:SS) in the reference zone, and every date is
    YYYY-MM-DD.
    """

    def __init__(
        self,
        timezone: str = "Europe/Stockholm",
        now_func: Optional[Callable[[], datetime]] = None,
    ):
        """
        Args:
            timezone: IANA name of the reference timezone
            now_func: Returns the current instant; overridable for tests.
                Naive results are taken to be UTC.
        """
        self.tz = ZoneInfo(timezone)
        self._now_func = now_func

    def now(self) -> datetime:
        """Current instant as an aware datetime in the reference zone."""
        if self._now_func is None:
            return datetime.now(self.tz)
        current = self._now_func()
        if current.tzinfo is None:
            current = current.replace(tzinfo=ZoneInfo("UTC"))
        return current.astimezone(self.tz)

    def today(self) -> str:
        """Current civil date as YYYY-MM-DD."""
        return self.now().strftime(CIVIL_DATE_FORMAT)

    def now_civil(self) -> str:
        return self.to_civil(self.now())

    def to_civil(self, instant: datetime) -> str:
        """Render an instant as a civil datetime string."""
        if instant.tzinfo is not None:
            instant = instant.astimezone(self.tz)
        return instant.strftime(CIVIL_DATETIME_FORMAT)

    def from_civil(self, value: str) -> datetime:
        """Interpret a civil datetime string as an instant in the reference zone."""
        return datetime.strptime(value, CIVIL_DATETIME_FORMAT).replace(tzinfo=self.tz)


def parse_civil_date(value: str) -> str:
    """
    Validate a YYYY-MM-DD civil date.

    Raises:
        InvalidRequestError: If the value is not a zero-padded real date
    """
    if not isinstance(value, str) or not _DATE_PATTERN.match(value):
        raise InvalidRequestError(f"bookingDate must be YYYY-MM-DD, got {value!r}")
    try:
        date.fromisoformat(value)
    except ValueError as e:
        raise InvalidRequestError(f"bookingDate is not a valid date: {value!r}") from e
    return value


def parse_civil_datetime(value: str) -> str:
    """
    Validate a civil datetime and normalize it to include seconds.

    Accepts YYYY-MM-DDTHH:MM and YYYY-MM-DDTHH:MM:SS.

    Raises:
        InvalidRequestError: If the value is malformed
    """
    if not isinstance(value, str) or not _DATETIME_PATTERN.match(value):
        raise InvalidRequestError(
            f"startTime must be YYYY-MM-DDTHH:MM[:SS], got {value!r}"
        )
    if len(value) == 16:
        value = f"{value}:00"
    try:
        datetime.strptime(value, CIVIL_DATETIME_FORMAT)
    except ValueError as e:
        raise InvalidRequestError(f"startTime is not a valid time: {value!r}") from e
    return value
