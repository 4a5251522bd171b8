"""Classification of spot update requests into release, active and future bookings."""

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Optional

from ..clock import CIVIL_DATETIME_FORMAT, Clock, parse_civil_date, parse_civil_datetime
from ..errors import InvalidRequestError

DEFAULT_OCCUPANT = "Anonymous"


class BookingKind(str, Enum):
    """Outcome of classifying a spot update request."""

    RELEASE = "released"
    ACTIVE = "active"
    FUTURE = "future"


@dataclass(frozen=True)
class BookingPlan:
    """A validated request with its booking window resolved."""

    kind: BookingKind
    occupied_by: Optional[str] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    duration_hours: Optional[float] = None
    booking_date: Optional[str] = None


def compute_end_time(start_time: str, duration_hours: float) -> str:
    """Civil end of a booking window starting at ``start_time``."""
    start = datetime.strptime(start_time, CIVIL_DATETIME_FORMAT)
    return (start + timedelta(hours=duration_hours)).strftime(CIVIL_DATETIME_FORMAT)


def classify_request(
    clock: Clock,
    is_occupied: bool,
    occupied_by: Optional[str] = None,
    duration_hours: Optional[float] = None,
    start_time: Optional[str] = None,
    booking_date: Optional[str] = None,
    default_occupant: str = DEFAULT_OCCUPANT,
) -> BookingPlan:
    """
    Decide whether a request releases a spot, books it now, or queues a future booking.

    A release ignores every other field. An occupy request is active when its
    booking date is today or earlier and future otherwise. Without a start
    time an active booking starts now and a future one starts at the
    current time of day on its booking date.

    Args:
        clock: Reference clock for "now" and "today"
        is_occupied: Desired occupancy
        occupied_by: Occupant name, defaults to ``default_occupant``
        duration_hours: Length of the booking, required when occupying
        start_time: Civil start YYYY-MM-DDTHH:MM[:SS]
        booking_date: Civil date YYYY-MM-DD, defaults to the start time's
            date, or today without a start time
        default_occupant: Name used when none is given

    Raises:
        InvalidRequestError: If any field is missing or malformed
    """
    if not isinstance(is_occupied, bool):
        raise InvalidRequestError("isOccupied must be a boolean")
    if not is_occupied:
        return BookingPlan(kind=BookingKind.RELEASE)

    if duration_hours is None:
        raise InvalidRequestError("durationHours is required when occupying a spot")
    if isinstance(duration_hours, bool) or not isinstance(duration_hours, (int, float)):
        raise InvalidRequestError("durationHours must be a number")
    if not duration_hours > 0:
        raise InvalidRequestError("durationHours must be positive")

    occupant = (occupied_by or "").strip() or default_occupant

    today = clock.today()
    if start_time is not None:
        start_time = parse_civil_datetime(start_time)

    if booking_date is not None:
        booking_date = parse_civil_date(booking_date)
        if start_time is not None and start_time[:10] != booking_date:
            raise InvalidRequestError(
                f"startTime {start_time} does not fall on bookingDate {booking_date}"
            )
    elif start_time is not None:
        booking_date = start_time[:10]
    else:
        booking_date = today

    if start_time is None and booking_date <= today:
        start_time = clock.now_civil()
    elif start_time is None:
        start_time = f"{booking_date}T{clock.now():%H:%M:%S}"

    kind = BookingKind.ACTIVE if booking_date <= today else BookingKind.FUTURE
    try:
        end_time = compute_end_time(start_time, duration_hours)
    except OverflowError as e:
        raise InvalidRequestError("durationHours is out of range") from e

    return BookingPlan(
        kind=kind,
        occupied_by=occupant,
        start_time=start_time,
        end_time=end_time,
        duration_hours=float(duration_hours),
        booking_date=booking_date,
    )
