"""Booking error types."""


class BookingError(Exception):
    """Base class for errors caused by caller input."""


class NotFoundError(BookingError):
    """Raised when a spot or upcoming booking id is unknown."""


class InvalidRequestError(BookingError):
    """Raised when a booking request carries malformed fields."""


class InvariantViolationError(AssertionError):
    """A spot record broke its occupancy invariant. Always a programming error."""
