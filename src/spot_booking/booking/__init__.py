"""Booking classification and application."""

from .classifier import BookingKind, BookingPlan, classify_request
from .service import BookingOutcome, BookingService

__all__ = ["BookingKind", "BookingPlan", "classify_request", "BookingOutcome", "BookingService"]
