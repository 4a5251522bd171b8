"""State management module."""

from .models import LedgerEntry, Spot
from .ledger import BookingLedger
from .spot_store import SpotStore

__all__ = ["LedgerEntry", "Spot", "BookingLedger", "SpotStore"]
