"""Authoritative in-memory spot occupancy table."""

import logging
import threading
from typing import List

from ..clock import Clock
from ..errors import InvariantViolationError, NotFoundError
from ..metrics import update_spot_counts, update_spot_status
from .models import Spot

logger = logging.getLogger(__name__)


class SpotStore:
    """
    Holds the canonical list of spots.

    This is the only place spot occupancy is mutated. Records are immutable
    models that get replaced whole by ``set``.

    ``lock`` is the single mutual-exclusion point for the booking state.
    Callers doing read-modify-write on a spot (the booking service, the
    sweeper, reset) hold it for the whole sequence, including the ledger
    write and event emission, so events leave in commit order.
    """

    def __init__(self, spot_count: int, clock: Clock):
        """
        Initialize the store with every spot available.

        Args:
            spot_count: Number of parking spots, fixed for the process lifetime
            clock: Clock used for lastUpdated timestamps
        """
        self.spot_count = spot_count
        self.lock = threading.RLock()
        self._clock = clock
        self._spots: dict[str, Spot] = {}
        self.reset_all()

        logger.info(f"Initialized SpotStore with {len(self._spots)} spots")

    def list(self) -> list[Spot]:
        """Snapshot of all spots in display order."""
        with self.lock:
            return list(self._spots.values())

    def get(self, spot_id: str) -> Spot:
        """
        Raises:
            NotFoundError: If the spot id is unknown
        """
        with self.lock:
            spot = self._spots.get(spot_id)
        if spot is None:
            raise NotFoundError("Parking spot not found")
        return spot

    def set(self, spot: Spot) -> Spot:
        """
        Atomically replace one spot record.

        Raises:
            NotFoundError: If the spot id is unknown
            InvariantViolationError: If the record breaks the occupancy invariant
        """
        spot.check_invariants()
        with self.lock:
            current = self._spots.get(spot.id)
            if current is None:
                raise NotFoundError("Parking spot not found")
            if current.number != spot.number:
                raise InvariantViolationError(f"Spot {spot.id} cannot change number")
            self._spots[spot.id] = spot
            self._update_gauges()
        return spot

    def reset_all(self) -> List[Spot]:
        """Reinitialize every spot to available, discarding all occupancy."""
        now = self._clock.now_civil()
        with self.lock:
            self._spots = {
                f"spot-{i}": Spot.available(f"spot-{i}", i, now)
                for i in range(1, self.spot_count + 1)
            }
            self._update_gauges()
            return list(self._spots.values())

    def _update_gauges(self) -> None:
        occupied = 0
        for spot in self._spots.values():
            update_spot_status(spot.id, spot.is_occupied)
            occupied += int(spot.is_occupied)
        update_spot_counts(
            total=len(self._spots),
            available=len(self._spots) - occupied,
            occupied=occupied,
        )
