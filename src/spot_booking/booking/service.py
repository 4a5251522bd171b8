"""Booking operations against the spot store and ledgers."""

import logging
import uuid
from dataclasses import dataclass
from typing import Optional

from ..clock import Clock
from ..metrics import increment_cancellations, increment_resets, record_booking
from ..notifier import ChangeNotifier
from ..state.ledger import BookingLedger
from ..state.models import LedgerEntry, Spot
from ..state.spot_store import SpotStore
from .classifier import DEFAULT_OCCUPANT, BookingKind, BookingPlan, classify_request

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BookingOutcome:
    """Result of a spot update request."""

    kind: BookingKind
    spot: Optional[Spot] = None  # set for release and active bookings
    booking: Optional[LedgerEntry] = None  # set for active and future bookings


class BookingService:
    """
    Applies spot update requests.

    Releases and active bookings replace the spot record and emit
    ``spotUpdated``; active bookings also append to history. Future bookings
    only append to the upcoming ledger and leave the spot untouched.

    Future bookings are not promoted into an occupancy when their date
    arrives. They stay in the upcoming ledger until cancelled or evicted.
    """

    def __init__(
        self,
        store: SpotStore,
        history: BookingLedger,
        upcoming: BookingLedger,
        notifier: ChangeNotifier,
        clock: Clock,
        default_occupant: str = DEFAULT_OCCUPANT,
    ):
        self.store = store
        self.history = history
        self.upcoming = upcoming
        self.notifier = notifier
        self.clock = clock
        self.default_occupant = default_occupant

    def list_spots(self) -> list[Spot]:
        return self.store.list()

    def get_spot(self, spot_id: str) -> Spot:
        return self.store.get(spot_id)

    def list_history(self) -> list[LedgerEntry]:
        with self.store.lock:
            return self.history.list()

    def list_upcoming(self) -> list[LedgerEntry]:
        with self.store.lock:
            return self.upcoming.list()

    def update_spot(
        self,
        spot_id: str,
        is_occupied: bool,
        occupied_by: Optional[str] = None,
        duration_hours: Optional[float] = None,
        start_time: Optional[str] = None,
        booking_date: Optional[str] = None,
    ) -> BookingOutcome:
        """
        Release a spot, occupy it now, or queue a future booking.

        Raises:
            NotFoundError: If the spot id is unknown
            InvalidRequestError: If the request fields are malformed
        """
        with self.store.lock:
            current = self.store.get(spot_id)
            plan = classify_request(
                self.clock,
                is_occupied,
                occupied_by=occupied_by,
                duration_hours=duration_hours,
                start_time=start_time,
                booking_date=booking_date,
                default_occupant=self.default_occupant,
            )

            if plan.kind is BookingKind.RELEASE:
                spot = self.store.set(current.released(self.clock.now_civil()))
                self.notifier.spot_updated(spot)
                outcome = BookingOutcome(kind=plan.kind, spot=spot)
                logger.info(f"Spot {spot_id} released")

            elif plan.kind is BookingKind.ACTIVE:
                spot = self.store.set(
                    Spot(
                        id=current.id,
                        number=current.number,
                        is_occupied=True,
                        occupied_by=plan.occupied_by,
                        last_updated=self.clock.now_civil(),
                        end_time=plan.end_time,
                        duration_hours=plan.duration_hours,
                        start_time=plan.start_time,
                        booking_date=plan.booking_date,
                    )
                )
                entry = self._new_entry(current, plan)
                self.history.append(entry)
                self.notifier.spot_updated(spot)
                outcome = BookingOutcome(kind=plan.kind, spot=spot, booking=entry)
                logger.info(
                    f"Spot {spot_id} booked by {plan.occupied_by} until {plan.end_time}"
                )

            else:
                entry = self._new_entry(current, plan)
                self.upcoming.append(entry)
                outcome = BookingOutcome(kind=plan.kind, booking=entry)
                logger.info(
                    f"Future booking {entry.id} for spot {spot_id} on {plan.booking_date} "
                    f"by {plan.occupied_by}"
                )

        record_booking(plan.kind.value)
        return outcome

    def cancel_upcoming(self, booking_id: str) -> LedgerEntry:
        """
        Remove one upcoming booking.

        Raises:
            NotFoundError: If no upcoming booking has this id
        """
        with self.store.lock:
            entry = self.upcoming.remove(booking_id)
        increment_cancellations()
        logger.info(f"Upcoming booking {booking_id} cancelled")
        return entry

    def reset_all(self) -> list[Spot]:
        """Make every spot available and wipe the booking history."""
        with self.store.lock:
            spots = self.store.reset_all()
            self.history.clear()
            self.notifier.spots_reset(spots)
        increment_resets()
        logger.info("All parking spots have been reset")
        return spots

    def _new_entry(self, spot: Spot, plan: BookingPlan) -> LedgerEntry:
        return LedgerEntry(
            id=str(uuid.uuid4()),
            spot_id=spot.id,
            spot_number=spot.number,
            occupied_by=plan.occupied_by,
            start_time=plan.start_time,
            end_time=plan.end_time,
            duration_hours=plan.duration_hours,
            booking_date=plan.booking_date,
            created_at=self.clock.now_civil(),
        )
