"""Periodic release of spots whose booking window has elapsed."""

import asyncio
import logging
from typing import Optional

from .clock import Clock
from .errors import InvariantViolationError
from .metrics import increment_sweep_cycles, record_expiration
from .notifier import ChangeNotifier
from .state.models import Spot
from .state.spot_store import SpotStore

logger = logging.getLogger(__name__)


class ExpirationSweeper:
    """
    Releases occupied spots once their end time has passed.

    ``sweep`` does one pass and can be called directly. ``start`` runs it on
    a fixed interval as an asyncio task that ``stop`` cancels.
    """

    def __init__(
        self,
        store: SpotStore,
        notifier: ChangeNotifier,
        clock: Clock,
        interval_seconds: float = 60,
    ):
        self.store = store
        self.notifier = notifier
        self.clock = clock
        self.interval_seconds = interval_seconds
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def sweep(self) -> list[Spot]:
        """
        Release every occupied spot with an end time at or before now.

        Returns:
            The released spots, one spotUpdated event emitted per spot
        """
        released = []
        with self.store.lock:
            now = self.clock.now()
            for spot in self.store.list():
                if not spot.is_occupied or spot.end_time is None:
                    continue
                if self.clock.from_civil(spot.end_time) > now:
                    continue

                updated = self.store.set(spot.released(self.clock.to_civil(now)))
                self.notifier.spot_updated(updated)
                released.append(updated)
                record_expiration(spot.id)
                logger.info(f"Spot {spot.id} expired (booked by {spot.occupied_by} until {spot.end_time})")

        increment_sweep_cycles()
        return released

    async def run(self) -> None:
        """Sweep forever on the configured interval."""
        logger.info(f"Starting expiration sweeper (interval: {self.interval_seconds}s)")

        while True:
            try:
                self.sweep()
            except InvariantViolationError as e:
                logger.critical(f"Expiration sweeper stopping on corrupted spot state: {e}")
                raise
            except Exception as e:
                logger.error(f"Expiration sweep error: {e}")

            await asyncio.sleep(self.interval_seconds)

    def start(self) -> asyncio.Task:
        """Schedule the sweep loop on the running event loop."""
        if self.running:
            return self._task
        self._task = asyncio.create_task(self.run())
        return self._task

    async def stop(self) -> None:
        """Cancel the sweep loop and wait for it to finish."""
        if self._task is None:
            return

        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Expiration sweeper stopped")
