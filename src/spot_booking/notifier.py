"""Fan-out of spot state changes to subscribed observers."""

import itertools
import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, Optional

from .metrics import update_subscriber_count
from .state.models import Spot

logger = logging.getLogger(__name__)

INITIAL_DATA = "initialData"
SPOT_UPDATED = "spotUpdated"
SPOTS_RESET = "spotsReset"


@dataclass(frozen=True)
class ChangeEvent:
    """One push-channel event."""

    event: str
    data: Any

    def to_message(self) -> dict:
        """JSON-ready form: {"event": name, "data": payload}."""
        if isinstance(self.data, list):
            payload = [item.model_dump(by_alias=True, mode="json") for item in self.data]
        else:
            payload = self.data.model_dump(by_alias=True, mode="json")
        return {"event": self.event, "data": payload}


Observer = Callable[[ChangeEvent], None]


class ChangeNotifier:
    """
    Broadcasts spot changes to every registered observer.

    Observers are plain callables invoked synchronously in commit order, so
    they must not block (hand the event off to a queue instead). Delivery
    is best-effort: an observer that raises is logged and dropped, and
    nothing is replayed to it later.

    A new subscriber first receives an ``initialData`` snapshot, taken under
    the same lock the mutators hold, so it cannot miss or double-apply an
    event that commits while it is connecting.
    """

    def __init__(
        self,
        snapshot_func: Callable[[], list[Spot]],
        lock: Optional[threading.RLock] = None,
    ):
        """
        Args:
            snapshot_func: Returns the full current spot list
            lock: Lock shared with the spot store mutators
        """
        self._snapshot_func = snapshot_func
        self._lock = lock or threading.RLock()
        self._observers: dict[int, Observer] = {}
        self._ids = itertools.count(1)

    @property
    def subscriber_count(self) -> int:
        return len(self._observers)

    def subscribe(self, observer: Observer) -> int:
        """
        Register an observer and send it the current snapshot.

        Returns:
            Subscription id for ``unsubscribe``
        """
        with self._lock:
            subscription_id = next(self._ids)
            self._observers[subscription_id] = observer
            update_subscriber_count(len(self._observers))
            self._deliver(subscription_id, observer, ChangeEvent(INITIAL_DATA, self._snapshot_func()))
        logger.info(f"Subscriber {subscription_id} connected")
        return subscription_id

    def unsubscribe(self, subscription_id: int) -> None:
        """Stop delivering events to a subscriber. Unknown ids are ignored."""
        with self._lock:
            removed = self._observers.pop(subscription_id, None)
            update_subscriber_count(len(self._observers))
        if removed is not None:
            logger.info(f"Subscriber {subscription_id} disconnected")

    def spot_updated(self, spot: Spot) -> None:
        self._broadcast(ChangeEvent(SPOT_UPDATED, spot))

    def spots_reset(self, spots: list[Spot]) -> None:
        self._broadcast(ChangeEvent(SPOTS_RESET, spots))

    def _broadcast(self, event: ChangeEvent) -> None:
        with self._lock:
            for subscription_id, observer in list(self._observers.items()):
                self._deliver(subscription_id, observer, event)

    def _deliver(self, subscription_id: int, observer: Observer, event: ChangeEvent) -> None:
        try:
            observer(event)
        except Exception as e:
            logger.warning(f"Dropping subscriber {subscription_id} after failed delivery: {e}")
            self._observers.pop(subscription_id, None)
            update_subscriber_count(len(self._observers))
