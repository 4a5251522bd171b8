"""Tests for change fan-out."""

from spot_booking.notifier import INITIAL_DATA, SPOT_UPDATED, SPOTS_RESET, ChangeNotifier


def test_subscriber_receives_initial_snapshot(notifier, store):
    received = []

    notifier.subscribe(received.append)

    assert len(received) == 1
    assert received[0].event == INITIAL_DATA
    assert received[0].data == store.list()


def test_events_arrive_in_emit_order(notifier, store, events):
    spot_1, spot_2 = store.get("spot-1"), store.get("spot-2")

    notifier.spot_updated(spot_1)
    notifier.spot_updated(spot_2)
    notifier.spots_reset(store.list())

    assert [e.event for e in events] == [SPOT_UPDATED, SPOT_UPDATED, SPOTS_RESET]
    assert events[0].data.id == "spot-1"
    assert events[1].data.id == "spot-2"


def test_every_subscriber_gets_each_event(notifier, store):
    first, second = [], []
    notifier.subscribe(first.append)
    notifier.subscribe(second.append)

    notifier.spot_updated(store.get("spot-1"))

    assert len(first) == 2
    assert len(second) == 2
    assert notifier.subscriber_count == 2


def test_unsubscribed_observer_stops_receiving(notifier, store):
    received = []
    subscription_id = notifier.subscribe(received.append)

    notifier.unsubscribe(subscription_id)
    notifier.spot_updated(store.get("spot-1"))

    assert len(received) == 1
    assert notifier.subscriber_count == 0


def test_failing_observer_is_dropped(notifier, store, events):
    calls = []

    def broken(event):
        calls.append(event)
        if event.event != INITIAL_DATA:
            raise ConnectionError("gone")

    notifier.subscribe(broken)
    notifier.spot_updated(store.get("spot-1"))
    notifier.spot_updated(store.get("spot-2"))

    assert len(calls) == 2
    assert len(events) == 2


def test_message_form_uses_camel_case(store):
    notifier = ChangeNotifier(store.list)
    received = []
    notifier.subscribe(received.append)

    message = received[0].to_message()

    assert message["event"] == "initialData"
    assert message["data"][0]["id"] == "spot-1"
    assert message["data"][0]["isOccupied"] is False
