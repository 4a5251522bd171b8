"""Tests for applying booking requests to spots and ledgers."""

import pytest

from spot_booking.booking.classifier import BookingKind
from spot_booking.errors import InvalidRequestError, NotFoundError
from spot_booking.notifier import SPOT_UPDATED, SPOTS_RESET


def book_today(service, spot_id="spot-1", name="Alice", hours=2):
    return service.update_spot(spot_id, True, occupied_by=name, duration_hours=hours)


def book_future(service, spot_id="spot-1", name="Bob", date="2024-06-12"):
    return service.update_spot(
        spot_id,
        True,
        occupied_by=name,
        duration_hours=4,
        start_time=f"{date}T08:00",
        booking_date=date,
    )


def test_active_booking_occupies_spot(service, events):
    outcome = book_today(service)

    assert outcome.kind is BookingKind.ACTIVE
    spot = service.get_spot("spot-1")
    assert spot.is_occupied is True
    assert spot.occupied_by == "Alice"
    assert spot.start_time == "2024-06-10T09:30:00"
    assert spot.end_time == "2024-06-10T11:30:00"
    assert spot.duration_hours == 2
    assert spot.booking_date == "2024-06-10"
    assert outcome.spot == spot

    history = service.list_history()
    assert len(history) == 1
    assert history[0].occupied_by == "Alice"
    assert history[0].spot_number == 1
    assert history[0].end_time == spot.end_time

    assert [e.event for e in events] == [SPOT_UPDATED]
    assert events[0].data == spot


def test_release_clears_spot_and_emits_once(service, events, fake_time):
    book_today(service)
    events.clear()
    fake_time.advance(minutes=10)

    outcome = service.update_spot("spot-1", False, occupied_by="ignored", duration_hours=3)

    assert outcome.kind is BookingKind.RELEASE
    spot = service.get_spot("spot-1")
    assert spot.is_occupied is False
    assert spot.occupied_by is None
    assert spot.end_time is None
    assert spot.duration_hours is None
    assert spot.start_time is None
    assert spot.booking_date is None
    assert spot.last_updated == "2024-06-10T09:40:00"
    assert len(events) == 1
    assert len(service.list_history()) == 1


def test_release_of_available_spot_still_emits(service, events):
    service.update_spot("spot-2", False)

    assert len(events) == 1
    assert events[0].data.id == "spot-2"


def test_release_ignores_future_booking_date(service):
    book_today(service)

    service.update_spot("spot-1", False, booking_date="2030-01-01")

    assert service.get_spot("spot-1").is_occupied is False


def test_future_booking_leaves_spot_untouched(service, events):
    before = service.get_spot("spot-1")

    outcome = book_future(service)

    assert outcome.kind is BookingKind.FUTURE
    assert outcome.spot is None
    assert service.get_spot("spot-1") == before
    assert events == []
    assert service.list_history() == []

    upcoming = service.list_upcoming()
    assert len(upcoming) == 1
    assert upcoming[0] == outcome.booking
    assert upcoming[0].booking_date == "2024-06-12"
    assert upcoming[0].end_time == "2024-06-12T12:00:00"


def test_future_booking_does_not_block_active_booking(service):
    book_future(service)

    outcome = book_today(service, name="Carol")

    assert outcome.kind is BookingKind.ACTIVE
    assert service.get_spot("spot-1").occupied_by == "Carol"


def test_future_booking_is_not_promoted_when_its_date_arrives(service, sweeper, fake_time):
    book_future(service, date="2024-06-11")
    fake_time.advance(days=1)

    sweeper.sweep()

    assert service.get_spot("spot-1").is_occupied is False
    assert len(service.list_upcoming()) == 1


def test_unknown_spot_raises_not_found(service, events):
    with pytest.raises(NotFoundError):
        book_today(service, spot_id="spot-42")

    assert events == []
    assert service.list_history() == []


def test_invalid_request_changes_nothing(service, events):
    with pytest.raises(InvalidRequestError):
        service.update_spot("spot-1", True, duration_hours=2, booking_date="June 10")

    assert service.get_spot("spot-1").is_occupied is False
    assert events == []


def test_cancel_upcoming(service):
    first = book_future(service, name="Bob").booking
    second = book_future(service, name="Dana").booking

    removed = service.cancel_upcoming(first.id)

    assert removed == first
    assert service.list_upcoming() == [second]
    with pytest.raises(NotFoundError):
        service.cancel_upcoming(first.id)


def test_history_keeps_latest_ten(service):
    for n in range(11):
        book_today(service, name=f"User {n}")

    history = service.list_history()
    assert len(history) == 10
    assert history[0].occupied_by == "User 10"
    assert history[-1].occupied_by == "User 1"


def test_reset_clears_spots_and_history(service, events, fake_time):
    book_today(service, spot_id="spot-1")
    book_today(service, spot_id="spot-3")
    book_future(service)
    events.clear()
    fake_time.advance(minutes=1)

    spots = service.reset_all()

    assert all(not s.is_occupied for s in spots)
    assert all(s.last_updated == "2024-06-10T09:31:00" for s in spots)
    assert service.list_history() == []
    assert len(service.list_upcoming()) == 1
    assert [e.event for e in events] == [SPOTS_RESET]
    assert events[0].data == spots
