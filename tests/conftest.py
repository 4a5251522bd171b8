"""Shared fixtures with a controllable clock."""

from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

import pytest
from fastapi.testclient import TestClient

from spot_booking.booking.service import BookingService
from spot_booking.clock import Clock
from spot_booking.config import AppConfig, BookingConfig, SweeperConfig
from spot_booking.main import create_app
from spot_booking.notifier import ChangeNotifier
from spot_booking.state.ledger import BookingLedger
from spot_booking.state.spot_store import SpotStore
from spot_booking.sweeper import ExpirationSweeper

TIMEZONE = "Europe/Stockholm"


class FakeTime:
    """Callable returning a settable instant."""

    def __init__(self, current: datetime):
        self.current = current

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> None:
        self.current += timedelta(**kwargs)


@pytest.fixture
def fake_time() -> FakeTime:
    return FakeTime(datetime(2024, 6, 10, 9, 30, tzinfo=ZoneInfo(TIMEZONE)))


@pytest.fixture
def clock(fake_time) -> Clock:
    return Clock(TIMEZONE, now_func=fake_time)


@pytest.fixture
def store(clock) -> SpotStore:
    return SpotStore(3, clock)


@pytest.fixture
def notifier(store) -> ChangeNotifier:
    return ChangeNotifier(store.list, lock=store.lock)


@pytest.fixture
def events(notifier) -> list:
    """Events emitted after subscription, without the initial snapshot."""
    received = []
    notifier.subscribe(received.append)
    received.clear()
    return received


@pytest.fixture
def service(store, notifier, clock) -> BookingService:
    return BookingService(
        store=store,
        history=BookingLedger("history"),
        upcoming=BookingLedger("upcoming"),
        notifier=notifier,
        clock=clock,
    )


@pytest.fixture
def sweeper(store, notifier, clock) -> ExpirationSweeper:
    return ExpirationSweeper(store, notifier, clock, interval_seconds=60)


@pytest.fixture
def app_config() -> AppConfig:
    return AppConfig(
        booking=BookingConfig(spot_count=3),
        sweeper=SweeperConfig(enabled=False),
    )


@pytest.fixture
def client(app_config, clock):
    app = create_app(app_config, clock=clock)
    with TestClient(app) as test_client:
        yield test_client
