"""Prometheus metrics for spot booking."""

from prometheus_client import Counter, Gauge, CollectorRegistry, generate_latest

# Create a custom registry to avoid conflicts with default metrics
REGISTRY = CollectorRegistry()

# Booking requests by classifier outcome (released, active, future)
BOOKINGS = Counter(
    "spot_bookings_total",
    "Total number of accepted spot update requests",
    ["outcome"],
    registry=REGISTRY,
)

SPOT_EXPIRATIONS = Counter(
    "spot_expirations_total",
    "Number of spots released by the expiration sweeper",
    ["spot_id"],
    registry=REGISTRY,
)

SWEEP_CYCLES = Counter(
    "spot_sweep_cycles_total",
    "Total number of expiration sweeps run",
    registry=REGISTRY,
)

RESETS = Counter(
    "spot_resets_total",
    "Number of full spot resets",
    registry=REGISTRY,
)

CANCELLATIONS = Counter(
    "spot_upcoming_cancellations_total",
    "Number of upcoming bookings cancelled",
    registry=REGISTRY,
)

# Current spot status gauge
SPOT_STATUS = Gauge(
    "spot_occupied",
    "Current status of parking spot (1=occupied, 0=available)",
    ["spot_id"],
    registry=REGISTRY,
)

TOTAL_SPOTS = Gauge(
    "spots_total",
    "Total number of parking spots",
    registry=REGISTRY,
)

AVAILABLE_SPOTS = Gauge(
    "spots_available",
    "Number of available parking spots",
    registry=REGISTRY,
)

OCCUPIED_SPOTS = Gauge(
    "spots_occupied",
    "Number of occupied parking spots",
    registry=REGISTRY,
)

LEDGER_SIZE = Gauge(
    "spot_ledger_entries",
    "Entries currently held in a booking ledger",
    ["ledger"],
    registry=REGISTRY,
)

SUBSCRIBERS = Gauge(
    "spot_subscribers",
    "Connected change subscribers",
    registry=REGISTRY,
)


def record_booking(outcome: str) -> None:
    """Record an accepted spot update by outcome."""
    BOOKINGS.labels(outcome=outcome).inc()


def record_expiration(spot_id: str) -> None:
    SPOT_EXPIRATIONS.labels(spot_id=spot_id).inc()


def increment_sweep_cycles() -> None:
    SWEEP_CYCLES.inc()


def increment_resets() -> None:
    RESETS.inc()


def increment_cancellations() -> None:
    CANCELLATIONS.inc()


def update_spot_status(spot_id: str, is_occupied: bool) -> None:
    """Update current spot status gauge."""
    SPOT_STATUS.labels(spot_id=spot_id).set(1 if is_occupied else 0)


def update_spot_counts(total: int, available: int, occupied: int) -> None:
    """Update overall spot count gauges."""
    TOTAL_SPOTS.set(total)
    AVAILABLE_SPOTS.set(available)
    OCCUPIED_SPOTS.set(occupied)


def update_ledger_size(ledger: str, size: int) -> None:
    LEDGER_SIZE.labels(ledger=ledger).set(size)


def update_subscriber_count(count: int) -> None:
    SUBSCRIBERS.set(count)


def get_metrics() -> bytes:
    """Generate Prometheus metrics output."""
    return generate_latest(REGISTRY)
