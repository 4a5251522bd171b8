"""FastAPI route definitions."""

import asyncio
import logging
from datetime import datetime
from typing import Union

from fastapi import APIRouter, Depends, Request, Response, WebSocket, WebSocketDisconnect

from ..booking.classifier import BookingKind
from ..booking.service import BookingService
from ..metrics import get_metrics
from ..notifier import ChangeEvent
from ..state.models import LedgerEntry, Spot
from ..sweeper import ExpirationSweeper
from .schemas import (
    ErrorResponse,
    FutureBookingResponse,
    HealthResponse,
    MessageResponse,
    SpotUpdateRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter()

NOT_FOUND = {404: {"model": ErrorResponse}}


def get_service(request: Request) -> BookingService:
    """Booking service built by the application factory."""
    return request.app.state.booking_service


def get_sweeper(request: Request) -> ExpirationSweeper:
    return request.app.state.sweeper


@router.get("/health", response_model=HealthResponse)
async def health_check(
    request: Request,
    service: BookingService = Depends(get_service),
    sweeper: ExpirationSweeper = Depends(get_sweeper),
) -> HealthResponse:
    """
    Health check endpoint.

    Returns basic health information about the service.
    """
    uptime = (datetime.now() - request.app.state.started_at).total_seconds()

    return HealthResponse(
        status="healthy",
        sweeper_running=sweeper.running,
        subscribers=service.notifier.subscriber_count,
        uptime_seconds=uptime,
    )


@router.get("/spots", response_model=list[Spot])
async def list_spots(service: BookingService = Depends(get_service)) -> list[Spot]:
    """Get the current state of every parking spot."""
    return service.list_spots()


@router.get("/spots/{spot_id}", response_model=Spot, responses=NOT_FOUND)
async def get_spot(spot_id: str, service: BookingService = Depends(get_service)) -> Spot:
    """
    Get the state of one parking spot.

    Args:
        spot_id: The ID of the parking spot to query
    """
    return service.get_spot(spot_id)


@router.put(
    "/spots/{spot_id}",
    response_model=Union[Spot, FutureBookingResponse],
    responses={**NOT_FOUND, 400: {"model": ErrorResponse}},
)
async def update_spot(
    spot_id: str,
    body: SpotUpdateRequest,
    service: BookingService = Depends(get_service),
) -> Union[Spot, FutureBookingResponse]:
    """
    Occupy, release, or book a parking spot for a later date.

    Returns the updated spot when it was released or booked for today.
    A booking dated after today leaves the spot untouched and returns the
    queued upcoming booking instead.
    """
    outcome = service.update_spot(
        spot_id,
        body.is_occupied,
        occupied_by=body.occupied_by,
        duration_hours=body.duration_hours,
        start_time=body.start_time,
        booking_date=body.booking_date,
    )

    if outcome.kind is BookingKind.FUTURE:
        return FutureBookingResponse(
            message="Future booking created successfully",
            booking=outcome.booking,
        )
    return outcome.spot


@router.post("/reset", response_model=MessageResponse)
async def reset_spots(service: BookingService = Depends(get_service)) -> MessageResponse:
    """Reset every parking spot to available and clear the booking history."""
    service.reset_all()
    return MessageResponse(message="All parking spots have been reset")


@router.get("/history", response_model=list[LedgerEntry])
async def list_history(service: BookingService = Depends(get_service)) -> list[LedgerEntry]:
    """Recent bookings, most recent first."""
    return service.list_history()


@router.get("/upcoming", response_model=list[LedgerEntry])
async def list_upcoming(service: BookingService = Depends(get_service)) -> list[LedgerEntry]:
    """Bookings queued for a later date, most recent first."""
    return service.list_upcoming()


@router.delete("/upcoming/{booking_id}", response_model=MessageResponse, responses=NOT_FOUND)
async def cancel_upcoming(
    booking_id: str,
    service: BookingService = Depends(get_service),
) -> MessageResponse:
    """Cancel one upcoming booking."""
    service.cancel_upcoming(booking_id)
    return MessageResponse(message="Booking removed successfully")


@router.get("/metrics")
async def prometheus_metrics() -> Response:
    """
    Prometheus metrics endpoint.

    Returns metrics in Prometheus text format including:
    - spot_bookings_total: Accepted spot updates by outcome
    - spot_expirations_total: Spots released by the sweeper
    - spot_occupied: Gauge of current spot status (1=occupied, 0=available)
    - spots_total / spots_available / spots_occupied: Spot counts
    - spot_ledger_entries: History and upcoming ledger sizes
    - spot_subscribers: Connected push-channel subscribers
    """
    return Response(
        content=get_metrics(),
        media_type="text/plain; version=0.0.4; charset=utf-8",
    )


@router.websocket("/ws")
async def spot_events(websocket: WebSocket) -> None:
    """
    Push channel for spot changes.

    Sends ``initialData`` on connect, then ``spotUpdated`` and ``spotsReset``
    as they commit. Messages are {"event": name, "data": payload}.
    """
    service: BookingService = websocket.app.state.booking_service
    await websocket.accept()

    loop = asyncio.get_running_loop()
    queue: asyncio.Queue[dict] = asyncio.Queue()

    def enqueue(event: ChangeEvent) -> None:
        loop.call_soon_threadsafe(queue.put_nowait, event.to_message())

    subscription_id = service.notifier.subscribe(enqueue)
    logger.info(f"WebSocket {websocket.client} subscribed as {subscription_id}")

    async def send_events() -> None:
        while True:
            message = await queue.get()
            await websocket.send_json(message)

    async def wait_for_disconnect() -> None:
        while True:
            await websocket.receive_text()

    sender = asyncio.create_task(send_events())
    receiver = asyncio.create_task(wait_for_disconnect())
    try:
        done, _ = await asyncio.wait(
            {sender, receiver}, return_when=asyncio.FIRST_COMPLETED
        )
        for task in done:
            error = task.exception()
            if error is not None and not isinstance(error, WebSocketDisconnect):
                logger.warning(f"WebSocket {websocket.client} closed with error: {error}")
    finally:
        sender.cancel()
        receiver.cancel()
        service.notifier.unsubscribe(subscription_id)
