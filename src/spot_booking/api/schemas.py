"""API request and response schemas."""

from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, StrictBool, StrictFloat, StrictInt
from pydantic.alias_generators import to_camel

from ..state.models import LedgerEntry


class SpotUpdateRequest(BaseModel):
    """Body of PUT /spots/{id}."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    is_occupied: StrictBool
    occupied_by: Optional[str] = None
    duration_hours: Optional[Union[StrictInt, StrictFloat]] = None
    start_time: Optional[str] = None
    booking_date: Optional[str] = None


class FutureBookingResponse(BaseModel):
    """Response for a booking queued in the upcoming ledger."""

    message: str
    booking: LedgerEntry


class MessageResponse(BaseModel):
    message: str


class ErrorResponse(BaseModel):
    error: str


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    sweeper_running: bool
    subscribers: int
    uptime_seconds: float
