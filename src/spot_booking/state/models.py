"""Data models for parking spot and booking state."""

from datetime import datetime, timedelta
from typing import Optional

from pydantic import BaseModel, ConfigDict, model_validator
from pydantic.alias_generators import to_camel

from ..clock import CIVIL_DATETIME_FORMAT
from ..errors import InvariantViolationError


class CamelModel(BaseModel):
    """Immutable model serialized with camelCase keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class Spot(CamelModel):
    """Current state of a parking spot."""

    id: str
    number: int
    is_occupied: bool = False
    occupied_by: Optional[str] = None
    last_updated: str
    end_time: Optional[str] = None
    duration_hours: Optional[float] = None
    start_time: Optional[str] = None
    booking_date: Optional[str] = None

    @classmethod
    def available(cls, spot_id: str, number: int, last_updated: str) -> "Spot":
        """Create a spot in the available state."""
        return cls(id=spot_id, number=number, last_updated=last_updated)

    def released(self, last_updated: str) -> "Spot":
        """Copy of this spot with occupancy cleared."""
        return Spot.available(self.id, self.number, last_updated)

    def check_invariants(self) -> None:
        """
        Raises:
            InvariantViolationError: If booking fields disagree with occupancy
        """
        if not self.is_occupied:
            leftovers = [
                name
                for name in ("occupied_by", "end_time", "duration_hours", "start_time", "booking_date")
                if getattr(self, name) is not None
            ]
            if leftovers:
                raise InvariantViolationError(
                    f"Available spot {self.id} still carries {', '.join(leftovers)}"
                )
            return
        if self.occupied_by is None:
            raise InvariantViolationError(f"Occupied spot {self.id} has no occupant")
        if self.duration_hours is not None:
            if self.start_time is None or self.end_time is None:
                raise InvariantViolationError(f"Spot {self.id} has a duration but no window")
            start = datetime.strptime(self.start_time, CIVIL_DATETIME_FORMAT)
            expected_end = start + timedelta(hours=self.duration_hours)
            if self.end_time != expected_end.strftime(CIVIL_DATETIME_FORMAT):
                raise InvariantViolationError(
                    f"Spot {self.id} ends at {self.end_time}, expected {expected_end:%Y-%m-%dT%H:%M:%S}"
                )

    @model_validator(mode="after")
    def _validate_occupancy(self) -> "Spot":
        self.check_invariants()
        return self


class LedgerEntry(CamelModel):
    """Immutable record of one accepted booking."""

    id: str
    spot_id: str
    spot_number: int
    occupied_by: str
    start_time: str
    end_time: str
    duration_hours: float
    booking_date: str
    created_at: str
