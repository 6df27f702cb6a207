"""
Reservation Pydantic schemas.

Range checks (end before start, past dates, overlaps) are performed by the
booking scheduler so that each failure gets its own error code.
"""

from pydantic import BaseModel, Field, field_validator
from datetime import date, time, datetime
from typing import Optional, List
from carshare.app.models.enums import ReservationStatus


def _local_time(value: Optional[time]) -> Optional[time]:
    """Daily windows are wall-clock times of the vehicle's location; offsets are rejected."""
    if value is not None and value.tzinfo is not None:
        raise ValueError("time must not carry a UTC offset")
    return value


class ReservationCreate(BaseModel):
    """Schema for requesting a reservation."""
    vehicle_id: int = Field(..., gt=0)
    date_start: date = Field(..., description="First day of the reservation")
    date_end: date = Field(..., description="Last day of the reservation (inclusive)")
    time_start: time = Field(..., description="Daily start time")
    time_end: time = Field(..., description="Daily end time (exclusive)")
    motive: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=2000)

    @field_validator("time_start", "time_end")
    @classmethod
    def require_local_time(cls, value):
        return _local_time(value)


class ReservationUpdate(BaseModel):
    """Schema for updating a reservation. Omitted fields are unchanged."""
    date_start: Optional[date] = None
    date_end: Optional[date] = None
    time_start: Optional[time] = None
    time_end: Optional[time] = None
    motive: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=2000)

    @field_validator("time_start", "time_end")
    @classmethod
    def require_local_time(cls, value):
        return _local_time(value)


class ReservationResponse(BaseModel):
    """Schema for reservation response."""
    id: int
    vehicle_id: int
    created_by_id: int
    date_start: date
    date_end: date
    time_start: time
    time_end: time
    motive: str
    description: Optional[str]
    status: ReservationStatus
    created_at: datetime
    updated_at: datetime
    
    class Config:
        from_attributes = True


class ReservationListResponse(BaseModel):
    """Schema for a list of reservations."""
    reservations: List[ReservationResponse]
    total: int
