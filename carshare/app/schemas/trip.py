"""
Trip Pydantic schemas.

Defines request and response models for logging completed vehicle use.
"""

from pydantic import BaseModel, Field, model_validator
from datetime import datetime
from typing import Optional, List


class TripCreate(BaseModel):
    """Schema for logging a completed trip."""
    vehicle_id: int = Field(..., gt=0)
    name: str = Field(..., min_length=1, max_length=150)
    description: Optional[str] = Field(None, max_length=2000)
    started_at: datetime
    ended_at: Optional[datetime] = None
    distance_km: Optional[float] = Field(None, ge=0, description="Distance driven in km")
    fuel_consumed_liters: Optional[float] = Field(None, ge=0)

    @model_validator(mode="after")
    def check_time_span(self):
        if self.ended_at is None:
            return self
        if (self.started_at.tzinfo is None) != (self.ended_at.tzinfo is None):
            raise ValueError("started_at and ended_at must both carry a UTC offset or both omit it")
        if self.ended_at < self.started_at:
            raise ValueError("ended_at must not be before started_at")
        return self


class TripResponse(BaseModel):
    """Schema for trip response."""
    id: int
    vehicle_id: int
    driver_id: int
    name: str
    description: Optional[str]
    started_at: datetime
    ended_at: Optional[datetime]
    distance_km: Optional[float]
    fuel_consumed_liters: Optional[float]
    created_at: datetime
    
    class Config:
        from_attributes = True


class TripListResponse(BaseModel):
    """Schema for the trips of a vehicle."""
    trips: List[TripResponse]
    total: int
    total_km: float
