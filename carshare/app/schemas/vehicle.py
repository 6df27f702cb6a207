"""
Vehicle Pydantic schemas.

Defines request and response models for vehicles and their co-owners.
"""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional, List
from carshare.app.models.enums import FuelType


class VehicleCreate(BaseModel):
    """Schema for registering a shared vehicle."""
    name: str = Field(..., min_length=1, max_length=100, description="Display name")
    plate_number: str = Field(..., min_length=1, max_length=20, description="Unique registration plate")
    model: str = Field(..., min_length=1, max_length=100)
    manufacturer: str = Field(..., min_length=1, max_length=100)
    fuel_type: FuelType = Field(..., description="Fuel type")
    average_consumption: Optional[float] = Field(None, gt=0, description="Average consumption in L/100 km")


class VehicleResponse(BaseModel):
    """Schema for vehicle response."""
    id: int
    created_by_id: int
    name: str
    plate_number: str
    model: str
    manufacturer: str
    fuel_type: FuelType
    average_consumption: Optional[float]
    is_active: bool
    created_at: datetime
    updated_at: datetime
    
    class Config:
        from_attributes = True


class VehicleListResponse(BaseModel):
    """Schema for the vehicles co-owned by the caller."""
    vehicles: List[VehicleResponse]
    total: int


class CoOwnerAdd(BaseModel):
    """Schema for adding a registered user as co-owner."""
    username: str = Field(..., min_length=3, max_length=50, description="Username of the user to add")


class CoOwnerResponse(BaseModel):
    """Schema for a co-owner of a vehicle."""
    user_id: int
    username: str
    email: str
    joined_at: datetime


class ActivityEntry(BaseModel):
    """Audit trail entry of a vehicle."""
    id: int
    action: str
    actor_id: Optional[int]
    actor_username: Optional[str]
    meta_data: Optional[dict]
    timestamp: datetime
    
    class Config:
        from_attributes = True
