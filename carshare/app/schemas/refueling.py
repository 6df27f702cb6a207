"""
Refueling Pydantic schemas.

total_price is accepted as reported; it is not cross-checked against
volume_liters * unit_price.
"""

from pydantic import BaseModel, Field
from datetime import date, datetime
from typing import List


class RefuelingCreate(BaseModel):
    """Schema for recording a fuel purchase."""
    vehicle_id: int = Field(..., gt=0)
    refueled_on: date
    volume_liters: float = Field(..., gt=0)
    unit_price: float = Field(..., gt=0, description="Price per liter")
    total_price: float = Field(..., gt=0, description="Amount actually paid")


class RefuelingResponse(BaseModel):
    """Schema for refueling response."""
    id: int
    vehicle_id: int
    paid_by_id: int
    refueled_on: date
    volume_liters: float
    unit_price: float
    total_price: float
    created_at: datetime
    
    class Config:
        from_attributes = True


class RefuelingListResponse(BaseModel):
    """Schema for the refuelings of a vehicle with totals."""
    refuelings: List[RefuelingResponse]
    total_liters: float
    total_spent: float
