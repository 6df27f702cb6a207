"""
Statistics Pydantic schemas.
"""

from pydantic import BaseModel


class MonthlyStatisticsResponse(BaseModel):
    """Usage of a vehicle during one calendar month."""
    vehicle_id: int
    year: int
    month: int
    total_km: int
    total_hours: float
    total_liters: float
    total_spent: float
    average_consumption: float  # L/100 km
    trip_count: int
    refueling_count: int
