"""
Enumerations shared by the vehicle and reservation models.
"""

import enum


class FuelType(str, enum.Enum):
    """Fuel type of a shared vehicle."""
    GASOLINE = "GASOLINE"
    DIESEL = "DIESEL"
    ELECTRIC = "ELECTRIC"
    HYBRID = "HYBRID"
    LPG = "LPG"


class ReservationStatus(str, enum.Enum):
    """
    Reservation status enumeration.
    
    CONFIRMED: Admitted by the booking scheduler; blocks the vehicle
    CANCELLED: Withdrawn by its creator; ignored by overlap checks
    """
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"
