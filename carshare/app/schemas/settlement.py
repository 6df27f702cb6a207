"""
Settlement Pydantic schemas.

Defines the response of the fair-share fuel settlement of a vehicle.
Monetary values are rounded to 2 decimals (half-up) before serialization.
"""

from pydantic import BaseModel, Field
from typing import List, Optional


class NextPayer(BaseModel):
    """Co-owner who should pay for the next refueling."""
    id: int
    username: str
    email: str


class OwnerBalanceResponse(BaseModel):
    """Balance of one co-owner (positive = paid more than fair share)."""
    owner_id: int
    username: Optional[str] = None
    km_driven: float
    km_share: float = Field(..., description="Fraction of the vehicle's total distance (0-1)")
    expected_contribution: float
    actual_contribution: float
    balance: float


class SettlementResponse(BaseModel):
    """Fair-share settlement of a vehicle's fuel costs."""
    vehicle_id: int
    next_payer: Optional[NextPayer] = None
    per_owner_balance: List[OwnerBalanceResponse]
    expected_contribution: float = Field(..., description="Estimated cost of the next refueling (mean of past totals)")
    total_km: float
    total_spent: float
