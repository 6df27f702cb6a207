"""
Settlement API Endpoints.

Exposes the fair-share fuel settlement of a vehicle. The result is
recomputed from the full history on every request and never stored.
"""

from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from carshare.app.core.guards import require_co_owner
from carshare.app.db.session import get_db
from carshare.app.domain.settlement.settlement_calculator import SettlementCalculator
from carshare.app.schemas.settlement import SettlementResponse
from carshare.app.schemas.statistics import MonthlyStatisticsResponse
from carshare.app.services.statistics import StatisticsService

router = APIRouter(prefix="/vehicles", tags=["Settlement"])


@router.get("/{vehicle_id}/settlement", response_model=SettlementResponse)
async def settle_vehicle(
    vehicle_id: int,
    current_user: dict = Depends(require_co_owner()),
    db: AsyncSession = Depends(get_db)
):
    """
    Who pays the next refueling, and roughly how much.

    Returns every co-owner's balance (positive = paid more than their
    distance share), the next payer and the expected cost of the next
    refueling. A vehicle without history returns no payer and 0.
    """
    return await SettlementCalculator.settle(db, vehicle_id)


@router.get("/{vehicle_id}/statistics", response_model=MonthlyStatisticsResponse)
async def get_monthly_statistics(
    vehicle_id: int,
    year: int = Query(None, ge=2000, le=2100, description="Year (defaults to current)"),
    month: int = Query(None, ge=1, le=12, description="Month 1-12 (defaults to current)"),
    current_user: dict = Depends(require_co_owner()),
    db: AsyncSession = Depends(get_db)
):
    """Distance, hours, fuel and spend of a vehicle for one calendar month."""
    today = date.today()
    return await StatisticsService.get_monthly_statistics(
        db,
        vehicle_id,
        year or today.year,
        month or today.month
    )
