"""
Refueling API Endpoints.

Co-owners record fuel purchases; the totals feed the fair-share settlement.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from carshare.app.core.dependencies import get_current_user
from carshare.app.core.guards import ensure_co_owner, get_vehicle_or_404, require_co_owner
from carshare.app.db.session import get_db
from carshare.app.domain.settlement.settlement_calculator import round_money
from carshare.app.domain.settlement.usage_ledger import build_ledger
from carshare.app.models.refueling import Refueling
from carshare.app.schemas.refueling import RefuelingCreate, RefuelingListResponse, RefuelingResponse
from carshare.app.services.audit import AuditAction, log_event

router = APIRouter(tags=["Refuelings"])


@router.post("/refuelings", response_model=RefuelingResponse, status_code=status.HTTP_201_CREATED)
async def record_refueling(
    refueling_data: RefuelingCreate,
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Record a fuel purchase paid by the caller (co-owners only).

    total_price is stored as reported.
    """
    await get_vehicle_or_404(db, refueling_data.vehicle_id)
    await ensure_co_owner(db, refueling_data.vehicle_id, current_user["user_id"])

    refueling = Refueling(paid_by_id=current_user["user_id"], **refueling_data.model_dump())
    db.add(refueling)
    await db.commit()
    await db.refresh(refueling)
    response = RefuelingResponse.model_validate(refueling)

    await log_event(
        db=db,
        action=AuditAction.REFUELING_RECORDED,
        actor_id=current_user["user_id"],
        actor_username=current_user["sub"],
        vehicle_id=response.vehicle_id,
        metadata={"refueling_id": response.id, "total_price": response.total_price}
    )

    return response


@router.get("/vehicles/{vehicle_id}/refuelings", response_model=RefuelingListResponse)
async def list_vehicle_refuelings(
    vehicle_id: int,
    current_user: dict = Depends(require_co_owner()),
    db: AsyncSession = Depends(get_db)
):
    """List the refuelings of a vehicle, most recent first, with total litres and spend."""
    result = await db.execute(
        select(Refueling).where(Refueling.vehicle_id == vehicle_id)
        .order_by(Refueling.refueled_on.desc(), Refueling.id.desc())
    )
    refuelings = result.scalars().all()
    ledger = build_ledger(vehicle_id, [], refuelings)

    return RefuelingListResponse(
        refuelings=[RefuelingResponse.model_validate(r) for r in refuelings],
        total_liters=float(round_money(ledger.total_liters)),
        total_spent=float(round_money(ledger.total_spent))
    )
