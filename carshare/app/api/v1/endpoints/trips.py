"""
Trip API Endpoints.

Co-owners log completed uses of a vehicle; the distances feed the usage
ledger behind the fuel settlement.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from carshare.app.core.dependencies import get_current_user
from carshare.app.core.guards import ensure_co_owner, get_vehicle_or_404, require_co_owner
from carshare.app.db.session import get_db
from carshare.app.domain.settlement.usage_ledger import build_ledger
from carshare.app.models.trip import Trip
from carshare.app.schemas.trip import TripCreate, TripListResponse, TripResponse
from carshare.app.services.audit import AuditAction, log_event

router = APIRouter(tags=["Trips"])


@router.post("/trips", response_model=TripResponse, status_code=status.HTTP_201_CREATED)
async def log_trip(
    trip_data: TripCreate,
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Log a completed trip driven by the caller (co-owners only)."""
    await get_vehicle_or_404(db, trip_data.vehicle_id)
    await ensure_co_owner(db, trip_data.vehicle_id, current_user["user_id"])

    trip = Trip(driver_id=current_user["user_id"], **trip_data.model_dump())
    db.add(trip)
    await db.commit()
    await db.refresh(trip)
    response = TripResponse.model_validate(trip)

    await log_event(
        db=db,
        action=AuditAction.TRIP_LOGGED,
        actor_id=current_user["user_id"],
        actor_username=current_user["sub"],
        vehicle_id=response.vehicle_id,
        metadata={"trip_id": response.id, "distance_km": response.distance_km}
    )

    return response


@router.get("/vehicles/{vehicle_id}/trips", response_model=TripListResponse)
async def list_vehicle_trips(
    vehicle_id: int,
    current_user: dict = Depends(require_co_owner()),
    db: AsyncSession = Depends(get_db)
):
    """List the trips of a vehicle, most recent first, with the total distance."""
    result = await db.execute(
        select(Trip).where(Trip.vehicle_id == vehicle_id).order_by(Trip.started_at.desc(), Trip.id.desc())
    )
    trips = result.scalars().all()
    ledger = build_ledger(vehicle_id, trips, [])

    return TripListResponse(
        trips=[TripResponse.model_validate(t) for t in trips],
        total=len(trips),
        total_km=float(ledger.total_km)
    )
