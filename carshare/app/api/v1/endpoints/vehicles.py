"""
Vehicle API Endpoints.

Registration of shared vehicles and management of their co-owner group.
"""

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from carshare.app.core.dependencies import get_current_user
from carshare.app.core.guards import get_vehicle_or_404, require_co_owner
from carshare.app.db.session import get_db
from carshare.app.models.user import User
from carshare.app.models.vehicle import Vehicle
from carshare.app.schemas.vehicle import (
    ActivityEntry,
    CoOwnerAdd,
    CoOwnerResponse,
    VehicleCreate,
    VehicleListResponse,
    VehicleResponse,
)
from carshare.app.services.audit import AuditAction, get_vehicle_audit_trail, log_event
from carshare.app.services.membership import add_co_owner, is_co_owner, list_co_owners, list_user_vehicles

router = APIRouter(prefix="/vehicles", tags=["Vehicles"])


@router.post("", response_model=VehicleResponse, status_code=status.HTTP_201_CREATED)
async def create_vehicle(
    vehicle_data: VehicleCreate,
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Register a shared vehicle.

    The registering user becomes its first co-owner.
    """
    existing = await db.execute(
        select(Vehicle.id).where(Vehicle.plate_number == vehicle_data.plate_number)
    )
    if existing.scalar_one_or_none():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Plate number already registered"
        )

    vehicle = Vehicle(created_by_id=current_user["user_id"], **vehicle_data.model_dump())
    db.add(vehicle)
    await db.flush()
    await add_co_owner(db, vehicle.id, current_user["user_id"], added_by_id=current_user["user_id"])
    await db.commit()
    await db.refresh(vehicle)

    await log_event(
        db=db,
        action=AuditAction.VEHICLE_CREATED,
        actor_id=current_user["user_id"],
        actor_username=current_user["sub"],
        vehicle_id=vehicle.id,
        metadata={"plate_number": vehicle.plate_number}
    )

    return VehicleResponse.model_validate(vehicle)


@router.get("", response_model=VehicleListResponse)
async def list_my_vehicles(
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """List the vehicles co-owned by the authenticated user."""
    vehicles = await list_user_vehicles(db, current_user["user_id"])
    return VehicleListResponse(
        vehicles=[VehicleResponse.model_validate(v) for v in vehicles],
        total=len(vehicles)
    )


@router.get("/{vehicle_id}", response_model=VehicleResponse)
async def get_vehicle(
    vehicle_id: int,
    current_user: dict = Depends(require_co_owner()),
    db: AsyncSession = Depends(get_db)
):
    """Get details of a co-owned vehicle."""
    vehicle = await get_vehicle_or_404(db, vehicle_id)
    return VehicleResponse.model_validate(vehicle)


@router.get("/{vehicle_id}/co-owners", response_model=list[CoOwnerResponse])
async def get_co_owners(
    vehicle_id: int,
    current_user: dict = Depends(require_co_owner()),
    db: AsyncSession = Depends(get_db)
):
    """List the co-owners of a vehicle."""
    members = await list_co_owners(db, vehicle_id)
    return [
        CoOwnerResponse(
            user_id=user.id,
            username=user.username,
            email=user.email,
            joined_at=membership.joined_at
        )
        for user, membership in members
    ]


@router.post("/{vehicle_id}/co-owners", response_model=CoOwnerResponse, status_code=status.HTTP_201_CREATED)
async def add_vehicle_co_owner(
    vehicle_id: int,
    payload: CoOwnerAdd,
    current_user: dict = Depends(require_co_owner()),
    db: AsyncSession = Depends(get_db)
):
    """Add a registered user to the co-owner group (co-owners only)."""
    result = await db.execute(select(User).where(User.username == payload.username))
    user = result.scalar_one_or_none()

    if not user or not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found"
        )

    if await is_co_owner(db, vehicle_id, user.id):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="User is already a co-owner of this vehicle"
        )

    try:
        membership = await add_co_owner(db, vehicle_id, user.id, added_by_id=current_user["user_id"])
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="User is already a co-owner of this vehicle"
        )
    await db.refresh(membership)

    await log_event(
        db=db,
        action=AuditAction.CO_OWNER_ADDED,
        actor_id=current_user["user_id"],
        actor_username=current_user["sub"],
        vehicle_id=vehicle_id,
        metadata={"user_id": user.id, "username": user.username}
    )

    return CoOwnerResponse(
        user_id=user.id,
        username=user.username,
        email=user.email,
        joined_at=membership.joined_at
    )


@router.get("/{vehicle_id}/activity", response_model=list[ActivityEntry])
async def get_vehicle_activity(
    vehicle_id: int,
    limit: int = Query(50, ge=1, le=200, description="Maximum number of entries"),
    current_user: dict = Depends(require_co_owner()),
    db: AsyncSession = Depends(get_db)
):
    """Audit trail of a vehicle, most recent first (co-owners only)."""
    entries = await get_vehicle_audit_trail(db, vehicle_id, limit=limit)
    return [ActivityEntry.model_validate(entry) for entry in entries]
