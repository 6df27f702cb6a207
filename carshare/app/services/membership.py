"""
Co-ownership membership lookups.

The engine does not decide who may co-own a vehicle; it only trusts the
VehicleCoOwner relation maintained here.
"""

from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from carshare.app.models.user import User
from carshare.app.models.vehicle import Vehicle
from carshare.app.models.vehicle_co_owner import VehicleCoOwner


async def is_co_owner(db: AsyncSession, vehicle_id: int, user_id: int) -> bool:
    """Return True if the user belongs to the co-owner group of the vehicle."""
    result = await db.execute(
        select(VehicleCoOwner.id).where(
            VehicleCoOwner.vehicle_id == vehicle_id,
            VehicleCoOwner.user_id == user_id
        )
    )
    return result.scalar_one_or_none() is not None


async def add_co_owner(
    db: AsyncSession,
    vehicle_id: int,
    user_id: int,
    added_by_id: Optional[int] = None
) -> VehicleCoOwner:
    """
    Add a user to the co-owner group of a vehicle.

    The caller commits. Adding an existing member violates the
    (vehicle_id, user_id) unique constraint on flush.
    """
    membership = VehicleCoOwner(
        vehicle_id=vehicle_id,
        user_id=user_id,
        added_by_id=added_by_id
    )
    db.add(membership)
    await db.flush()
    return membership


async def list_co_owners(db: AsyncSession, vehicle_id: int) -> List[tuple[User, VehicleCoOwner]]:
    """List co-owners of a vehicle in joining order."""
    result = await db.execute(
        select(User, VehicleCoOwner)
        .join(VehicleCoOwner, VehicleCoOwner.user_id == User.id)
        .where(VehicleCoOwner.vehicle_id == vehicle_id)
        .order_by(VehicleCoOwner.joined_at, VehicleCoOwner.id)
    )
    return [(user, membership) for user, membership in result.all()]


async def list_user_vehicles(db: AsyncSession, user_id: int) -> List[Vehicle]:
    """List active vehicles the user co-owns."""
    result = await db.execute(
        select(Vehicle)
        .join(VehicleCoOwner, VehicleCoOwner.vehicle_id == Vehicle.id)
        .where(VehicleCoOwner.user_id == user_id, Vehicle.is_active == True)
        .order_by(Vehicle.id)
    )
    return result.scalars().all()
