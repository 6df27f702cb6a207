"""
Security guards for co-ownership and creator-based access control.

Provides helpers for protecting vehicle-scoped endpoints.
"""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from carshare.app.core.dependencies import get_current_user
from carshare.app.core.exceptions import InsufficientPermissionsError, ResourceNotFoundError
from carshare.app.db.session import get_db
from carshare.app.models.vehicle import Vehicle
from carshare.app.services.membership import is_co_owner


async def get_vehicle_or_404(db: AsyncSession, vehicle_id: int) -> Vehicle:
    """
    Fetch an active vehicle.

    Raises:
        ResourceNotFoundError if the vehicle does not exist or is inactive
    """
    vehicle = await db.get(Vehicle, vehicle_id)
    if not vehicle or not vehicle.is_active:
        raise ResourceNotFoundError("Vehicle", vehicle_id)
    return vehicle


async def ensure_co_owner(db: AsyncSession, vehicle_id: int, user_id: int) -> None:
    """
    Enforce that the user co-owns the vehicle.

    Raises:
        InsufficientPermissionsError if the user is not a co-owner
    """
    if not await is_co_owner(db, vehicle_id, user_id):
        raise InsufficientPermissionsError(
            message="You are not a co-owner of this vehicle",
            details={"vehicle_id": vehicle_id}
        )


def require_co_owner():
    """
    Dependency factory for vehicle-scoped endpoints.

    Usage:
        @router.get("/vehicles/{vehicle_id}/trips")
        async def list_trips(
            vehicle_id: int,
            current_user: dict = Depends(require_co_owner())
        ):
            ...

    The dependency resolves the ``vehicle_id`` path parameter, returns 404
    for unknown vehicles and 403 for callers outside the co-owner group.
    """
    async def co_owner_checker(
        vehicle_id: int,
        current_user: dict = Depends(get_current_user),
        db: AsyncSession = Depends(get_db)
    ) -> dict:
        await get_vehicle_or_404(db, vehicle_id)
        await ensure_co_owner(db, vehicle_id, current_user["user_id"])
        return current_user

    return co_owner_checker


class OwnershipGuard:
    """
    Creator-only guard for user-owned records such as reservations.

    Usage:
        ownership_guard = OwnershipGuard()
        ownership_guard.enforce(reservation.created_by_id, requester_id, "reservation")
    """

    def check(self, creator_id: int, requester_id: int) -> bool:
        return creator_id == requester_id

    def enforce(self, creator_id: int, requester_id: int, resource_name: str = "resource") -> None:
        """
        Raises:
            InsufficientPermissionsError if the requester did not create the record
        """
        if not self.check(creator_id, requester_id):
            raise InsufficientPermissionsError(
                message=f"Only the creator can modify this {resource_name}",
                details={"resource": resource_name}
            )
