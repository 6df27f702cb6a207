"""
Reservation API Endpoints.

Thin HTTP layer over the booking scheduler. Precondition failures are
raised as application exceptions and rendered by the global handlers:
400 ERR_RESERVATION_RANGE / ERR_RESERVATION_PAST_DATE, 403 ERR_PERM_001,
404 ERR_NOT_FOUND_001, 409 ERR_RESERVATION_CONFLICT.
"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Path, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from carshare.app.core.dependencies import get_current_user
from carshare.app.core.guards import require_co_owner
from carshare.app.db.session import get_db
from carshare.app.domain.scheduling.booking_scheduler import BookingScheduler, ownership_guard
from carshare.app.schemas.reservation import (
    ReservationCreate,
    ReservationListResponse,
    ReservationResponse,
    ReservationUpdate,
)
from carshare.app.services.audit import AuditAction, log_event

router = APIRouter(tags=["Reservations"])


@router.post("/reservations", response_model=ReservationResponse, status_code=status.HTTP_201_CREATED)
async def create_reservation(
    reservation_data: ReservationCreate,
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Reserve a vehicle for a daily time window over a date range.

    The caller must co-own the vehicle and the window must not overlap any
    confirmed reservation of the vehicle.
    """
    reservation = await BookingScheduler.request_reservation(
        db,
        vehicle_id=reservation_data.vehicle_id,
        requester_id=current_user["user_id"],
        date_start=reservation_data.date_start,
        date_end=reservation_data.date_end,
        time_start=reservation_data.time_start,
        time_end=reservation_data.time_end,
        motive=reservation_data.motive,
        description=reservation_data.description
    )
    response = ReservationResponse.model_validate(reservation)

    await log_event(
        db=db,
        action=AuditAction.RESERVATION_CREATED,
        actor_id=current_user["user_id"],
        actor_username=current_user["sub"],
        vehicle_id=response.vehicle_id,
        metadata={
            "reservation_id": response.id,
            "date_start": str(response.date_start),
            "date_end": str(response.date_end),
            "time_start": str(response.time_start),
            "time_end": str(response.time_end)
        }
    )

    return response


@router.get("/reservations", response_model=ReservationListResponse)
async def list_my_reservations(
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """List reservations created by the caller, most recent start date first."""
    reservations = await BookingScheduler.list_reservations(db, current_user["user_id"])
    return ReservationListResponse(
        reservations=[ReservationResponse.model_validate(r) for r in reservations],
        total=len(reservations)
    )


@router.get("/reservations/{reservation_id}", response_model=ReservationResponse)
async def get_reservation(
    reservation_id: int = Path(..., description="Reservation ID"),
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Get one of the caller's reservations."""
    reservation = await BookingScheduler.get_active_reservation(db, reservation_id)
    ownership_guard.enforce(reservation.created_by_id, current_user["user_id"], "reservation")
    return ReservationResponse.model_validate(reservation)


@router.patch("/reservations/{reservation_id}", response_model=ReservationResponse)
async def update_reservation(
    reservation_id: int = Path(..., description="Reservation ID"),
    reservation_data: ReservationUpdate = ...,
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Update dates, times, motive or description (creator only).

    The updated window is re-validated and re-checked for overlaps with the
    vehicle's other reservations.
    """
    update_data = reservation_data.model_dump(exclude_unset=True)
    reservation = await BookingScheduler.update_reservation(
        db, reservation_id, current_user["user_id"], update_data
    )
    response = ReservationResponse.model_validate(reservation)

    await log_event(
        db=db,
        action=AuditAction.RESERVATION_UPDATED,
        actor_id=current_user["user_id"],
        actor_username=current_user["sub"],
        vehicle_id=response.vehicle_id,
        metadata={
            "reservation_id": response.id,
            "updated_fields": sorted(update_data.keys())
        }
    )

    return response


@router.delete("/reservations/{reservation_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_reservation(
    reservation_id: int = Path(..., description="Reservation ID"),
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Cancel a reservation (creator only). The window becomes free immediately."""
    reservation = await BookingScheduler.cancel_reservation(db, reservation_id, current_user["user_id"])

    await log_event(
        db=db,
        action=AuditAction.RESERVATION_CANCELLED,
        actor_id=current_user["user_id"],
        actor_username=current_user["sub"],
        vehicle_id=reservation.vehicle_id,
        metadata={"reservation_id": reservation.id}
    )

    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/vehicles/{vehicle_id}/reservations", response_model=ReservationListResponse)
async def get_vehicle_calendar(
    vehicle_id: int,
    from_date: Optional[date] = Query(None, description="Only reservations ending on or after this date"),
    current_user: dict = Depends(require_co_owner()),
    db: AsyncSession = Depends(get_db)
):
    """Calendar of a vehicle: its confirmed reservations in chronological order (co-owners only)."""
    reservations = await BookingScheduler.list_vehicle_reservations(db, vehicle_id, from_date)
    return ReservationListResponse(
        reservations=[ReservationResponse.model_validate(r) for r in reservations],
        total=len(reservations)
    )
