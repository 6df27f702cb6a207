"""
Booking Scheduler (Domain Logic).

Admits, updates and cancels vehicle reservations.

Admission flow (short-circuits on the first failure):
1. date_end >= date_start            -> InvalidRangeError
2. time_end > time_start             -> InvalidRangeError
3. date_start >= today               -> PastDateError
4. requester co-owns the vehicle     -> InsufficientPermissionsError
5. no overlap with any CONFIRMED
   reservation on the vehicle        -> ReservationConflictError

Steps 5 and the insert run under the per-vehicle admission lock and are
committed before the lock is released, so two overlapping requests on the
same vehicle can never both be admitted.
"""

import logging
from datetime import date, datetime, time, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from carshare.app.core.exceptions import (
    InvalidRangeError,
    PastDateError,
    ReservationConflictError,
    ResourceNotFoundError,
)
from carshare.app.core.guards import OwnershipGuard, ensure_co_owner
from carshare.app.domain.scheduling.interval import BookingWindow
from carshare.app.models.enums import ReservationStatus
from carshare.app.models.reservation import Reservation
from carshare.app.services.vehicle_locking import lock_vehicle_row, vehicle_locks

logger = logging.getLogger("carshare.scheduling")

UPDATABLE_FIELDS = ("date_start", "date_end", "time_start", "time_end", "motive", "description")

ownership_guard = OwnershipGuard()


def validate_window(window: BookingWindow) -> None:
    """Check the date and time bounds of a window (steps 1-2)."""
    if window.date_end < window.date_start:
        raise InvalidRangeError(
            "End date must not be before start date",
            details={"date_start": str(window.date_start), "date_end": str(window.date_end)}
        )
    if window.time_end <= window.time_start:
        raise InvalidRangeError(
            "End time must be after start time",
            details={"time_start": str(window.time_start), "time_end": str(window.time_end)}
        )


class BookingScheduler:

    @staticmethod
    async def find_conflict(
        db: AsyncSession,
        vehicle_id: int,
        window: BookingWindow,
        exclude_reservation_id: Optional[int] = None
    ) -> Optional[Reservation]:
        """
        Return the first CONFIRMED reservation of the vehicle overlapping the window.

        Candidates are narrowed to intersecting date ranges in SQL; the
        interval model makes the final decision.
        """
        query = select(Reservation).where(
            Reservation.vehicle_id == vehicle_id,
            Reservation.status == ReservationStatus.CONFIRMED,
            Reservation.date_start <= window.date_end,
            Reservation.date_end >= window.date_start,
        ).order_by(Reservation.date_start, Reservation.time_start, Reservation.id)

        if exclude_reservation_id is not None:
            query = query.where(Reservation.id != exclude_reservation_id)

        result = await db.execute(query)
        for existing in result.scalars():
            if window.overlaps(BookingWindow.from_reservation(existing)):
                return existing
        return None

    @staticmethod
    async def request_reservation(
        db: AsyncSession,
        vehicle_id: int,
        requester_id: int,
        date_start: date,
        date_end: date,
        time_start: time,
        time_end: time,
        motive: str,
        description: Optional[str] = None,
        today: Optional[date] = None
    ) -> Reservation:
        """
        Admit a reservation request or raise the first failing precondition.

        Args:
            db: Database session (committed on success)
            vehicle_id: Vehicle to reserve
            requester_id: Authenticated co-owner making the request
            date_start, date_end: Inclusive calendar date range
            time_start, time_end: Daily half-open time window
            motive: Free-text reason
            description: Optional details
            today: Reference date for the past-date check (defaults to date.today())

        Returns:
            The persisted CONFIRMED reservation
        """
        window = BookingWindow(date_start, date_end, time_start, time_end)
        validate_window(window)

        if date_start < (today or date.today()):
            raise PastDateError(date_start)

        await ensure_co_owner(db, vehicle_id, requester_id)

        async with vehicle_locks.hold(vehicle_id):
            await lock_vehicle_row(db, vehicle_id)

            conflict = await BookingScheduler.find_conflict(db, vehicle_id, window)
            if conflict:
                conflict_id, details = conflict.id, _window_details(conflict)
                await db.rollback()
                logger.info(
                    "Rejected reservation on vehicle %s for user %s: overlaps reservation %s",
                    vehicle_id, requester_id, conflict_id
                )
                raise ReservationConflictError(conflict_id, details=details)

            reservation = Reservation(
                vehicle_id=vehicle_id,
                created_by_id=requester_id,
                date_start=date_start,
                date_end=date_end,
                time_start=time_start,
                time_end=time_end,
                motive=motive,
                description=description,
                status=ReservationStatus.CONFIRMED
            )
            db.add(reservation)
            await db.commit()

        await db.refresh(reservation)
        logger.info(
            "Admitted reservation %s on vehicle %s for user %s",
            reservation.id, vehicle_id, requester_id
        )
        return reservation

    @staticmethod
    async def get_active_reservation(db: AsyncSession, reservation_id: int) -> Reservation:
        """
        Fetch a CONFIRMED reservation.

        Raises:
            ResourceNotFoundError if missing or cancelled
        """
        reservation = await db.get(Reservation, reservation_id)
        if not reservation or reservation.status != ReservationStatus.CONFIRMED:
            raise ResourceNotFoundError("Reservation", reservation_id)
        return reservation

    @staticmethod
    async def update_reservation(
        db: AsyncSession,
        reservation_id: int,
        requester_id: int,
        changes: Dict[str, Any]
    ) -> Reservation:
        """
        Update dates, times, motive or description of a reservation.

        Checks, in order: NotFound, Forbidden (not the creator), InvalidRange
        on the merged window, Conflict with other reservations.
        """
        reservation = await BookingScheduler.get_active_reservation(db, reservation_id)
        ownership_guard.enforce(reservation.created_by_id, requester_id, "reservation")

        # Only description may be cleared; None on the other fields means "unchanged"
        changes = {
            field: value for field, value in changes.items()
            if field in UPDATABLE_FIELDS and (value is not None or field == "description")
        }
        merged = {field: getattr(reservation, field) for field in UPDATABLE_FIELDS}
        merged.update(changes)

        window = BookingWindow(merged["date_start"], merged["date_end"], merged["time_start"], merged["time_end"])
        validate_window(window)

        vehicle_id = reservation.vehicle_id
        async with vehicle_locks.hold(vehicle_id):
            await lock_vehicle_row(db, vehicle_id)

            conflict = await BookingScheduler.find_conflict(
                db, vehicle_id, window, exclude_reservation_id=reservation.id
            )
            if conflict:
                conflict_id, details = conflict.id, _window_details(conflict)
                await db.rollback()
                logger.info(
                    "Rejected update of reservation %s: overlaps reservation %s",
                    reservation_id, conflict_id
                )
                raise ReservationConflictError(conflict_id, details=details)

            for field, value in changes.items():
                setattr(reservation, field, value)
            await db.commit()

        await db.refresh(reservation)
        logger.info("Updated reservation %s (%s)", reservation.id, ", ".join(sorted(changes)) or "no fields")
        return reservation

    @staticmethod
    async def cancel_reservation(
        db: AsyncSession,
        reservation_id: int,
        requester_id: int
    ) -> Reservation:
        """
        Cancel (soft delete) a reservation. Only its creator may do so.

        Cancelled reservations free their window immediately.
        """
        reservation = await BookingScheduler.get_active_reservation(db, reservation_id)
        ownership_guard.enforce(reservation.created_by_id, requester_id, "reservation")

        reservation.status = ReservationStatus.CANCELLED
        reservation.cancelled_at = datetime.now(timezone.utc)
        await db.commit()
        await db.refresh(reservation)

        logger.info("Cancelled reservation %s on vehicle %s", reservation.id, reservation.vehicle_id)
        return reservation

    @staticmethod
    async def list_reservations(db: AsyncSession, requester_id: int) -> List[Reservation]:
        """List CONFIRMED reservations created by the requester, latest date_start first."""
        result = await db.execute(
            select(Reservation).where(
                Reservation.created_by_id == requester_id,
                Reservation.status == ReservationStatus.CONFIRMED
            ).order_by(
                Reservation.date_start.desc(),
                Reservation.time_start.desc(),
                Reservation.id.desc()
            )
        )
        return result.scalars().all()

    @staticmethod
    async def list_vehicle_reservations(
        db: AsyncSession,
        vehicle_id: int,
        from_date: Optional[date] = None
    ) -> List[Reservation]:
        """Calendar of a vehicle: CONFIRMED reservations in chronological order."""
        query = select(Reservation).where(
            Reservation.vehicle_id == vehicle_id,
            Reservation.status == ReservationStatus.CONFIRMED
        )
        if from_date is not None:
            query = query.where(Reservation.date_end >= from_date)

        result = await db.execute(
            query.order_by(Reservation.date_start, Reservation.time_start, Reservation.id)
        )
        return result.scalars().all()


def _window_details(reservation: Reservation) -> Dict[str, str]:
    return {
        "date_start": str(reservation.date_start),
        "date_end": str(reservation.date_end),
        "time_start": str(reservation.time_start),
        "time_end": str(reservation.time_end),
    }
