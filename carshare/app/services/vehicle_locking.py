"""
Vehicle locking service.

Serialises reservation admission per vehicle so that the
read-check-write sequence of the booking scheduler is atomic with respect
to other requests on the same vehicle.

Two layers are used:
1. An in-process asyncio.Lock keyed by vehicle id. Requests for different
   vehicles never share a lock.
2. A row lock (SELECT ... FOR UPDATE) on the vehicle inside the caller's
   transaction, which serialises admission across worker processes on
   PostgreSQL. SQLite ignores FOR UPDATE; the in-process lock covers it.
"""

import asyncio
import logging
import weakref
from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from carshare.app.models.vehicle import Vehicle

logger = logging.getLogger("carshare.scheduling")


class VehicleLockRegistry:
    """
    Per-vehicle asyncio locks.

    Locks are held weakly: a lock lives as long as some coroutine holds or
    waits on it and is collected once the vehicle is idle.
    """

    def __init__(self):
        self._locks: "weakref.WeakValueDictionary[int, asyncio.Lock]" = weakref.WeakValueDictionary()

    def get(self, vehicle_id: int) -> asyncio.Lock:
        lock = self._locks.get(vehicle_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[vehicle_id] = lock
        return lock

    def is_locked(self, vehicle_id: int) -> bool:
        lock = self._locks.get(vehicle_id)
        return lock is not None and lock.locked()

    @asynccontextmanager
    async def hold(self, vehicle_id: int) -> AsyncIterator[None]:
        lock = self.get(vehicle_id)
        async with lock:
            logger.debug("Acquired admission lock for vehicle %s", vehicle_id)
            yield
        logger.debug("Released admission lock for vehicle %s", vehicle_id)


# Process-wide registry used by the booking scheduler
vehicle_locks = VehicleLockRegistry()


async def lock_vehicle_row(
    db: AsyncSession,
    vehicle_id: int
) -> Vehicle | None:
    """
    Lock the vehicle row for the rest of the current transaction.

    Args:
        db: Database session
        vehicle_id: Vehicle to lock

    Returns:
        The locked vehicle, or None if it does not exist
    """
    result = await db.execute(
        select(Vehicle).where(Vehicle.id == vehicle_id).with_for_update()
    )
    return result.scalar_one_or_none()
