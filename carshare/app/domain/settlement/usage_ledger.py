"""
Usage Ledger.

Aggregates, per co-owner, the distance driven (from trips) and the amount
paid for fuel (from refuelings) of one vehicle. Read-only.

``aggregate`` covers the whole recorded history. Windowed views filter the
source records themselves and hand them to ``build_ledger``.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, Iterable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from carshare.app.models.refueling import Refueling
from carshare.app.models.trip import Trip

ZERO = Decimal("0")


def to_decimal(value) -> Decimal:
    """Convert a stored float to Decimal; missing values count as zero."""
    if value is None:
        return ZERO
    return Decimal(str(value))


@dataclass
class OwnerUsage:
    owner_id: int
    km_driven: Decimal = ZERO
    amount_paid: Decimal = ZERO
    trip_count: int = 0
    refueling_count: int = 0


@dataclass
class UsageLedger:
    vehicle_id: int
    owners: Dict[int, OwnerUsage] = field(default_factory=dict)
    total_km: Decimal = ZERO
    total_spent: Decimal = ZERO
    total_liters: Decimal = ZERO
    refueling_count: int = 0

    def owner(self, owner_id: int) -> OwnerUsage:
        usage = self.owners.get(owner_id)
        if usage is None:
            usage = OwnerUsage(owner_id=owner_id)
            self.owners[owner_id] = usage
        return usage

    @property
    def is_empty(self) -> bool:
        return not self.owners


def build_ledger(vehicle_id: int, trips: Iterable[Trip], refuelings: Iterable[Refueling]) -> UsageLedger:
    """Aggregate already-fetched trip and refueling records of one vehicle."""
    ledger = UsageLedger(vehicle_id=vehicle_id)

    for trip in trips:
        km = to_decimal(trip.distance_km)
        usage = ledger.owner(trip.driver_id)
        usage.km_driven += km
        usage.trip_count += 1
        ledger.total_km += km

    for refueling in refuelings:
        paid = to_decimal(refueling.total_price)
        usage = ledger.owner(refueling.paid_by_id)
        usage.amount_paid += paid
        usage.refueling_count += 1
        ledger.total_spent += paid
        ledger.total_liters += to_decimal(refueling.volume_liters)
        ledger.refueling_count += 1

    return ledger


async def aggregate(db: AsyncSession, vehicle_id: int) -> UsageLedger:
    """
    Build the ledger over the full history of a vehicle.

    Args:
        db: Database session
        vehicle_id: Vehicle to aggregate

    Returns:
        UsageLedger with per-owner usage and grand totals
    """
    trips = await db.execute(
        select(Trip).where(Trip.vehicle_id == vehicle_id).order_by(Trip.id)
    )
    refuelings = await db.execute(
        select(Refueling).where(Refueling.vehicle_id == vehicle_id).order_by(Refueling.id)
    )
    return build_ledger(vehicle_id, trips.scalars().all(), refuelings.scalars().all())
