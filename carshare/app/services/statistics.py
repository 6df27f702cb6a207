"""
Statistics Service.

Monthly usage figures of a vehicle for dashboards.
Focused on READ-ONLY operations.
"""

from datetime import date, datetime
from decimal import Decimal, ROUND_HALF_UP

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from carshare.app.domain.settlement.settlement_calculator import round_money
from carshare.app.domain.settlement.usage_ledger import build_ledger
from carshare.app.models.refueling import Refueling
from carshare.app.models.trip import Trip
from carshare.app.schemas.statistics import MonthlyStatisticsResponse


def month_bounds(year: int, month: int) -> tuple[date, date]:
    """First day of the month and first day of the following month."""
    start = date(year, month, 1)
    if month == 12:
        end = date(year + 1, 1, 1)
    else:
        end = date(year, month + 1, 1)
    return start, end


class StatisticsService:

    @staticmethod
    async def get_monthly_statistics(
        db: AsyncSession,
        vehicle_id: int,
        year: int,
        month: int
    ) -> MonthlyStatisticsResponse:
        """
        Usage of a vehicle during one calendar month.

        Trips count towards the month in which they started; refuelings
        towards the month of their date. Trips without an end contribute
        distance but no hours.
        """
        start, end = month_bounds(year, month)
        start_dt = datetime.combine(start, datetime.min.time())
        end_dt = datetime.combine(end, datetime.min.time())

        trips = (await db.execute(
            select(Trip).where(
                Trip.vehicle_id == vehicle_id,
                Trip.started_at >= start_dt,
                Trip.started_at < end_dt
            )
        )).scalars().all()

        refuelings = (await db.execute(
            select(Refueling).where(
                Refueling.vehicle_id == vehicle_id,
                Refueling.refueled_on >= start,
                Refueling.refueled_on < end
            )
        )).scalars().all()

        # Windowed view: the ledger aggregates the pre-filtered records
        ledger = build_ledger(vehicle_id, trips, refuelings)

        total_hours = Decimal("0")
        for trip in trips:
            if trip.ended_at is not None and trip.ended_at > trip.started_at:
                seconds = (trip.ended_at - trip.started_at).total_seconds()
                total_hours += Decimal(str(seconds)) / Decimal("3600")

        average_consumption = Decimal("0")
        if ledger.total_km > 0:
            average_consumption = ledger.total_liters / ledger.total_km * 100

        return MonthlyStatisticsResponse(
            vehicle_id=vehicle_id,
            year=year,
            month=month,
            total_km=int(ledger.total_km.quantize(Decimal("1"), rounding=ROUND_HALF_UP)),
            total_hours=float(round_money(total_hours)),
            total_liters=float(round_money(ledger.total_liters)),
            total_spent=float(round_money(ledger.total_spent)),
            average_consumption=float(round_money(average_consumption)),
            trip_count=len(trips),
            refueling_count=ledger.refueling_count
        )
