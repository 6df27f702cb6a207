"""
Booking scheduler tests (service level).

Covers admission order, the no-overlap rule, creator-only updates and
cancellation, and list ordering.
"""

import pytest
from datetime import date, time, timedelta

from carshare.app.core.exceptions import (
    InsufficientPermissionsError,
    InvalidRangeError,
    PastDateError,
    ReservationConflictError,
    ResourceNotFoundError,
)
from carshare.app.domain.scheduling.booking_scheduler import BookingScheduler
from carshare.app.models.enums import ReservationStatus

FUTURE = date.today() + timedelta(days=30)


@pytest.fixture
async def fleet(make_user, make_vehicle):
    """Plain ids of two co-owners, an outsider and their shared vehicle."""
    alice = await make_user("alice")
    bob = await make_user("bob")
    carol = await make_user("carol")
    vehicle = await make_vehicle([alice, bob])
    return {"alice": alice.id, "bob": bob.id, "carol": carol.id, "vehicle": vehicle.id}


async def reserve(db, fleet, user="alice", d1=FUTURE, d2=None, t1=time(9, 0), t2=time(12, 0), **kwargs):
    return await BookingScheduler.request_reservation(
        db,
        vehicle_id=fleet["vehicle"],
        requester_id=fleet[user],
        date_start=d1,
        date_end=d2 or d1,
        time_start=t1,
        time_end=t2,
        motive="Groceries",
        **kwargs
    )


@pytest.mark.asyncio
async def test_admits_reservation_on_free_vehicle(db_session, fleet):
    reservation = await reserve(db_session, fleet)

    assert reservation.id is not None
    assert reservation.status == ReservationStatus.CONFIRMED
    assert reservation.created_by_id == fleet["alice"]
    assert reservation.vehicle_id == fleet["vehicle"]


@pytest.mark.asyncio
async def test_touching_windows_are_both_admitted(db_session, fleet):
    first = await reserve(db_session, fleet, t1=time(9, 0), t2=time(12, 0))
    second = await reserve(db_session, fleet, user="bob", t1=time(12, 0), t2=time(14, 0))

    assert first.id != second.id


@pytest.mark.asyncio
async def test_overlap_by_one_minute_is_rejected(db_session, fleet):
    first = await reserve(db_session, fleet, t1=time(9, 0), t2=time(12, 0))
    first_id = first.id

    with pytest.raises(ReservationConflictError) as exc_info:
        await reserve(db_session, fleet, user="bob", t1=time(11, 59), t2=time(13, 0))

    assert exc_info.value.status_code == 409
    assert exc_info.value.details["conflicting_reservation_id"] == first_id


@pytest.mark.asyncio
async def test_multi_day_range_conflicts_on_shared_day(db_session, fleet):
    await reserve(db_session, fleet, d1=FUTURE, d2=FUTURE + timedelta(days=3), t1=time(8, 0), t2=time(10, 0))

    with pytest.raises(ReservationConflictError):
        await reserve(db_session, fleet, user="bob", d1=FUTURE + timedelta(days=3), t1=time(9, 0), t2=time(9, 30))

    # Same days, different daily slot
    later = await reserve(db_session, fleet, user="bob", d1=FUTURE + timedelta(days=1), t1=time(10, 0), t2=time(11, 0))
    assert later.id is not None


@pytest.mark.asyncio
async def test_end_date_before_start_date(db_session, fleet):
    with pytest.raises(InvalidRangeError):
        await reserve(db_session, fleet, d1=FUTURE, d2=FUTURE - timedelta(days=1))


@pytest.mark.asyncio
@pytest.mark.parametrize("t1,t2", [(time(12, 0), time(12, 0)), (time(12, 0), time(11, 0))])
async def test_end_time_not_after_start_time(db_session, fleet, t1, t2):
    with pytest.raises(InvalidRangeError) as exc_info:
        await reserve(db_session, fleet, t1=t1, t2=t2)
    assert exc_info.value.error_code == "ERR_RESERVATION_RANGE"


@pytest.mark.asyncio
async def test_past_start_date_rejected(db_session, fleet):
    yesterday = date.today() - timedelta(days=1)
    with pytest.raises(PastDateError) as exc_info:
        await reserve(db_session, fleet, d1=yesterday, d2=date.today())
    assert exc_info.value.error_code == "ERR_RESERVATION_PAST_DATE"


@pytest.mark.asyncio
async def test_today_is_not_past(db_session, fleet):
    reservation = await reserve(db_session, fleet, d1=date.today())
    assert reservation.date_start == date.today()


@pytest.mark.asyncio
async def test_reference_date_is_injectable(db_session, fleet):
    with pytest.raises(PastDateError):
        await reserve(db_session, fleet, d1=FUTURE, today=FUTURE + timedelta(days=1))


@pytest.mark.asyncio
async def test_range_checked_before_past_date(db_session, fleet):
    """Checks short-circuit in order: a past, inverted range is an InvalidRange."""
    past = date.today() - timedelta(days=5)
    with pytest.raises(InvalidRangeError):
        await reserve(db_session, fleet, d1=past, d2=past - timedelta(days=1))


@pytest.mark.asyncio
async def test_outsider_is_forbidden(db_session, fleet):
    with pytest.raises(InsufficientPermissionsError):
        await reserve(db_session, fleet, user="carol")


@pytest.mark.asyncio
async def test_unknown_vehicle_is_forbidden(db_session, fleet):
    with pytest.raises(InsufficientPermissionsError):
        await BookingScheduler.request_reservation(
            db_session, vehicle_id=9999, requester_id=fleet["alice"],
            date_start=FUTURE, date_end=FUTURE, time_start=time(9, 0), time_end=time(10, 0),
            motive="Nope"
        )


@pytest.mark.asyncio
async def test_conflicts_are_per_vehicle(db_session, make_user, make_vehicle):
    dana = await make_user("dana")
    first_car = await make_vehicle([dana], plate_number="AAA-111")
    second_car = await make_vehicle([dana], plate_number="BBB-222")
    dana_id, first_id, second_id = dana.id, first_car.id, second_car.id

    for vehicle_id in (first_id, second_id):
        reservation = await BookingScheduler.request_reservation(
            db_session, vehicle_id=vehicle_id, requester_id=dana_id,
            date_start=FUTURE, date_end=FUTURE, time_start=time(9, 0), time_end=time(12, 0),
            motive="Errand"
        )
        assert reservation.vehicle_id == vehicle_id


@pytest.mark.asyncio
async def test_cancelled_reservation_frees_window(db_session, fleet):
    first = await reserve(db_session, fleet)
    cancelled = await BookingScheduler.cancel_reservation(db_session, first.id, fleet["alice"])
    assert cancelled.status == ReservationStatus.CANCELLED
    assert cancelled.cancelled_at is not None

    again = await reserve(db_session, fleet, user="bob")
    assert again.id != first.id


@pytest.mark.asyncio
async def test_only_creator_can_cancel(db_session, fleet):
    reservation = await reserve(db_session, fleet)
    with pytest.raises(InsufficientPermissionsError):
        await BookingScheduler.cancel_reservation(db_session, reservation.id, fleet["bob"])


@pytest.mark.asyncio
async def test_cancel_twice_is_not_found(db_session, fleet):
    reservation = await reserve(db_session, fleet)
    await BookingScheduler.cancel_reservation(db_session, reservation.id, fleet["alice"])
    with pytest.raises(ResourceNotFoundError):
        await BookingScheduler.cancel_reservation(db_session, reservation.id, fleet["alice"])


@pytest.mark.asyncio
async def test_update_does_not_conflict_with_itself(db_session, fleet):
    reservation = await reserve(db_session, fleet, t1=time(9, 0), t2=time(12, 0))

    updated = await BookingScheduler.update_reservation(
        db_session, reservation.id, fleet["alice"], {"time_end": time(13, 0), "motive": "Longer trip"}
    )

    assert updated.time_start == time(9, 0)
    assert updated.time_end == time(13, 0)
    assert updated.motive == "Longer trip"


@pytest.mark.asyncio
async def test_update_into_other_reservation_conflicts(db_session, fleet):
    first = await reserve(db_session, fleet, t1=time(9, 0), t2=time(12, 0))
    second = await reserve(db_session, fleet, user="bob", t1=time(14, 0), t2=time(16, 0))
    first_id, second_id = first.id, second.id

    with pytest.raises(ReservationConflictError) as exc_info:
        await BookingScheduler.update_reservation(
            db_session, second_id, fleet["bob"], {"time_start": time(11, 0)}
        )
    assert exc_info.value.details["conflicting_reservation_id"] == first_id


@pytest.mark.asyncio
async def test_update_with_inverted_merged_window(db_session, fleet):
    reservation = await reserve(db_session, fleet, t1=time(9, 0), t2=time(12, 0))
    with pytest.raises(InvalidRangeError):
        await BookingScheduler.update_reservation(
            db_session, reservation.id, fleet["alice"], {"time_start": time(12, 30)}
        )


@pytest.mark.asyncio
async def test_update_by_other_co_owner_is_forbidden(db_session, fleet):
    reservation = await reserve(db_session, fleet)
    with pytest.raises(InsufficientPermissionsError):
        await BookingScheduler.update_reservation(
            db_session, reservation.id, fleet["bob"], {"motive": "Mine now"}
        )


@pytest.mark.asyncio
async def test_update_missing_reservation(db_session, fleet):
    with pytest.raises(ResourceNotFoundError):
        await BookingScheduler.update_reservation(db_session, 4242, fleet["alice"], {"motive": "x"})


@pytest.mark.asyncio
async def test_update_can_clear_description(db_session, fleet):
    reservation = await reserve(db_session, fleet, description="Airport run")
    updated = await BookingScheduler.update_reservation(
        db_session, reservation.id, fleet["alice"], {"description": None, "motive": None}
    )
    assert updated.description is None
    assert updated.motive == "Groceries"


@pytest.mark.asyncio
async def test_list_reservations_latest_first(db_session, fleet):
    await reserve(db_session, fleet, d1=FUTURE)
    await reserve(db_session, fleet, d1=FUTURE + timedelta(days=2))
    await reserve(db_session, fleet, d1=FUTURE + timedelta(days=1))
    await reserve(db_session, fleet, user="bob", d1=FUTURE + timedelta(days=5))

    mine = await BookingScheduler.list_reservations(db_session, fleet["alice"])

    assert [r.date_start for r in mine] == [
        FUTURE + timedelta(days=2),
        FUTURE + timedelta(days=1),
        FUTURE,
    ]


@pytest.mark.asyncio
async def test_vehicle_calendar_is_chronological(db_session, fleet):
    await reserve(db_session, fleet, user="bob", d1=FUTURE + timedelta(days=1))
    await reserve(db_session, fleet, d1=FUTURE, t1=time(14, 0), t2=time(15, 0))
    await reserve(db_session, fleet, d1=FUTURE, t1=time(8, 0), t2=time(9, 0))

    calendar = await BookingScheduler.list_vehicle_reservations(db_session, fleet["vehicle"])
    assert [(r.date_start, r.time_start) for r in calendar] == [
        (FUTURE, time(8, 0)),
        (FUTURE, time(14, 0)),
        (FUTURE + timedelta(days=1), time(9, 0)),
    ]

    upcoming = await BookingScheduler.list_vehicle_reservations(
        db_session, fleet["vehicle"], from_date=FUTURE + timedelta(days=1)
    )
    assert len(upcoming) == 1
