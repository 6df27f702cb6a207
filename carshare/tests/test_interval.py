"""
Unit tests for the booking window model.

Dates are inclusive, daily times are half-open.
"""

from datetime import date, time

from carshare.app.domain.scheduling.interval import BookingWindow, overlaps


def window(d1, d2, t1, t2):
    return BookingWindow(date(2030, 5, d1), date(2030, 5, d2), time(*t1), time(*t2))


def test_same_day_overlapping_times():
    a = window(10, 10, (9, 0), (12, 0))
    b = window(10, 10, (11, 59), (13, 0))
    assert overlaps(a, b)
    assert overlaps(b, a)


def test_touching_times_do_not_overlap():
    """A reservation ending at 12:00 and one starting at 12:00 can coexist."""
    a = window(10, 10, (9, 0), (12, 0))
    b = window(10, 10, (12, 0), (14, 0))
    assert not overlaps(a, b)
    assert not overlaps(b, a)


def test_shared_end_date_counts_as_intersection():
    a = window(1, 10, (9, 0), (12, 0))
    b = window(10, 15, (10, 0), (11, 0))
    assert a.dates_intersect(b)
    assert overlaps(a, b)


def test_disjoint_dates_never_overlap():
    a = window(1, 5, (0, 0), (23, 59))
    b = window(6, 8, (0, 0), (23, 59))
    assert not a.dates_intersect(b)
    assert not overlaps(a, b)


def test_intersecting_dates_with_disjoint_times():
    """Morning and afternoon slots on the same days share the vehicle."""
    morning = window(1, 31, (8, 0), (12, 0))
    afternoon = window(15, 20, (13, 0), (18, 0))
    assert morning.dates_intersect(afternoon)
    assert not morning.times_intersect(afternoon)
    assert not overlaps(morning, afternoon)


def test_contained_window_overlaps():
    outer = window(1, 31, (6, 0), (22, 0))
    inner = window(10, 11, (10, 0), (10, 30))
    assert overlaps(outer, inner)
    assert overlaps(inner, outer)


def test_from_reservation_copies_bounds():
    class Row:
        date_start = date(2030, 1, 1)
        date_end = date(2030, 1, 2)
        time_start = time(8, 0)
        time_end = time(9, 0)

    w = BookingWindow.from_reservation(Row())
    assert w == BookingWindow(date(2030, 1, 1), date(2030, 1, 2), time(8, 0), time(9, 0))
