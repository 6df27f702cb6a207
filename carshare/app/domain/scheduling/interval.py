"""
Booking window model.

A booking window is a time-of-day range ``[time_start, time_end)`` repeated
on every calendar day of ``[date_start, date_end]``. Date ranges are
inclusive, time ranges are half-open, so a window ending at 12:00 and one
starting at 12:00 on the same day do not overlap.
"""

from dataclasses import dataclass
from datetime import date, time


@dataclass(frozen=True)
class BookingWindow:
    date_start: date
    date_end: date
    time_start: time
    time_end: time

    @classmethod
    def from_reservation(cls, reservation) -> "BookingWindow":
        """Build the window occupied by a reservation row."""
        return cls(
            date_start=reservation.date_start,
            date_end=reservation.date_end,
            time_start=reservation.time_start,
            time_end=reservation.time_end,
        )

    def dates_intersect(self, other: "BookingWindow") -> bool:
        return self.date_start <= other.date_end and other.date_start <= self.date_end

    def times_intersect(self, other: "BookingWindow") -> bool:
        return self.time_start < other.time_end and other.time_start < self.time_end

    def overlaps(self, other: "BookingWindow") -> bool:
        """Return True when both windows claim at least one common instant."""
        return self.dates_intersect(other) and self.times_intersect(other)


def overlaps(a: BookingWindow, b: BookingWindow) -> bool:
    return a.overlaps(b)
