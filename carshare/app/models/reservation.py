"""
Reservation database model.

A reservation claims exclusive use of a vehicle for a time-of-day window
repeated over every calendar day of a date range.
"""

from sqlalchemy import Column, Integer, String, Text, Date, Time, DateTime, Enum, ForeignKey, Index
from sqlalchemy.sql import func
from carshare.app.db.session import Base
from carshare.app.models.enums import ReservationStatus


class Reservation(Base):
    """
    Reservation model.
    
    Only the creator may update or cancel it. Cancelled rows are kept for
    auditing and never participate in overlap checks.
    """
    __tablename__ = "reservations"
    
    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    
    # References
    vehicle_id = Column(Integer, ForeignKey('vehicles.id', ondelete="CASCADE"), nullable=False, index=True)
    created_by_id = Column(Integer, ForeignKey('users.id', ondelete="CASCADE"), nullable=False, index=True)
    
    # Date range (inclusive calendar days)
    date_start = Column(Date, nullable=False)
    date_end = Column(Date, nullable=False)
    
    # Time-of-day window applied on each day: [time_start, time_end)
    time_start = Column(Time, nullable=False)
    time_end = Column(Time, nullable=False)
    
    motive = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    
    status = Column(Enum(ReservationStatus), default=ReservationStatus.CONFIRMED, nullable=False, index=True)
    cancelled_at = Column(DateTime(timezone=True), nullable=True)
    
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
    
    __table_args__ = (
        Index('ix_reservations_vehicle_dates', 'vehicle_id', 'date_start', 'date_end'),
    )
    
    def __repr__(self):
        return (
            f"<Reservation(id={self.id}, vehicle_id={self.vehicle_id}, "
            f"{self.date_start}..{self.date_end} {self.time_start}-{self.time_end}, "
            f"status='{self.status.value}')>"
        )
