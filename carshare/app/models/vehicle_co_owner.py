"""
Vehicle co-ownership membership model.

One row per (vehicle, user) pair. Reservation, trip and refueling
operations trust this relation to decide who may act on a vehicle.
"""

from sqlalchemy import Column, Integer, ForeignKey, DateTime, UniqueConstraint
from sqlalchemy.sql import func
from carshare.app.db.session import Base


class VehicleCoOwner(Base):
    """Membership of a user in the co-owner group of a vehicle."""
    __tablename__ = "vehicle_co_owners"
    
    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    vehicle_id = Column(Integer, ForeignKey('vehicles.id', ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey('users.id', ondelete="CASCADE"), nullable=False, index=True)
    added_by_id = Column(Integer, ForeignKey('users.id'), nullable=True)
    
    joined_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    
    __table_args__ = (
        UniqueConstraint('vehicle_id', 'user_id', name='uq_vehicle_co_owner'),
    )
    
    def __repr__(self):
        return f"<VehicleCoOwner(vehicle_id={self.vehicle_id}, user_id={self.user_id})>"
