"""
Trip database model.

A trip is a completed use of a vehicle logged by the co-owner who drove it.
Trips are immutable once recorded.
"""

from sqlalchemy import Column, Integer, String, Text, Float, ForeignKey, DateTime
from sqlalchemy.sql import func
from carshare.app.db.session import Base


class Trip(Base):
    """
    Trip model.
    
    distance_km feeds the usage ledger; a missing distance counts as zero.
    """
    __tablename__ = "trips"
    
    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    
    vehicle_id = Column(Integer, ForeignKey('vehicles.id', ondelete="CASCADE"), nullable=False, index=True)
    driver_id = Column(Integer, ForeignKey('users.id'), nullable=False, index=True)
    
    name = Column(String(150), nullable=False)
    description = Column(Text, nullable=True)
    
    # Time span
    started_at = Column(DateTime(timezone=True), nullable=False, index=True)
    ended_at = Column(DateTime(timezone=True), nullable=True)
    
    # Measures
    distance_km = Column(Float, nullable=True)
    fuel_consumed_liters = Column(Float, nullable=True)
    
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    
    def __repr__(self):
        return f"<Trip(id={self.id}, vehicle_id={self.vehicle_id}, driver_id={self.driver_id}, km={self.distance_km})>"
