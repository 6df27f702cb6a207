"""
Refueling database model.

Immutable record of a fuel purchase paid by one co-owner.
"""

from sqlalchemy import Column, Integer, Float, Date, ForeignKey, DateTime
from sqlalchemy.sql import func
from carshare.app.db.session import Base


class Refueling(Base):
    """
    Refueling model.
    
    total_price is the amount actually paid. It is recorded as reported and
    is not required to equal volume_liters * unit_price.
    """
    __tablename__ = "refuelings"
    
    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    
    vehicle_id = Column(Integer, ForeignKey('vehicles.id', ondelete="CASCADE"), nullable=False, index=True)
    paid_by_id = Column(Integer, ForeignKey('users.id'), nullable=False, index=True)
    
    refueled_on = Column(Date, nullable=False, index=True)
    volume_liters = Column(Float, nullable=False)
    unit_price = Column(Float, nullable=False)
    total_price = Column(Float, nullable=False)
    
    # Timestamps (Immutable - no updated_at)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    
    def __repr__(self):
        return f"<Refueling(id={self.id}, vehicle_id={self.vehicle_id}, paid_by={self.paid_by_id}, total={self.total_price})>"
