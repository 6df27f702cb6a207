"""
Vehicle database model.

A vehicle is registered by one user and shared by its co-owners.
"""

from sqlalchemy import Column, Integer, String, Float, Boolean, DateTime, Enum, ForeignKey
from sqlalchemy.sql import func
from carshare.app.db.session import Base
from carshare.app.models.enums import FuelType


class Vehicle(Base):
    """
    Vehicle model.
    
    The row also serves as the per-vehicle lock target for reservation
    admission (SELECT ... FOR UPDATE).
    """
    __tablename__ = "vehicles"
    
    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    
    # Registered by
    created_by_id = Column(Integer, ForeignKey('users.id'), nullable=False, index=True)
    
    # Identification
    name = Column(String(100), nullable=False)
    plate_number = Column(String(20), unique=True, nullable=False, index=True)
    model = Column(String(100), nullable=False)
    manufacturer = Column(String(100), nullable=False)
    
    # Fuel details
    fuel_type = Column(Enum(FuelType), nullable=False)
    average_consumption = Column(Float, nullable=True)  # L/100 km
    
    # Status
    is_active = Column(Boolean, default=True, nullable=False, index=True)
    
    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
    
    def __repr__(self):
        return f"<Vehicle(id={self.id}, plate='{self.plate_number}', name='{self.name}')>"
