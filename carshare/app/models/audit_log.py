"""
Audit Log Database Model.

Tracks security events and reservation, trip and refueling activity.
"""

from sqlalchemy import Column, Integer, String, DateTime, JSON
from sqlalchemy.sql import func
from carshare.app.db.session import Base


class AuditLog(Base):
    """
    Audit log model.

    Events logged:
    - USER_CREATED / LOGIN_SUCCESS / LOGIN_FAILED / LOGOUT
    - VEHICLE_CREATED / CO_OWNER_ADDED
    - RESERVATION_CREATED / RESERVATION_UPDATED / RESERVATION_CANCELLED
    - TRIP_LOGGED / REFUELING_RECORDED
    """
    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    # Who performed the action (None for system actions)
    actor_id = Column(Integer, index=True, nullable=True)
    actor_username = Column(String(100), nullable=True)

    # What action was performed
    action = Column(String(100), nullable=False, index=True)

    # Vehicle the action relates to, if any
    vehicle_id = Column(Integer, index=True, nullable=True)

    # Additional context (JSON for flexibility)
    meta_data = Column(JSON, nullable=True)

    # IP address for login tracking
    ip_address = Column(String(50), nullable=True)

    # Timestamp
    timestamp = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)

    def __repr__(self):
        return f"<AuditLog(id={self.id}, action='{self.action}', actor={self.actor_username}, vehicle={self.vehicle_id})>"
