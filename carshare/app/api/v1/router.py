"""
API v1 Router.

Aggregates all v1 API endpoints.
"""

from fastapi import APIRouter
from carshare.app.api.v1.endpoints import (
    auth, vehicles, reservations, trips, refuelings, settlement
)

router = APIRouter()

# Authentication endpoints
router.include_router(auth.router)

# Vehicles and co-owner membership
router.include_router(vehicles.router)

# Booking scheduler
router.include_router(reservations.router)

# Usage ledger sources
router.include_router(trips.router)
router.include_router(refuelings.router)

# Fair-share settlement and monthly statistics
router.include_router(settlement.router)
