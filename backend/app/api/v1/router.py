"""
API v1 Router.

Aggregates all v1 API endpoints.
"""

from fastapi import APIRouter
from backend.app.api.v1.endpoints import companies, vehicles, drivers

router = APIRouter()

# Fleet records
router.include_router(companies.router)
router.include_router(vehicles.router)
router.include_router(drivers.router)
