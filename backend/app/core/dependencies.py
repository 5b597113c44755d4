"""
Record coordinator dependencies for FastAPI.

Each request gets a coordinator bound to its own database session.
"""

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession
from backend.app.db.session import get_db
from backend.app.domain.records.coordinator import RecordUpdateCoordinator
from backend.app.domain.records.entities import EntityDefinition, COMPANY, VEHICLE, DRIVER


def coordinator_for(entity: EntityDefinition):
    """
    Dependency factory building a RecordUpdateCoordinator for one entity.

    Usage:
        @router.get("/drivers/{driver_id}")
        async def get_driver(coordinator = Depends(coordinator_for(DRIVER))):
            ...
    """
    async def build(
        request: Request,
        db: AsyncSession = Depends(get_db)
    ) -> RecordUpdateCoordinator:
        ip_address = request.client.host if request.client else None
        return RecordUpdateCoordinator(db, entity, ip_address=ip_address)

    return build


get_company_coordinator = coordinator_for(COMPANY)
get_vehicle_coordinator = coordinator_for(VEHICLE)
get_driver_coordinator = coordinator_for(DRIVER)
