"""
Driver API Endpoints.

Driver profiles are read with an ETag and updated conditionally with
If-Match, so an edit based on a stale profile is rejected with 412.
"""

from typing import Any, Dict, List, Optional
from fastapi import APIRouter, Body, Depends, Header, Path, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from backend.app.db.session import get_db
from backend.app.models.driver import Driver
from backend.app.models.enums import DriverStatus
from backend.app.schemas.driver import DriverCreate, DriverResponse, DriverListResponse
from backend.app.schemas.audit import AuditLogResponse
from backend.app.core.dependencies import get_driver_coordinator
from backend.app.core.preconditions import parse_if_match, set_version_headers
from backend.app.domain.records.coordinator import RecordUpdateCoordinator
from backend.app.domain.records.store import MAX_INTEGER
from backend.app.services.audit import get_audit_trail

router = APIRouter(prefix="/drivers", tags=["Drivers"])


@router.post("", response_model=DriverResponse, status_code=status.HTTP_201_CREATED)
async def create_driver(
    driver_data: DriverCreate,
    response: Response,
    coordinator: RecordUpdateCoordinator = Depends(get_driver_coordinator)
):
    """
    Create a new driver profile.

    The new profile starts at version 1.
    """
    snapshot = await coordinator.create_record(driver_data.model_dump())
    set_version_headers(response, snapshot)
    return DriverResponse.model_validate(snapshot.as_dict())


@router.get("", response_model=DriverListResponse)
async def list_drivers(
    page: int = Query(1, ge=1, description="Page number"),
    page_size: int = Query(50, ge=1, le=100, description="Items per page"),
    company_id: Optional[int] = Query(None, ge=1, le=MAX_INTEGER, description="Only drivers of this company"),
    driver_status: Optional[DriverStatus] = Query(None, alias="status", description="Only drivers in this status"),
    db: AsyncSession = Depends(get_db)
):
    """List drivers, optionally filtered by company and status."""
    filters = []
    if company_id is not None:
        filters.append(Driver.company_id == company_id)
    if driver_status is not None:
        filters.append(Driver.status == driver_status)

    total_result = await db.execute(select(func.count(Driver.id)).where(*filters))
    total = total_result.scalar()

    offset = (page - 1) * page_size
    query = select(Driver).where(*filters).order_by(Driver.id).offset(offset).limit(page_size)
    result = await db.execute(query)
    drivers = result.scalars().all()

    return DriverListResponse(
        drivers=[DriverResponse.model_validate(driver) for driver in drivers],
        total=total,
        page=page,
        page_size=page_size
    )


@router.get("/{driver_id}", response_model=DriverResponse)
async def get_driver(
    response: Response,
    driver_id: int = Path(..., description="Driver ID"),
    coordinator: RecordUpdateCoordinator = Depends(get_driver_coordinator)
):
    """
    Get a driver profile.

    The ETag header carries the version to send back in If-Match.
    """
    snapshot = await coordinator.load_record(driver_id)
    set_version_headers(response, snapshot)
    return DriverResponse.model_validate(snapshot.as_dict())


@router.api_route("/{driver_id}", methods=["PUT", "PATCH"], response_model=DriverResponse)
async def update_driver(
    response: Response,
    driver_id: int = Path(..., description="Driver ID"),
    changes: Dict[str, Any] = Body(..., description="Fields to change"),
    if_match: Optional[str] = Header(None, description="ETag of the profile the edit is based on"),
    coordinator: RecordUpdateCoordinator = Depends(get_driver_coordinator)
):
    """
    Update a driver profile if it has not changed since it was read.

    Returns 412 with the current profile when another user saved first,
    428 when If-Match is missing.
    """
    base_version = parse_if_match(if_match)
    snapshot = await coordinator.submit_update(driver_id, changes, base_version)
    set_version_headers(response, snapshot)
    return DriverResponse.model_validate(snapshot.as_dict())


@router.get("/{driver_id}/history", response_model=List[AuditLogResponse])
async def get_driver_history(
    driver_id: int = Path(..., description="Driver ID"),
    limit: int = Query(50, ge=1, le=200),
    coordinator: RecordUpdateCoordinator = Depends(get_driver_coordinator)
):
    """Change history of a driver profile, newest version first."""
    await coordinator.load_record(driver_id)
    entries = await get_audit_trail(coordinator.db, coordinator.entity.name, driver_id, limit=limit)
    return [AuditLogResponse.model_validate(entry) for entry in entries]
