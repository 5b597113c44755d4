"""
Vehicle API Endpoints.

Same conditional-update contract as drivers: read the ETag, send it
back in If-Match.
"""

from typing import Any, Dict, Optional
from fastapi import APIRouter, Body, Depends, Header, Path, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from backend.app.db.session import get_db
from backend.app.models.vehicle import Vehicle
from backend.app.models.enums import VehicleStatus
from backend.app.schemas.vehicle import VehicleCreate, VehicleResponse, VehicleListResponse
from backend.app.core.dependencies import get_vehicle_coordinator
from backend.app.core.preconditions import parse_if_match, set_version_headers
from backend.app.domain.records.coordinator import RecordUpdateCoordinator
from backend.app.domain.records.store import MAX_INTEGER

router = APIRouter(prefix="/vehicles", tags=["Vehicles"])


@router.post("", response_model=VehicleResponse, status_code=status.HTTP_201_CREATED)
async def create_vehicle(
    vehicle_data: VehicleCreate,
    response: Response,
    coordinator: RecordUpdateCoordinator = Depends(get_vehicle_coordinator)
):
    """Register a new vehicle. Registration numbers are unique."""
    snapshot = await coordinator.create_record(vehicle_data.model_dump())
    set_version_headers(response, snapshot)
    return VehicleResponse.model_validate(snapshot.as_dict())


@router.get("", response_model=VehicleListResponse)
async def list_vehicles(
    page: int = Query(1, ge=1, description="Page number"),
    page_size: int = Query(50, ge=1, le=100, description="Items per page"),
    company_id: Optional[int] = Query(None, ge=1, le=MAX_INTEGER, description="Only vehicles of this company"),
    vehicle_status: Optional[VehicleStatus] = Query(None, alias="status"),
    db: AsyncSession = Depends(get_db)
):
    filters = []
    if company_id is not None:
        filters.append(Vehicle.company_id == company_id)
    if vehicle_status is not None:
        filters.append(Vehicle.status == vehicle_status)

    total_result = await db.execute(select(func.count(Vehicle.id)).where(*filters))
    total = total_result.scalar()

    offset = (page - 1) * page_size
    query = select(Vehicle).where(*filters).order_by(Vehicle.id).offset(offset).limit(page_size)
    result = await db.execute(query)
    vehicles = result.scalars().all()

    return VehicleListResponse(
        vehicles=[VehicleResponse.model_validate(vehicle) for vehicle in vehicles],
        total=total,
        page=page,
        page_size=page_size
    )


@router.get("/{vehicle_id}", response_model=VehicleResponse)
async def get_vehicle(
    response: Response,
    vehicle_id: int = Path(..., description="Vehicle ID"),
    coordinator: RecordUpdateCoordinator = Depends(get_vehicle_coordinator)
):
    snapshot = await coordinator.load_record(vehicle_id)
    set_version_headers(response, snapshot)
    return VehicleResponse.model_validate(snapshot.as_dict())


@router.api_route("/{vehicle_id}", methods=["PUT", "PATCH"], response_model=VehicleResponse)
async def update_vehicle(
    response: Response,
    vehicle_id: int = Path(..., description="Vehicle ID"),
    changes: Dict[str, Any] = Body(..., description="Fields to change"),
    if_match: Optional[str] = Header(None),
    coordinator: RecordUpdateCoordinator = Depends(get_vehicle_coordinator)
):
    """Update a vehicle if it has not changed since it was read."""
    base_version = parse_if_match(if_match)
    snapshot = await coordinator.submit_update(vehicle_id, changes, base_version)
    set_version_headers(response, snapshot)
    return VehicleResponse.model_validate(snapshot.as_dict())
