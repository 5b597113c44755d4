"""
Company API Endpoints.
"""

from typing import Any, Dict, Optional
from fastapi import APIRouter, Body, Depends, Header, Path, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from backend.app.db.session import get_db
from backend.app.models.company import Company
from backend.app.schemas.company import CompanyCreate, CompanyResponse, CompanyListResponse
from backend.app.core.dependencies import get_company_coordinator
from backend.app.core.preconditions import parse_if_match, set_version_headers
from backend.app.domain.records.coordinator import RecordUpdateCoordinator

router = APIRouter(prefix="/companies", tags=["Companies"])


@router.post("", response_model=CompanyResponse, status_code=status.HTTP_201_CREATED)
async def create_company(
    company_data: CompanyCreate,
    response: Response,
    coordinator: RecordUpdateCoordinator = Depends(get_company_coordinator)
):
    snapshot = await coordinator.create_record(company_data.model_dump())
    set_version_headers(response, snapshot)
    return CompanyResponse.model_validate(snapshot.as_dict())


@router.get("", response_model=CompanyListResponse)
async def list_companies(
    page: int = Query(1, ge=1, description="Page number"),
    page_size: int = Query(50, ge=1, le=100, description="Items per page"),
    db: AsyncSession = Depends(get_db)
):
    total_result = await db.execute(select(func.count(Company.id)))
    total = total_result.scalar()

    offset = (page - 1) * page_size
    result = await db.execute(
        select(Company).order_by(Company.name, Company.id).offset(offset).limit(page_size)
    )
    companies = result.scalars().all()

    return CompanyListResponse(
        companies=[CompanyResponse.model_validate(company) for company in companies],
        total=total,
        page=page,
        page_size=page_size
    )


@router.get("/{company_id}", response_model=CompanyResponse)
async def get_company(
    response: Response,
    company_id: int = Path(..., description="Company ID"),
    coordinator: RecordUpdateCoordinator = Depends(get_company_coordinator)
):
    snapshot = await coordinator.load_record(company_id)
    set_version_headers(response, snapshot)
    return CompanyResponse.model_validate(snapshot.as_dict())


@router.api_route("/{company_id}", methods=["PUT", "PATCH"], response_model=CompanyResponse)
async def update_company(
    response: Response,
    company_id: int = Path(..., description="Company ID"),
    changes: Dict[str, Any] = Body(..., description="Fields to change"),
    if_match: Optional[str] = Header(None),
    coordinator: RecordUpdateCoordinator = Depends(get_company_coordinator)
):
    """Update company details if they have not changed since they were read."""
    base_version = parse_if_match(if_match)
    snapshot = await coordinator.submit_update(company_id, changes, base_version)
    set_version_headers(response, snapshot)
    return CompanyResponse.model_validate(snapshot.as_dict())
