"""
Vehicle Pydantic schemas.

Defines request and response models for vehicle management.
"""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional, List
from backend.app.models.enums import VehicleStatus


class VehicleCreate(BaseModel):
    """Schema for registering a new vehicle."""
    registration_number: str = Field(..., min_length=1, max_length=50, description="Unique registration number")
    company_id: Optional[int] = Field(None, gt=0, description="Owning company")
    make: Optional[str] = Field(None, max_length=100)
    model: Optional[str] = Field(None, max_length=100)
    year: Optional[int] = Field(None, ge=1900, le=2100)
    vehicle_type: Optional[str] = Field(None, max_length=100, description="Vehicle type (e.g., Truck, Van)")
    fuel_type: Optional[str] = Field(None, max_length=50, description="Fuel type (e.g., Diesel, Electric)")
    status: VehicleStatus = Field(VehicleStatus.ACTIVE)


class VehicleUpdate(BaseModel):
    """Schema for a partial vehicle update."""
    registration_number: Optional[str] = Field(None, min_length=1, max_length=50)
    company_id: Optional[int] = Field(None, gt=0)
    make: Optional[str] = Field(None, max_length=100)
    model: Optional[str] = Field(None, max_length=100)
    year: Optional[int] = Field(None, ge=1900, le=2100)
    vehicle_type: Optional[str] = Field(None, max_length=100)
    fuel_type: Optional[str] = Field(None, max_length=50)
    status: Optional[VehicleStatus] = None


class VehicleResponse(BaseModel):
    """Schema for vehicle response."""
    id: int
    company_id: Optional[int]
    registration_number: str
    make: Optional[str]
    model: Optional[str]
    year: Optional[int]
    vehicle_type: Optional[str]
    fuel_type: Optional[str]
    status: VehicleStatus
    version: int
    created_at: datetime
    updated_at: datetime
    
    class Config:
        from_attributes = True


class VehicleListResponse(BaseModel):
    """Schema for paginated vehicle list."""
    vehicles: List[VehicleResponse]
    total: int
    page: int
    page_size: int
