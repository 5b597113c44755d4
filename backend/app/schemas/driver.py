"""
Driver Pydantic schemas.

Required fields mirror the dashboard's driver form: name, contact,
license details and duty status.
"""

from pydantic import BaseModel, EmailStr, Field
from datetime import date, datetime
from typing import Optional, List
from backend.app.models.enums import DriverStatus, LicenseType


class DriverCreate(BaseModel):
    """Schema for creating a new driver profile."""
    first_name: str = Field(..., min_length=1, max_length=100, description="First name is required")
    last_name: str = Field(..., min_length=1, max_length=100, description="Last name is required")
    email: EmailStr = Field(..., description="Driver email address")
    phone: str = Field(..., min_length=1, max_length=50, description="Phone number is required")
    license_number: str = Field(..., min_length=1, max_length=100)
    license_type: LicenseType
    license_expiry: date
    status: DriverStatus
    company_id: Optional[int] = Field(None, gt=0)
    address: Optional[str] = Field(None, max_length=500)
    city: Optional[str] = Field(None, max_length=100)
    state: Optional[str] = Field(None, max_length=100)
    zip_code: Optional[str] = Field(None, max_length=20)
    country: Optional[str] = Field(None, max_length=100)
    notes: Optional[str] = None
    current_vehicle_id: Optional[int] = Field(None, gt=0)


class DriverUpdate(BaseModel):
    """
    Schema for a partial driver update.
    
    Only the fields present in the request are applied.
    """
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, min_length=1, max_length=50)
    license_number: Optional[str] = Field(None, min_length=1, max_length=100)
    license_type: Optional[LicenseType] = None
    license_expiry: Optional[date] = None
    status: Optional[DriverStatus] = None
    company_id: Optional[int] = Field(None, gt=0)
    address: Optional[str] = Field(None, max_length=500)
    city: Optional[str] = Field(None, max_length=100)
    state: Optional[str] = Field(None, max_length=100)
    zip_code: Optional[str] = Field(None, max_length=20)
    country: Optional[str] = Field(None, max_length=100)
    notes: Optional[str] = None
    current_vehicle_id: Optional[int] = Field(None, gt=0)


class DriverResponse(BaseModel):
    """Schema for driver response."""
    id: int
    company_id: Optional[int]
    first_name: str
    last_name: str
    email: str
    phone: str
    license_number: str
    license_type: LicenseType
    license_expiry: date
    status: DriverStatus
    address: Optional[str]
    city: Optional[str]
    state: Optional[str]
    zip_code: Optional[str]
    country: Optional[str]
    notes: Optional[str]
    current_vehicle_id: Optional[int]
    version: int
    created_at: datetime
    updated_at: datetime
    
    class Config:
        from_attributes = True


class DriverListResponse(BaseModel):
    """Schema for paginated driver list."""
    drivers: List[DriverResponse]
    total: int
    page: int
    page_size: int
