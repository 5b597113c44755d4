"""
Company Pydantic schemas.

Defines request and response models for company management.
"""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional, List


class CompanyCreate(BaseModel):
    """Schema for creating a new company."""
    name: str = Field(..., min_length=1, max_length=200, description="Company name")
    address: Optional[str] = Field(None, max_length=500)
    contact: Optional[str] = Field(None, max_length=200, description="Contact person, phone or email")


class CompanyUpdate(BaseModel):
    """Schema for a partial company update."""
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    address: Optional[str] = Field(None, max_length=500)
    contact: Optional[str] = Field(None, max_length=200)


class CompanyResponse(BaseModel):
    """Schema for company response."""
    id: int
    name: str
    address: Optional[str]
    contact: Optional[str]
    version: int
    created_at: datetime
    updated_at: datetime
    
    class Config:
        from_attributes = True


class CompanyListResponse(BaseModel):
    """Schema for paginated company list."""
    companies: List[CompanyResponse]
    total: int
    page: int
    page_size: int
