"""
Driver database model.

Holds the driver profile edited from the fleet dashboard.
"""

from sqlalchemy import Column, Integer, String, Text, Date, DateTime, ForeignKey, Enum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from backend.app.db.session import Base
from backend.app.models.enums import DriverStatus, LicenseType


class Driver(Base):
    """
    Driver model.
    
    A driver belongs to a company and may currently be assigned a vehicle.
    Every successful profile update bumps ``version``; conditional updates
    compare against it to reject stale writes.
    """
    __tablename__ = "drivers"
    
    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    
    company_id = Column(Integer, ForeignKey('companies.id'), nullable=True, index=True)
    
    # Personal details
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False, index=True)
    phone = Column(String(50), nullable=False)
    
    # License
    license_number = Column(String(100), nullable=False, index=True)
    license_type = Column(Enum(LicenseType), nullable=False)
    license_expiry = Column(Date, nullable=False)
    
    status = Column(Enum(DriverStatus), default=DriverStatus.OFF_DUTY, nullable=False, index=True)
    
    # Address
    address = Column(String(500), nullable=True)
    city = Column(String(100), nullable=True)
    state = Column(String(100), nullable=True)
    zip_code = Column(String(20), nullable=True)
    country = Column(String(100), nullable=True)
    
    notes = Column(Text, nullable=True)
    
    # Assignment
    current_vehicle_id = Column(Integer, ForeignKey('vehicles.id'), nullable=True)
    
    version = Column(Integer, nullable=False, default=1)
    
    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
    
    company = relationship("Company", back_populates="drivers")
    current_vehicle = relationship("Vehicle")
    
    def __repr__(self):
        return f"<Driver(id={self.id}, name='{self.first_name} {self.last_name}', version={self.version})>"
