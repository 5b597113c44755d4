"""
Vehicle database model.

Vehicles belong to a company and can be assigned to a driver.
"""

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Enum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from backend.app.db.session import Base
from backend.app.models.enums import VehicleStatus


class Vehicle(Base):
    """
    Vehicle model.
    
    Identified by a unique registration number.
    """
    __tablename__ = "vehicles"
    
    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    
    # Ownership
    company_id = Column(Integer, ForeignKey('companies.id'), nullable=True, index=True)
    
    # Vehicle identification
    registration_number = Column(String(50), unique=True, nullable=False, index=True)
    make = Column(String(100), nullable=True)
    model = Column(String(100), nullable=True)
    year = Column(Integer, nullable=True)
    vehicle_type = Column(String(100), nullable=True)  # e.g., "Truck", "Van", "Reefer"
    fuel_type = Column(String(50), nullable=True)  # e.g., "Diesel", "Electric"
    
    # Status
    status = Column(Enum(VehicleStatus), default=VehicleStatus.ACTIVE, nullable=False, index=True)
    
    version = Column(Integer, nullable=False, default=1)
    
    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
    
    company = relationship("Company", back_populates="vehicles")
    
    def __repr__(self):
        return f"<Vehicle(id={self.id}, registration='{self.registration_number}', company_id={self.company_id})>"
