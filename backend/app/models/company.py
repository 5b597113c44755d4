"""
Company database model.

A company owns the vehicles and drivers tracked by the dashboard.
"""

from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from backend.app.db.session import Base


class Company(Base):
    """
    Company model.
    
    One company has many vehicles and many drivers.
    """
    __tablename__ = "companies"
    
    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    
    name = Column(String(200), nullable=False, index=True)
    address = Column(String(500), nullable=True)
    contact = Column(String(200), nullable=True)
    
    # Optimistic concurrency marker, bumped on every successful update
    version = Column(Integer, nullable=False, default=1)
    
    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
    
    vehicles = relationship("Vehicle", back_populates="company")
    drivers = relationship("Driver", back_populates="company")
    
    def __repr__(self):
        return f"<Company(id={self.id}, name='{self.name}', version={self.version})>"
