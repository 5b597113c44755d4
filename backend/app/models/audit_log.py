"""
Audit Log Database Model.

Tracks every committed record mutation for traceability.
"""

from sqlalchemy import Column, Integer, String, DateTime, JSON
from sqlalchemy.sql import func
from backend.app.db.session import Base


class AuditLog(Base):
    """
    Audit log model for tracking record changes.
    
    Events logged:
    - RECORD_CREATED
    - RECORD_UPDATED (with the fields that changed and the new version)
    """
    __tablename__ = "audit_logs"
    
    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    
    # What was touched
    entity_type = Column(String(50), nullable=False, index=True)
    entity_id = Column(Integer, nullable=False, index=True)
    
    # What action was performed
    action = Column(String(100), nullable=False, index=True)
    
    # Version produced by the action
    version = Column(Integer, nullable=False)
    
    # Additional context (JSON for flexibility)
    meta_data = Column(JSON, nullable=True)
    
    # IP address of the request
    ip_address = Column(String(50), nullable=True)
    
    # Timestamp
    timestamp = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)
    
    def __repr__(self):
        return f"<AuditLog(id={self.id}, action='{self.action}', entity={self.entity_type}:{self.entity_id}, version={self.version})>"
