"""
Audit trail Pydantic schemas.
"""

from pydantic import BaseModel
from datetime import datetime
from typing import Optional, Dict, Any


class AuditLogResponse(BaseModel):
    """One entry in a record's change history."""
    id: int
    entity_type: str
    entity_id: int
    action: str
    version: int
    meta_data: Optional[Dict[str, Any]]
    ip_address: Optional[str]
    timestamp: datetime
    
    class Config:
        from_attributes = True
