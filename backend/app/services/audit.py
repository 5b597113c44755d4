"""
Audit logging service for tracking record changes.

Audit rows are written in the caller's transaction so they commit
together with the change they describe.
"""

from typing import Optional, Dict, Any
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, desc
from backend.app.models.audit_log import AuditLog


# Audit event constants
class AuditAction:
    """Standardized audit action constants."""
    RECORD_CREATED = "RECORD_CREATED"
    RECORD_UPDATED = "RECORD_UPDATED"


async def record_event(
    db: AsyncSession,
    action: str,
    entity_type: str,
    entity_id: int,
    version: int,
    metadata: Optional[Dict[str, Any]] = None,
    ip_address: Optional[str] = None
) -> AuditLog:
    """
    Add an audit row to the current transaction.
    
    Args:
        db: Database session (commit is left to the caller)
        action: Action being performed (use AuditAction constants)
        entity_type: Entity name, e.g. "Driver"
        entity_id: ID of the record acted upon
        version: Record version produced by the action
        metadata: Additional context as JSON
        ip_address: IP address of the request
        
    Returns:
        Pending AuditLog instance
    """
    audit_log = AuditLog(
        entity_type=entity_type,
        entity_id=entity_id,
        action=action,
        version=version,
        meta_data=metadata,
        ip_address=ip_address
    )
    
    db.add(audit_log)
    await db.flush()
    
    return audit_log


async def get_audit_trail(
    db: AsyncSession,
    entity_type: str,
    entity_id: int,
    limit: int = 100
) -> list[AuditLog]:
    """
    Retrieve the change history of one record, most recent first.
    
    Args:
        db: Database session
        entity_type: Entity name
        entity_id: Record ID
        limit: Maximum number of records to return
        
    Returns:
        List of AuditLog instances
    """
    query = select(AuditLog).where(
        AuditLog.entity_type == entity_type,
        AuditLog.entity_id == entity_id
    ).order_by(desc(AuditLog.version), desc(AuditLog.id)).limit(limit)
    
    result = await db.execute(query)
    return list(result.scalars().all())
