"""
Record Update Coordinator (Domain Logic).

Optimistic concurrency control for record updates:

1. Caller loads a record and keeps its version
2. Caller submits field changes together with that base version
3. If the stored version moved past the base version, the update is
   rejected with a conflict carrying the current record
4. Otherwise the changes are applied and the version is bumped

The version check and the write happen in a single compare-and-swap
statement. The coordinator keeps no state between calls and never
retries; a conflicted caller must reload before resubmitting.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

from pydantic import ValidationError
from sqlalchemy.exc import DataError, IntegrityError, InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core.config import settings
from backend.app.core.exceptions import (
    InvalidFieldError,
    ResourceNotFoundError,
    StoreUnavailableError,
    VersionConflictError,
    jsonable_errors,
)
from backend.app.core.reliability import CircuitBreaker, CircuitOpenError
from backend.app.domain.records.entities import EntityDefinition
from backend.app.domain.records.store import RecordSnapshot, RecordStore, SQLAlchemyRecordStore
from backend.app.services.audit import AuditAction, record_event

logger = logging.getLogger("fleet.records")

# Errors that mean the store itself is unhealthy
STORE_FAILURES = (OperationalError, InterfaceError, asyncio.TimeoutError, OSError)

# Shared by every coordinator so repeated store failures fail fast
store_circuit_breaker = CircuitBreaker(
    failure_threshold=settings.store_failure_threshold,
    reset_timeout=settings.store_reset_timeout_seconds,
    failure_exceptions=STORE_FAILURES,
)


@dataclass(frozen=True)
class UpdateRequest:
    """A submitted update. Immutable once built."""
    record_id: int
    field_changes: Mapping[str, Any] = field(default_factory=dict)
    base_version: int = 0

    def __post_init__(self):
        object.__setattr__(self, "field_changes", MappingProxyType(dict(self.field_changes)))


class RecordUpdateCoordinator:
    """
    Loads, creates and conditionally updates records of one entity.

    Args:
        db: Database session for this request
        entity: Which entity the coordinator manages
        store: Record store (defaults to a SQLAlchemy store on ``db``)
        breaker: Circuit breaker guarding store access
        timeout: Seconds allowed for each store call
        ip_address: Client address recorded in the audit trail
    """

    def __init__(
        self,
        db: AsyncSession,
        entity: EntityDefinition,
        store: Optional[RecordStore] = None,
        breaker: Optional[CircuitBreaker] = None,
        timeout: Optional[float] = None,
        ip_address: Optional[str] = None,
    ):
        self.db = db
        self.entity = entity
        self.store = store or SQLAlchemyRecordStore(db, entity.model)
        self.breaker = breaker or store_circuit_breaker
        self.timeout = timeout if timeout is not None else settings.store_timeout_seconds
        self.ip_address = ip_address

    async def load_record(self, record_id: int) -> RecordSnapshot:
        """
        Return the current record and its version.

        Raises:
            ResourceNotFoundError: No record with this ID
            StoreUnavailableError: Store unreachable or timed out
        """
        snapshot = await self._call_store(self.store.get, record_id)
        if snapshot is None:
            raise ResourceNotFoundError(self.entity.name, record_id)
        return snapshot

    async def submit(self, request: UpdateRequest) -> RecordSnapshot:
        return await self.submit_update(request.record_id, request.field_changes, request.base_version)

    async def submit_update(
        self,
        record_id: int,
        field_changes: Mapping[str, Any],
        base_version: int
    ) -> RecordSnapshot:
        """
        Apply field_changes if nobody else has written since base_version.

        Equal versions proceed; a stored version newer than base_version
        is a conflict. Exactly one row is written on success and nothing
        on any failure.

        Returns:
            Snapshot of the updated record with its new version

        Raises:
            ResourceNotFoundError: No record with this ID, whatever the changes
            InvalidFieldError: Empty update, unknown field or invalid value
            VersionConflictError: Stored version is newer than base_version
            StoreUnavailableError: Store unreachable or timed out
        """
        try:
            changes = self.validate_changes(field_changes)
        except InvalidFieldError:
            # A missing record is reported ahead of bad changes
            if await self._call_store(self.store.get, record_id) is None:
                raise ResourceNotFoundError(self.entity.name, record_id)
            raise

        updated = await self._call_store(self.store.compare_and_swap, record_id, base_version, changes)

        if updated is None:
            current = await self._call_store(self.store.get, record_id)
            await self.db.rollback()
            if current is None:
                raise ResourceNotFoundError(self.entity.name, record_id)
            logger.warning(
                "Update conflict on %s %s: base version %s, stored version %s",
                self.entity.name, record_id, base_version, current.version
            )
            raise VersionConflictError(self.entity.name, record_id, current.as_dict(), current.version)

        await self._call_store(
            record_event,
            self.db,
            action=AuditAction.RECORD_UPDATED,
            entity_type=self.entity.name,
            entity_id=record_id,
            version=updated.version,
            metadata={"updated_fields": sorted(changes), "base_version": base_version},
            ip_address=self.ip_address
        )
        await self._commit()

        logger.info(
            "Updated %s %s to version %s (%s)",
            self.entity.name, record_id, updated.version, ", ".join(sorted(changes))
        )
        return updated

    async def create_record(self, fields: Mapping[str, Any]) -> RecordSnapshot:
        """
        Insert a new record at version 1.

        Fields are expected to be validated by the entity's create schema.
        """
        created = await self._call_store(self.store.insert, dict(fields))

        await self._call_store(
            record_event,
            self.db,
            action=AuditAction.RECORD_CREATED,
            entity_type=self.entity.name,
            entity_id=created.id,
            version=created.version,
            ip_address=self.ip_address
        )
        await self._commit()

        logger.info("Created %s %s", self.entity.name, created.id)
        return created

    def validate_changes(self, field_changes: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Check names and values of requested changes.

        Returns:
            Parsed values keyed by field name, limited to the requested fields
        """
        if not isinstance(field_changes, Mapping):
            raise InvalidFieldError("Field changes must be an object of field names to values")
        if not field_changes:
            raise InvalidFieldError("No fields to update")

        unknown = sorted(set(field_changes) - self.entity.writable_fields)
        if unknown:
            raise InvalidFieldError(
                f"Unknown or read-only field(s) for {self.entity.name}: {', '.join(unknown)}",
                fields=unknown
            )

        cleared = sorted(
            name for name in self.entity.required_fields
            if name in field_changes and field_changes[name] is None
        )
        if cleared:
            raise InvalidFieldError(
                f"Required field(s) cannot be cleared: {', '.join(cleared)}",
                fields=cleared
            )

        try:
            parsed = self.entity.update_schema.model_validate(dict(field_changes))
        except ValidationError as exc:
            errors = exc.errors()
            fields = sorted({str(err["loc"][0]) for err in errors if err.get("loc")})
            raise InvalidFieldError(
                f"Invalid value(s) for {self.entity.name}: {', '.join(fields)}",
                fields=fields,
                errors=jsonable_errors(errors)
            ) from exc

        return parsed.model_dump(include=set(field_changes))

    async def _call_store(self, func, *args, **kwargs):
        """Run one store call under the timeout and the circuit breaker."""
        return await self._guarded(self._bounded, func, *args, **kwargs)

    async def _commit(self):
        """
        Commit under the circuit breaker but without the timeout.

        A commit cut short by a timeout may still have been applied, and
        the caller would wrongly be told the update failed.
        """
        await self._guarded(self.db.commit)

    async def _guarded(self, func, *args, **kwargs):
        try:
            return await self.breaker.call(func, *args, **kwargs)
        except CircuitOpenError as exc:
            raise StoreUnavailableError("Record store is unavailable, try again later") from exc
        except STORE_FAILURES as exc:
            logger.error("Record store call failed for %s: %s", self.entity.name, exc)
            raise StoreUnavailableError() from exc
        except IntegrityError as exc:
            await self.db.rollback()
            raise InvalidFieldError(
                f"Change violates a {self.entity.name} constraint (duplicate or unknown reference)",
                errors=[{"msg": str(exc.orig)}]
            ) from exc
        except (DataError, OverflowError) as exc:
            # Value the column type cannot hold
            await self.db.rollback()
            raise InvalidFieldError(
                f"Value out of range for {self.entity.name}",
                errors=[{"msg": str(exc)}]
            ) from exc

    async def _bounded(self, func, *args, **kwargs):
        return await asyncio.wait_for(func(*args, **kwargs), timeout=self.timeout)
