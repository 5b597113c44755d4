"""
Record Store.

Versioned access to a single entity table. The store never commits;
the caller owns the transaction.
"""

from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Protocol

from sqlalchemy import insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession


# Largest value an INTEGER id or version column can hold
MAX_INTEGER = 2**31 - 1

# Columns managed by the store, never part of a record's field mapping
META_COLUMNS = frozenset({"id", "version", "created_at", "updated_at"})


@dataclass(frozen=True)
class RecordSnapshot:
    """Read-only view of a stored record at one version."""
    id: int
    version: int
    fields: Mapping[str, Any] = field(default_factory=dict)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        object.__setattr__(self, "fields", MappingProxyType(dict(self.fields)))

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "RecordSnapshot":
        return cls(
            id=row["id"],
            version=row["version"],
            fields={key: value for key, value in row.items() if key not in META_COLUMNS},
            created_at=row.get("created_at"),
            updated_at=row.get("updated_at"),
        )

    def as_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            **self.fields,
            "version": self.version,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


class RecordStore(Protocol):
    """Interface the update coordinator needs from persistence."""

    async def get(self, record_id: int) -> Optional[RecordSnapshot]:
        ...

    async def compare_and_swap(
        self, record_id: int, expected_version: int, new_fields: Mapping[str, Any]
    ) -> Optional[RecordSnapshot]:
        ...

    async def insert(self, fields: Mapping[str, Any]) -> RecordSnapshot:
        ...


class SQLAlchemyRecordStore:
    """
    RecordStore over one mapped table.

    Reads go through Core statements so results never come from a stale
    identity map.
    """

    def __init__(self, db: AsyncSession, model):
        self.db = db
        self.model = model
        self.table = model.__table__

    async def get(self, record_id: int) -> Optional[RecordSnapshot]:
        # No row can have an id outside the column range
        if not 0 < record_id <= MAX_INTEGER:
            return None
        result = await self.db.execute(
            select(*self.table.columns).where(self.table.c.id == record_id)
        )
        row = result.mappings().one_or_none()
        return RecordSnapshot.from_row(row) if row is not None else None

    async def compare_and_swap(
        self, record_id: int, expected_version: int, new_fields: Mapping[str, Any]
    ) -> Optional[RecordSnapshot]:
        """
        Apply new_fields and bump the version in one statement.

        Matches only while the stored version is not newer than
        expected_version, so the check and the write cannot interleave
        with another writer.

        Returns:
            Snapshot after the write, or None if no row matched
            (record missing or version moved on)
        """
        if not 0 < record_id <= MAX_INTEGER:
            return None
        stmt = (
            update(self.table)
            .where(
                self.table.c.id == record_id,
                self.table.c.version <= min(expected_version, MAX_INTEGER),
            )
            .values(**new_fields, version=self.table.c.version + 1)
            .returning(*self.table.columns)
        )
        result = await self.db.execute(stmt)
        row = result.mappings().one_or_none()
        return RecordSnapshot.from_row(row) if row is not None else None

    async def insert(self, fields: Mapping[str, Any]) -> RecordSnapshot:
        stmt = (
            insert(self.table)
            .values(**fields, version=1)
            .returning(*self.table.columns)
        )
        result = await self.db.execute(stmt)
        return RecordSnapshot.from_row(result.mappings().one())
