"""
Entity definitions for versioned records.

Binds each tracked entity to its table and its pydantic schemas.
"""

from dataclasses import dataclass
from typing import FrozenSet, Type

from pydantic import BaseModel

from backend.app.models.company import Company
from backend.app.models.vehicle import Vehicle
from backend.app.models.driver import Driver
from backend.app.schemas.company import CompanyCreate, CompanyUpdate, CompanyResponse
from backend.app.schemas.vehicle import VehicleCreate, VehicleUpdate, VehicleResponse
from backend.app.schemas.driver import DriverCreate, DriverUpdate, DriverResponse


@dataclass(frozen=True)
class EntityDefinition:
    name: str
    model: type
    create_schema: Type[BaseModel]
    update_schema: Type[BaseModel]
    response_schema: Type[BaseModel]

    @property
    def writable_fields(self) -> FrozenSet[str]:
        return frozenset(self.update_schema.model_fields)

    @property
    def required_fields(self) -> FrozenSet[str]:
        """Fields that may be changed but never cleared."""
        return frozenset(
            name for name, info in self.create_schema.model_fields.items()
            if info.is_required()
        ) | frozenset(
            name for name, column in self.model.__table__.columns.items()
            if name in self.writable_fields and not column.nullable
        )


COMPANY = EntityDefinition("Company", Company, CompanyCreate, CompanyUpdate, CompanyResponse)
VEHICLE = EntityDefinition("Vehicle", Vehicle, VehicleCreate, VehicleUpdate, VehicleResponse)
DRIVER = EntityDefinition("Driver", Driver, DriverCreate, DriverUpdate, DriverResponse)
