"""
Record Update Coordinator tests.

Exercises the conditional update protocol directly against the store.
"""

import dataclasses
from datetime import date

import pytest
from sqlalchemy import select, func

from backend.app.core.exceptions import (
    InvalidFieldError,
    ResourceNotFoundError,
    VersionConflictError,
)
from backend.app.domain.records.coordinator import RecordUpdateCoordinator, UpdateRequest
from backend.app.domain.records.entities import DRIVER, COMPANY
from backend.app.models.audit_log import AuditLog
from backend.app.models.enums import DriverStatus
from backend.app.schemas.driver import DriverCreate


@pytest.fixture
def coordinator(db_session):
    return RecordUpdateCoordinator(db_session, DRIVER)


@pytest.fixture
async def driver(coordinator, driver_payload):
    """Driver D1 at version 1."""
    return await coordinator.create_record(DriverCreate(**driver_payload).model_dump())


async def count_audit_rows(db_session, action=None):
    query = select(func.count(AuditLog.id))
    if action:
        query = query.where(AuditLog.action == action)
    result = await db_session.execute(query)
    return result.scalar()


@pytest.mark.asyncio
async def test_create_starts_at_version_one(driver):
    assert driver.id is not None
    assert driver.version == 1
    assert driver.fields["first_name"] == "John"
    assert driver.fields["license_expiry"] == date(2027, 6, 30)
    assert driver.fields["status"] == DriverStatus.ON_DUTY


@pytest.mark.asyncio
async def test_load_record_returns_fields_and_version(coordinator, driver):
    loaded = await coordinator.load_record(driver.id)

    assert loaded.version == 1
    assert loaded.fields["email"] == "john.doe@example.com"
    assert loaded.as_dict()["id"] == driver.id


@pytest.mark.asyncio
async def test_load_missing_record_raises_not_found(coordinator):
    with pytest.raises(ResourceNotFoundError):
        await coordinator.load_record(9999)


@pytest.mark.asyncio
async def test_stale_writer_gets_conflict_with_current_record(coordinator, driver):
    """Caller A and B both read v1; A saves first, B must be rejected."""
    base = driver.version

    updated = await coordinator.submit_update(driver.id, {"last_name": "Doe-Smith"}, base)
    assert updated.version == base + 1
    assert updated.fields["first_name"] == "John"
    assert updated.fields["last_name"] == "Doe-Smith"

    with pytest.raises(VersionConflictError) as exc_info:
        await coordinator.submit_update(driver.id, {"phone": "555-0100"}, base)

    conflict = exc_info.value
    assert conflict.status_code == 412
    assert conflict.current_version == updated.version
    assert conflict.current["last_name"] == "Doe-Smith"
    assert conflict.current["phone"] == "+1 (555) 123-4567"

    # Rejected write left the record untouched
    current = await coordinator.load_record(driver.id)
    assert current.version == updated.version
    assert current.fields["phone"] == "+1 (555) 123-4567"


@pytest.mark.asyncio
async def test_versions_strictly_increase(coordinator, driver):
    version = driver.version
    for i in range(5):
        updated = await coordinator.submit_update(driver.id, {"notes": f"update {i}"}, version)
        assert updated.version > version
        version = updated.version

    assert version == driver.version + 5


@pytest.mark.asyncio
async def test_equal_base_version_always_succeeds(coordinator, driver):
    current = await coordinator.load_record(driver.id)

    updated = await coordinator.submit_update(driver.id, {"city": "Chicago"}, current.version)

    assert updated.version == current.version + 1
    assert updated.fields["city"] == "Chicago"


@pytest.mark.asyncio
async def test_base_version_ahead_of_store_proceeds(coordinator, driver):
    """Only a newer stored version is a conflict."""
    updated = await coordinator.submit_update(driver.id, {"city": "Boston"}, driver.version + 10)

    assert updated.version == driver.version + 1


@pytest.mark.asyncio
async def test_round_trip_merges_changes_over_prior_record(coordinator, driver):
    changes = {"status": "off_duty", "city": "Los Angeles", "state": "CA"}

    updated = await coordinator.submit_update(driver.id, changes, driver.version)
    loaded = await coordinator.load_record(driver.id)

    expected = dict(driver.fields)
    expected.update({"status": DriverStatus.OFF_DUTY, "city": "Los Angeles", "state": "CA"})
    assert dict(loaded.fields) == expected
    assert loaded.version == updated.version


@pytest.mark.asyncio
@pytest.mark.parametrize("changes", [
    {"first_name": "Ghost"},
    {},
    {"nickname": "Ghost"},
    {"first_name": None},
    {"license_expiry": "someday"},
])
async def test_update_missing_record_raises_not_found(coordinator, db_session, changes):
    with pytest.raises(ResourceNotFoundError):
        await coordinator.submit_update(4242, changes, 1)

    assert await count_audit_rows(db_session, "RECORD_UPDATED") == 0


@pytest.mark.asyncio
@pytest.mark.parametrize("changes, bad_field", [
    ({"nickname": "JD"}, "nickname"),
    ({"version": 7}, "version"),
    ({"id": 3}, "id"),
    ({"created_at": "2020-01-01T00:00:00"}, "created_at"),
])
async def test_unknown_or_read_only_fields_rejected(coordinator, driver, changes, bad_field):
    with pytest.raises(InvalidFieldError) as exc_info:
        await coordinator.submit_update(driver.id, changes, driver.version)

    assert bad_field in exc_info.value.details["fields"]
    assert (await coordinator.load_record(driver.id)).version == driver.version


@pytest.mark.asyncio
async def test_empty_update_rejected(coordinator, driver):
    with pytest.raises(InvalidFieldError):
        await coordinator.submit_update(driver.id, {}, driver.version)


@pytest.mark.asyncio
async def test_invalid_values_rejected(coordinator, driver):
    with pytest.raises(InvalidFieldError) as exc_info:
        await coordinator.submit_update(
            driver.id, {"status": "asleep", "email": "not-an-email"}, driver.version
        )

    assert exc_info.value.details["fields"] == ["email", "status"]
    assert exc_info.value.details["errors"]


@pytest.mark.asyncio
async def test_required_field_cannot_be_cleared(coordinator, driver):
    with pytest.raises(InvalidFieldError) as exc_info:
        await coordinator.submit_update(driver.id, {"first_name": None}, driver.version)

    assert exc_info.value.details["fields"] == ["first_name"]


@pytest.mark.asyncio
async def test_optional_field_can_be_cleared(coordinator, driver):
    updated = await coordinator.submit_update(driver.id, {"notes": None}, driver.version)

    assert updated.fields["notes"] is None


@pytest.mark.asyncio
async def test_unknown_company_reference_is_invalid_field(coordinator, driver):
    with pytest.raises(InvalidFieldError):
        await coordinator.submit_update(driver.id, {"company_id": 777}, driver.version)

    assert (await coordinator.load_record(driver.id)).version == driver.version


@pytest.mark.asyncio
@pytest.mark.parametrize("record_id", [0, -1, 2**31, 10**20])
async def test_out_of_range_id_is_not_found(coordinator, record_id):
    with pytest.raises(ResourceNotFoundError):
        await coordinator.load_record(record_id)
    with pytest.raises(ResourceNotFoundError):
        await coordinator.submit_update(record_id, {"city": "Reno"}, 1)


@pytest.mark.asyncio
async def test_huge_base_version_still_applies(coordinator, driver):
    updated = await coordinator.submit_update(driver.id, {"city": "Reno"}, 10**20)

    assert updated.version == driver.version + 1


@pytest.mark.asyncio
async def test_value_too_large_for_column_is_invalid_field(coordinator, driver):
    with pytest.raises(InvalidFieldError):
        await coordinator.submit_update(driver.id, {"company_id": 10**20}, driver.version)

    assert (await coordinator.load_record(driver.id)).version == driver.version


@pytest.mark.asyncio
async def test_successful_update_writes_one_audit_row(coordinator, driver, db_session):
    await coordinator.submit_update(driver.id, {"city": "Denver", "zip_code": "80201"}, driver.version)

    result = await db_session.execute(
        select(AuditLog).where(AuditLog.action == "RECORD_UPDATED")
    )
    entries = result.scalars().all()
    assert len(entries) == 1
    assert entries[0].entity_type == "Driver"
    assert entries[0].entity_id == driver.id
    assert entries[0].version == 2
    assert entries[0].meta_data["updated_fields"] == ["city", "zip_code"]


@pytest.mark.asyncio
async def test_conflict_writes_no_audit_row(coordinator, driver, db_session):
    await coordinator.submit_update(driver.id, {"city": "Austin"}, driver.version)
    with pytest.raises(VersionConflictError):
        await coordinator.submit_update(driver.id, {"city": "Dallas"}, driver.version)

    assert await count_audit_rows(db_session, "RECORD_UPDATED") == 1


@pytest.mark.asyncio
async def test_submit_accepts_update_request(coordinator, driver):
    request = UpdateRequest(record_id=driver.id, field_changes={"country": "Canada"}, base_version=1)

    updated = await coordinator.submit(request)

    assert updated.fields["country"] == "Canada"


def test_update_request_is_immutable():
    changes = {"first_name": "Jane"}
    request = UpdateRequest(record_id=1, field_changes=changes, base_version=1)

    with pytest.raises(dataclasses.FrozenInstanceError):
        request.base_version = 2
    with pytest.raises(TypeError):
        request.field_changes["first_name"] = "Janet"

    # Later edits to the caller's dict do not leak into the request
    changes["first_name"] = "Janet"
    assert request.field_changes["first_name"] == "Jane"


@pytest.mark.asyncio
async def test_company_updates_use_the_same_protocol(db_session):
    coordinator = RecordUpdateCoordinator(db_session, COMPANY)
    company = await coordinator.create_record({"name": "Acme Freight", "address": None, "contact": None})

    updated = await coordinator.submit_update(company.id, {"contact": "ops@acme.test"}, company.version)
    with pytest.raises(VersionConflictError):
        await coordinator.submit_update(company.id, {"name": "Acme Logistics"}, company.version)

    assert updated.version == 2
    assert (await coordinator.load_record(company.id)).fields["name"] == "Acme Freight"
