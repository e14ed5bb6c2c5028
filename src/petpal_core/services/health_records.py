"""
Health record and vaccination operations.

Vaccinations are health records with ``record_type == "Vaccination"``; the
vaccination functions are views over the same table that pin the type.
Clinical writes require a veterinarian or the pet's primary owner.
"""

import logging
from datetime import date, timedelta
from typing import Any, List, Mapping, Optional, Union

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..authorization import Action, Principal, ResourceKind
from ..exceptions import (
    InvalidInputException,
    ResourceNotFoundException,
    translate_store_errors,
)
from ..models import VACCINATION_RECORD_TYPE, HealthRecord
from ..schemas import (
    HealthRecordCreate,
    HealthRecordResponse,
    HealthRecordUpdate,
    VaccinationCreate,
    VaccinationResponse,
    VaccinationUpdate,
    changed_fields,
    parse_payload,
)
from ..utils.datetime_utils import get_current_utc
from .base import (
    authorize_pet,
    get_pet_record,
    owned_pet_ids,
    resolve_profile,
    resolve_veterinarian,
)
from .files import DOCUMENTS_CONTAINER, BlobStore

logger = logging.getLogger(__name__)

UPCOMING_VACCINATION_DAYS = 30

_RECORD_OPTIONS = (
    selectinload(HealthRecord.pet),
    selectinload(HealthRecord.veterinarian),
)


async def _list_records(
    session: AsyncSession, pet_id: int, vaccinations_only: bool = False
) -> List[HealthRecord]:
    stmt = (
        select(HealthRecord)
        .options(*_RECORD_OPTIONS)
        .where(HealthRecord.pet_id == pet_id)
        .order_by(HealthRecord.record_date.desc(), HealthRecord.id.desc())
    )
    if vaccinations_only:
        stmt = stmt.where(HealthRecord.record_type == VACCINATION_RECORD_TYPE)
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def _get_record(
    session: AsyncSession, pet_id: int, record_id: int, vaccination: bool = False
) -> HealthRecord:
    resource = "Vaccination" if vaccination else "HealthRecord"
    record = await get_pet_record(
        session, HealthRecord, record_id, pet_id, _RECORD_OPTIONS, resource
    )
    if vaccination and not record.is_vaccination:
        raise ResourceNotFoundException(resource, record_id)
    return record


async def _apply_changes(
    session: AsyncSession, record: HealthRecord, changes: Mapping[str, Any]
) -> None:
    due_date = changes.get("due_date", record.due_date)
    record_date = changes.get("record_date", record.record_date)
    if due_date is not None and due_date < record_date:
        raise InvalidInputException(
            "Due date cannot be before the record date",
            field="due_date",
            value=due_date,
        )
    if "veterinarian_id" in changes:
        record.veterinarian = await resolve_veterinarian(
            session, changes["veterinarian_id"]
        )
    record.update_fields(**changes)


async def list_health_records(
    session: AsyncSession, principal: Optional[Principal], pet_id: int
) -> List[HealthRecordResponse]:
    """All health records of a pet, newest first."""
    await authorize_pet(
        session, principal, pet_id, Action.READ, ResourceKind.HEALTH_RECORD
    )
    records = await _list_records(session, pet_id)
    return [HealthRecordResponse.from_model(record) for record in records]


async def get_health_record(
    session: AsyncSession, principal: Optional[Principal], pet_id: int, record_id: int
) -> HealthRecordResponse:
    await authorize_pet(
        session, principal, pet_id, Action.READ, ResourceKind.HEALTH_RECORD
    )
    record = await _get_record(session, pet_id, record_id)
    return HealthRecordResponse.from_model(record)


@translate_store_errors("create_health_record")
async def create_health_record(
    session: AsyncSession,
    principal: Optional[Principal],
    pet_id: int,
    data: Union[HealthRecordCreate, Mapping[str, Any]],
) -> HealthRecordResponse:
    payload = parse_payload(HealthRecordCreate, data)
    access = await authorize_pet(
        session, principal, pet_id, Action.WRITE, ResourceKind.HEALTH_RECORD
    )
    veterinarian = await resolve_veterinarian(session, payload.veterinarian_id)

    record = HealthRecord(
        pet=access.pet,
        veterinarian=veterinarian,
        **payload.model_dump(exclude={"veterinarian_id"}),
    )
    session.add(record)
    await session.flush()

    logger.info(f"Created {record.record_type} record {record.id} for pet {pet_id}")
    return HealthRecordResponse.from_model(record)


@translate_store_errors("update_health_record")
async def update_health_record(
    session: AsyncSession,
    principal: Optional[Principal],
    pet_id: int,
    record_id: int,
    data: Union[HealthRecordUpdate, Mapping[str, Any]],
) -> HealthRecordResponse:
    payload = parse_payload(HealthRecordUpdate, data)
    await authorize_pet(
        session, principal, pet_id, Action.WRITE, ResourceKind.HEALTH_RECORD
    )
    record = await _get_record(session, pet_id, record_id)

    await _apply_changes(session, record, changed_fields(payload))
    await session.flush()
    logger.info(f"Updated health record {record_id} of pet {pet_id}")
    return HealthRecordResponse.from_model(record)


@translate_store_errors("delete_health_record")
async def delete_health_record(
    session: AsyncSession, principal: Optional[Principal], pet_id: int, record_id: int
) -> None:
    await authorize_pet(
        session, principal, pet_id, Action.DELETE, ResourceKind.HEALTH_RECORD
    )
    record = await _get_record(session, pet_id, record_id)
    await session.delete(record)
    await session.flush()
    logger.info(f"Deleted health record {record_id} of pet {pet_id}")


@translate_store_errors("add_attachment")
async def add_attachment(
    session: AsyncSession,
    principal: Optional[Principal],
    pet_id: int,
    record_id: int,
    filename: str,
    content: bytes,
    store: BlobStore,
) -> HealthRecordResponse:
    """
    Store a document and append its URL to the record's attachments.

    Raises:
        InvalidInputException: If the file type is not allowed for documents
    """
    await authorize_pet(
        session, principal, pet_id, Action.WRITE, ResourceKind.HEALTH_RECORD
    )
    record = await _get_record(session, pet_id, record_id)

    file_id = await store.save(filename, content, DOCUMENTS_CONTAINER)
    record.add_attachment_url(store.url_for(file_id, DOCUMENTS_CONTAINER))
    await session.flush()

    logger.info(f"Attached {file_id} to health record {record_id}")
    return HealthRecordResponse.from_model(record)


async def list_vaccinations(
    session: AsyncSession, principal: Optional[Principal], pet_id: int
) -> List[VaccinationResponse]:
    await authorize_pet(
        session, principal, pet_id, Action.READ, ResourceKind.VACCINATION
    )
    records = await _list_records(session, pet_id, vaccinations_only=True)
    return [VaccinationResponse.from_model(record) for record in records]


async def get_vaccination(
    session: AsyncSession,
    principal: Optional[Principal],
    pet_id: int,
    vaccination_id: int,
) -> VaccinationResponse:
    await authorize_pet(
        session, principal, pet_id, Action.READ, ResourceKind.VACCINATION
    )
    record = await _get_record(session, pet_id, vaccination_id, vaccination=True)
    return VaccinationResponse.from_model(record)


@translate_store_errors("create_vaccination")
async def create_vaccination(
    session: AsyncSession,
    principal: Optional[Principal],
    pet_id: int,
    data: Union[VaccinationCreate, Mapping[str, Any]],
) -> VaccinationResponse:
    payload = parse_payload(VaccinationCreate, data)
    access = await authorize_pet(
        session, principal, pet_id, Action.WRITE, ResourceKind.VACCINATION
    )
    veterinarian = await resolve_veterinarian(session, payload.veterinarian_id)

    record = HealthRecord(
        pet=access.pet,
        veterinarian=veterinarian,
        record_type=VACCINATION_RECORD_TYPE,
        **payload.model_dump(exclude={"veterinarian_id"}),
    )
    session.add(record)
    await session.flush()

    logger.info(f"Recorded vaccination {record.id} for pet {pet_id}")
    return VaccinationResponse.from_model(record)


@translate_store_errors("update_vaccination")
async def update_vaccination(
    session: AsyncSession,
    principal: Optional[Principal],
    pet_id: int,
    vaccination_id: int,
    data: Union[VaccinationUpdate, Mapping[str, Any]],
) -> VaccinationResponse:
    payload = parse_payload(VaccinationUpdate, data)
    await authorize_pet(
        session, principal, pet_id, Action.WRITE, ResourceKind.VACCINATION
    )
    record = await _get_record(session, pet_id, vaccination_id, vaccination=True)

    await _apply_changes(session, record, changed_fields(payload))
    await session.flush()
    logger.info(f"Updated vaccination {vaccination_id} of pet {pet_id}")
    return VaccinationResponse.from_model(record)


@translate_store_errors("delete_vaccination")
async def delete_vaccination(
    session: AsyncSession,
    principal: Optional[Principal],
    pet_id: int,
    vaccination_id: int,
) -> None:
    await authorize_pet(
        session, principal, pet_id, Action.DELETE, ResourceKind.VACCINATION
    )
    record = await _get_record(session, pet_id, vaccination_id, vaccination=True)
    await session.delete(record)
    await session.flush()
    logger.info(f"Deleted vaccination {vaccination_id} of pet {pet_id}")


def _upcoming_vaccinations_stmt(today: date, days_ahead: int):
    return (
        select(HealthRecord)
        .options(*_RECORD_OPTIONS)
        .where(
            HealthRecord.record_type == VACCINATION_RECORD_TYPE,
            HealthRecord.due_date.is_not(None),
            HealthRecord.due_date >= today,
            HealthRecord.due_date <= today + timedelta(days=days_ahead),
        )
        .order_by(HealthRecord.due_date, HealthRecord.id)
    )


async def list_upcoming_vaccinations(
    session: AsyncSession,
    principal: Optional[Principal],
    pet_id: int,
    days_ahead: int = UPCOMING_VACCINATION_DAYS,
    today: Optional[date] = None,
) -> List[VaccinationResponse]:
    """Vaccinations of one pet falling due within ``days_ahead`` days."""
    await authorize_pet(
        session, principal, pet_id, Action.READ, ResourceKind.VACCINATION
    )
    today = today or get_current_utc().date()
    result = await session.execute(
        _upcoming_vaccinations_stmt(today, days_ahead).where(
            HealthRecord.pet_id == pet_id
        )
    )
    return [VaccinationResponse.from_model(r, today) for r in result.scalars().all()]


async def list_user_upcoming_vaccinations(
    session: AsyncSession,
    principal: Optional[Principal],
    days_ahead: int = UPCOMING_VACCINATION_DAYS,
    today: Optional[date] = None,
) -> List[VaccinationResponse]:
    """Upcoming vaccinations across the caller's pets (all pets for staff)."""
    profile = await resolve_profile(session, principal)
    pet_ids = await owned_pet_ids(session, profile, include_all=principal.is_staff)
    if not pet_ids:
        return []
    today = today or get_current_utc().date()
    result = await session.execute(
        _upcoming_vaccinations_stmt(today, days_ahead).where(
            HealthRecord.pet_id.in_(pet_ids)
        )
    )
    return [VaccinationResponse.from_model(r, today) for r in result.scalars().all()]
