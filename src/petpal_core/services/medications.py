"""
Medication operations, including reminder configuration and acknowledgement.
"""

import logging
from datetime import datetime
from typing import Any, List, Mapping, Optional, Union

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..authorization import Action, Principal, ResourceKind
from ..exceptions import (
    ForbiddenException,
    InvalidInputException,
    translate_store_errors,
)
from ..models import Medication, PetOwner
from ..schemas import (
    MedicationCreate,
    MedicationReminderResponse,
    MedicationReminderUpdate,
    MedicationResponse,
    MedicationUpdate,
    changed_fields,
    parse_payload,
)
from ..utils.datetime_utils import get_current_utc
from . import reminders
from .base import authorize_pet, get_pet_record, require_principal, resolve_profile

logger = logging.getLogger(__name__)

_MEDICATION_OPTIONS = (selectinload(Medication.pet),)


async def _get_medication(
    session: AsyncSession, pet_id: int, medication_id: int
) -> Medication:
    return await get_pet_record(
        session, Medication, medication_id, pet_id, _MEDICATION_OPTIONS
    )


async def list_medications(
    session: AsyncSession, principal: Optional[Principal], pet_id: int
) -> List[MedicationResponse]:
    """Medications of a pet, most recently started first."""
    await authorize_pet(
        session, principal, pet_id, Action.READ, ResourceKind.MEDICATION
    )
    result = await session.execute(
        select(Medication)
        .options(*_MEDICATION_OPTIONS)
        .where(Medication.pet_id == pet_id)
        .order_by(Medication.start_date.desc(), Medication.id.desc())
    )
    return [MedicationResponse.from_model(m) for m in result.scalars().all()]


async def get_medication(
    session: AsyncSession,
    principal: Optional[Principal],
    pet_id: int,
    medication_id: int,
) -> MedicationResponse:
    await authorize_pet(
        session, principal, pet_id, Action.READ, ResourceKind.MEDICATION
    )
    return MedicationResponse.from_model(
        await _get_medication(session, pet_id, medication_id)
    )


@translate_store_errors("create_medication")
async def create_medication(
    session: AsyncSession,
    principal: Optional[Principal],
    pet_id: int,
    data: Union[MedicationCreate, Mapping[str, Any]],
    now: Optional[datetime] = None,
) -> MedicationResponse:
    """Prescribe a medication and schedule its first reminder."""
    payload = parse_payload(MedicationCreate, data)
    access = await authorize_pet(
        session, principal, pet_id, Action.WRITE, ResourceKind.MEDICATION
    )

    medication = Medication(pet=access.pet, **payload.model_dump())
    reminders.recompute_on_save(medication, now=now)
    session.add(medication)
    await session.flush()

    logger.info(f"Created medication {medication.id} for pet {pet_id}")
    return MedicationResponse.from_model(medication)


@translate_store_errors("update_medication")
async def update_medication(
    session: AsyncSession,
    principal: Optional[Principal],
    pet_id: int,
    medication_id: int,
    data: Union[MedicationUpdate, Mapping[str, Any]],
    now: Optional[datetime] = None,
) -> MedicationResponse:
    """Apply changes; the reminder is rescheduled only if reminder fields changed."""
    payload = parse_payload(MedicationUpdate, data)
    await authorize_pet(
        session, principal, pet_id, Action.WRITE, ResourceKind.MEDICATION
    )
    medication = await _get_medication(session, pet_id, medication_id)

    changes = changed_fields(payload)
    start_date = changes.get("start_date", medication.start_date)
    end_date = changes.get("end_date", medication.end_date)
    if end_date is not None and end_date < start_date:
        raise InvalidInputException(
            "End date cannot be before start date", field="end_date", value=end_date
        )

    previous = reminders.reminder_snapshot(medication)
    medication.update_fields(**changes)
    reminders.recompute_on_save(medication, previous, now)
    await session.flush()

    logger.info(f"Updated medication {medication_id}: {sorted(changes)}")
    return MedicationResponse.from_model(medication)


@translate_store_errors("delete_medication")
async def delete_medication(
    session: AsyncSession,
    principal: Optional[Principal],
    pet_id: int,
    medication_id: int,
) -> None:
    await authorize_pet(
        session, principal, pet_id, Action.DELETE, ResourceKind.MEDICATION
    )
    medication = await _get_medication(session, pet_id, medication_id)
    await session.delete(medication)
    await session.flush()
    logger.info(f"Deleted medication {medication_id} of pet {pet_id}")


@translate_store_errors("update_reminder_settings")
async def update_reminder_settings(
    session: AsyncSession,
    principal: Optional[Principal],
    pet_id: int,
    medication_id: int,
    data: Union[MedicationReminderUpdate, Mapping[str, Any]],
    now: Optional[datetime] = None,
) -> MedicationReminderResponse:
    """Replace the reminder configuration and always recompute the next slot."""
    payload = parse_payload(MedicationReminderUpdate, data)
    await authorize_pet(
        session, principal, pet_id, Action.WRITE, ResourceKind.MEDICATION
    )
    medication = await _get_medication(session, pet_id, medication_id)

    medication.update_fields(**payload.model_dump())
    reminders.recompute(medication, now or get_current_utc())
    await session.flush()

    logger.info(
        f"Reminder settings of medication {medication_id}: "
        f"enabled={medication.reminder_enabled}, due={medication.next_reminder_due}"
    )
    return MedicationReminderResponse.from_model(medication)


@translate_store_errors("mark_reminder_sent")
async def mark_reminder_sent(
    session: AsyncSession,
    principal: Optional[Principal],
    pet_id: int,
    medication_id: int,
    now: Optional[datetime] = None,
) -> MedicationReminderResponse:
    """
    Acknowledge that the reminder went out.

    Called by the notification poller, which runs as an administrator.

    Raises:
        ForbiddenException: If the caller is not an administrator
        InvalidStateException: If reminders are disabled for the medication
    """
    principal = require_principal(principal)
    if not principal.is_admin:
        logger.warning(
            f"Denied reminder acknowledgement for {principal.identity_id}: not an admin"
        )
        raise ForbiddenException(
            action=Action.WRITE.value,
            resource=ResourceKind.MEDICATION.value,
            reason="only administrators acknowledge sent reminders",
        )
    medication = await _get_medication(session, pet_id, medication_id)
    reminders.acknowledge_sent(medication, now)
    await session.flush()
    return MedicationReminderResponse.from_model(medication)


async def list_user_reminders(
    session: AsyncSession, principal: Optional[Principal]
) -> List[MedicationReminderResponse]:
    """Enabled reminders of the caller's active medications, soonest first."""
    profile = await resolve_profile(session, principal)
    result = await session.execute(
        select(Medication)
        .options(*_MEDICATION_OPTIONS)
        .join(PetOwner, PetOwner.pet_id == Medication.pet_id)
        .where(
            PetOwner.user_profile_id == profile.id,
            Medication.is_active.is_(True),
            Medication.reminder_enabled.is_(True),
        )
        .order_by(Medication.next_reminder_due, Medication.id)
    )
    return [MedicationReminderResponse.from_model(m) for m in result.scalars().all()]
