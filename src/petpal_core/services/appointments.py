"""
Appointment operations.
"""

import logging
from typing import Any, List, Mapping, Optional, Union

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..authorization import Action, Principal, ResourceKind
from ..exceptions import translate_store_errors
from ..models import Appointment, AppointmentStatus
from ..schemas import (
    AppointmentCreate,
    AppointmentResponse,
    AppointmentStatusUpdate,
    AppointmentUpdate,
    changed_fields,
    parse_payload,
)
from .base import authorize_pet, get_pet_record, resolve_veterinarian

logger = logging.getLogger(__name__)

_APPOINTMENT_OPTIONS = (
    selectinload(Appointment.pet),
    selectinload(Appointment.veterinarian),
)


async def list_appointments(
    session: AsyncSession, principal: Optional[Principal], pet_id: int
) -> List[AppointmentResponse]:
    """Appointments of a pet in chronological order."""
    await authorize_pet(
        session, principal, pet_id, Action.READ, ResourceKind.APPOINTMENT
    )
    result = await session.execute(
        select(Appointment)
        .options(*_APPOINTMENT_OPTIONS)
        .where(Appointment.pet_id == pet_id)
        .order_by(
            Appointment.appointment_date,
            Appointment.appointment_time,
            Appointment.id,
        )
    )
    return [AppointmentResponse.from_model(a) for a in result.scalars().all()]


async def get_appointment(
    session: AsyncSession,
    principal: Optional[Principal],
    pet_id: int,
    appointment_id: int,
) -> AppointmentResponse:
    await authorize_pet(
        session, principal, pet_id, Action.READ, ResourceKind.APPOINTMENT
    )
    appointment = await get_pet_record(
        session, Appointment, appointment_id, pet_id, _APPOINTMENT_OPTIONS
    )
    return AppointmentResponse.from_model(appointment)


@translate_store_errors("create_appointment")
async def create_appointment(
    session: AsyncSession,
    principal: Optional[Principal],
    pet_id: int,
    data: Union[AppointmentCreate, Mapping[str, Any]],
) -> AppointmentResponse:
    """
    Book an appointment; it always starts out ``Scheduled``.

    Raises:
        ResourceNotFoundException: If the veterinarian does not exist
    """
    payload = parse_payload(AppointmentCreate, data)
    access = await authorize_pet(
        session, principal, pet_id, Action.WRITE, ResourceKind.APPOINTMENT
    )
    veterinarian = await resolve_veterinarian(session, payload.veterinarian_id)

    appointment = Appointment(
        pet=access.pet,
        veterinarian=veterinarian,
        status=AppointmentStatus.SCHEDULED.value,
        **payload.model_dump(exclude={"veterinarian_id"}),
    )
    session.add(appointment)
    await session.flush()

    logger.info(
        f"Booked appointment {appointment.id} for pet {pet_id} "
        f"on {appointment.appointment_date}"
    )
    return AppointmentResponse.from_model(appointment)


@translate_store_errors("update_appointment")
async def update_appointment(
    session: AsyncSession,
    principal: Optional[Principal],
    pet_id: int,
    appointment_id: int,
    data: Union[AppointmentUpdate, Mapping[str, Any]],
) -> AppointmentResponse:
    payload = parse_payload(AppointmentUpdate, data)
    await authorize_pet(
        session, principal, pet_id, Action.WRITE, ResourceKind.APPOINTMENT
    )
    appointment = await get_pet_record(
        session, Appointment, appointment_id, pet_id, _APPOINTMENT_OPTIONS
    )

    changes = changed_fields(payload)
    if "veterinarian_id" in changes:
        appointment.veterinarian = await resolve_veterinarian(
            session, changes["veterinarian_id"]
        )
    appointment.update_fields(**changes)
    await session.flush()

    logger.info(f"Updated appointment {appointment_id}: {sorted(changes)}")
    return AppointmentResponse.from_model(appointment)


@translate_store_errors("update_appointment_status")
async def update_status(
    session: AsyncSession,
    principal: Optional[Principal],
    pet_id: int,
    appointment_id: int,
    data: Union[AppointmentStatusUpdate, Mapping[str, Any]],
) -> AppointmentResponse:
    """Set the status string (``Scheduled``, ``Completed``, ``Cancelled``, ...)."""
    payload = parse_payload(AppointmentStatusUpdate, data)
    await authorize_pet(
        session, principal, pet_id, Action.WRITE, ResourceKind.APPOINTMENT
    )
    appointment = await get_pet_record(
        session, Appointment, appointment_id, pet_id, _APPOINTMENT_OPTIONS
    )
    previous = appointment.status
    appointment.status = payload.status
    await session.flush()

    logger.info(
        f"Appointment {appointment_id} status {previous} -> {appointment.status}"
    )
    return AppointmentResponse.from_model(appointment)


@translate_store_errors("delete_appointment")
async def delete_appointment(
    session: AsyncSession,
    principal: Optional[Principal],
    pet_id: int,
    appointment_id: int,
) -> None:
    await authorize_pet(
        session, principal, pet_id, Action.DELETE, ResourceKind.APPOINTMENT
    )
    appointment = await get_pet_record(session, Appointment, appointment_id, pet_id)
    await session.delete(appointment)
    await session.flush()
    logger.info(f"Deleted appointment {appointment_id} of pet {pet_id}")
