"""
Shared veterinarian directory.

Any authenticated caller may read it; only administrators change it.
Deleting a veterinarian unlinks their health records and pets and removes
their appointments, since an appointment cannot exist without a vet.
"""

import logging
from typing import Any, List, Mapping, Optional, Union

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ..authorization import (
    Action,
    AuthorizationPolicy,
    Principal,
    ResourceKind,
    default_policy,
)
from ..exceptions import translate_store_errors
from ..models import Appointment, HealthRecord, Pet, Veterinarian
from ..schemas import (
    VeterinarianCreate,
    VeterinarianResponse,
    VeterinarianUpdate,
    changed_fields,
    parse_payload,
)
from .base import require_principal, resolve_veterinarian

logger = logging.getLogger(__name__)


def _authorize(
    principal: Optional[Principal], action: Action, policy: AuthorizationPolicy
) -> Principal:
    principal = require_principal(principal)
    policy.enforce(principal, action, ResourceKind.VETERINARIAN)
    return principal


async def list_veterinarians(
    session: AsyncSession,
    principal: Optional[Principal],
    policy: AuthorizationPolicy = default_policy,
) -> List[VeterinarianResponse]:
    _authorize(principal, Action.READ, policy)
    result = await session.execute(
        select(Veterinarian).order_by(
            Veterinarian.last_name, Veterinarian.first_name, Veterinarian.id
        )
    )
    return [VeterinarianResponse.model_validate(v) for v in result.scalars().all()]


async def get_veterinarian(
    session: AsyncSession,
    principal: Optional[Principal],
    veterinarian_id: int,
    policy: AuthorizationPolicy = default_policy,
) -> VeterinarianResponse:
    _authorize(principal, Action.READ, policy)
    veterinarian = await resolve_veterinarian(session, veterinarian_id)
    return VeterinarianResponse.model_validate(veterinarian)


@translate_store_errors("create_veterinarian")
async def create_veterinarian(
    session: AsyncSession,
    principal: Optional[Principal],
    data: Union[VeterinarianCreate, Mapping[str, Any]],
    policy: AuthorizationPolicy = default_policy,
) -> VeterinarianResponse:
    payload = parse_payload(VeterinarianCreate, data)
    _authorize(principal, Action.WRITE, policy)

    veterinarian = Veterinarian(**payload.model_dump())
    session.add(veterinarian)
    await session.flush()

    logger.info(f"Created veterinarian {veterinarian.id} ({veterinarian.full_name})")
    return VeterinarianResponse.model_validate(veterinarian)


@translate_store_errors("update_veterinarian")
async def update_veterinarian(
    session: AsyncSession,
    principal: Optional[Principal],
    veterinarian_id: int,
    data: Union[VeterinarianUpdate, Mapping[str, Any]],
    policy: AuthorizationPolicy = default_policy,
) -> VeterinarianResponse:
    payload = parse_payload(VeterinarianUpdate, data)
    _authorize(principal, Action.WRITE, policy)
    veterinarian = await resolve_veterinarian(session, veterinarian_id)
    veterinarian.update_fields(**changed_fields(payload))
    await session.flush()
    return VeterinarianResponse.model_validate(veterinarian)


@translate_store_errors("delete_veterinarian")
async def delete_veterinarian(
    session: AsyncSession,
    principal: Optional[Principal],
    veterinarian_id: int,
    policy: AuthorizationPolicy = default_policy,
) -> None:
    """
    Remove a veterinarian and everything that cannot outlive them.

    Raises:
        ForbiddenException: If the caller is not an administrator
        ResourceNotFoundException: If the veterinarian does not exist
    """
    _authorize(principal, Action.DELETE, policy)
    veterinarian = await resolve_veterinarian(session, veterinarian_id)

    await session.execute(
        update(HealthRecord)
        .where(HealthRecord.veterinarian_id == veterinarian_id)
        .values(veterinarian_id=None)
    )
    await session.execute(
        update(Pet)
        .where(Pet.veterinarian_id == veterinarian_id)
        .values(veterinarian_id=None)
    )
    removed = await session.execute(
        delete(Appointment).where(Appointment.veterinarian_id == veterinarian_id)
    )
    await session.delete(veterinarian)
    await session.flush()

    logger.info(
        f"Deleted veterinarian {veterinarian_id} and {removed.rowcount} appointment(s)"
    )
