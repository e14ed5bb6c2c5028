"""
Weight measurements and the pet's denormalized current weight.

``Pet.weight`` always mirrors the measurement with the latest date (ties
broken by the newest row). Every write here locks the pet row, re-reads the
latest measurement and copies it onto the pet inside the caller's
transaction. Deleting the last measurement leaves the pet weight as it was.
"""

import logging
from decimal import Decimal
from typing import Any, List, Mapping, Optional, Union

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..authorization import Action, Principal, ResourceKind
from ..exceptions import InvalidInputException, translate_store_errors
from ..models import Pet, Weight
from ..schemas import (
    WeightCreate,
    WeightResponse,
    WeightUpdate,
    changed_fields,
    parse_payload,
)
from ..utils.validation import validate_weight
from .base import authorize_pet, get_pet_record

logger = logging.getLogger(__name__)


async def refresh_current_weight(session: AsyncSession, pet: Pet) -> Optional[Decimal]:
    """
    Copy the latest measurement onto ``pet`` and return the pet weight.

    The pet row is taken with ``SELECT ... FOR UPDATE`` first so concurrent
    weight writes for the same pet serialize. SQLite ignores the lock.
    """
    await session.flush()
    await session.execute(select(Pet.id).where(Pet.id == pet.id).with_for_update())
    latest = await session.scalar(
        select(Weight)
        .where(Weight.pet_id == pet.id)
        .order_by(Weight.date.desc(), Weight.id.desc())
        .limit(1)
    )
    if latest is not None and pet.weight != latest.weight_value:
        logger.debug(f"Pet {pet.id} weight {pet.weight} -> {latest.weight_value}")
        pet.weight = latest.weight_value
    await session.flush()
    return pet.weight


async def list_weights(
    session: AsyncSession, principal: Optional[Principal], pet_id: int
) -> List[WeightResponse]:
    """Measurements of a pet, newest first."""
    await authorize_pet(session, principal, pet_id, Action.READ, ResourceKind.WEIGHT)
    result = await session.execute(
        select(Weight)
        .where(Weight.pet_id == pet_id)
        .order_by(Weight.date.desc(), Weight.id.desc())
    )
    return [WeightResponse.model_validate(w) for w in result.scalars().all()]


async def weight_history(
    session: AsyncSession, principal: Optional[Principal], pet_id: int
) -> List[WeightResponse]:
    """Measurements of a pet in chronological order, for charting."""
    await authorize_pet(session, principal, pet_id, Action.READ, ResourceKind.WEIGHT)
    result = await session.execute(
        select(Weight).where(Weight.pet_id == pet_id).order_by(Weight.date, Weight.id)
    )
    return [WeightResponse.model_validate(w) for w in result.scalars().all()]


async def get_weight(
    session: AsyncSession, principal: Optional[Principal], pet_id: int, weight_id: int
) -> WeightResponse:
    await authorize_pet(session, principal, pet_id, Action.READ, ResourceKind.WEIGHT)
    weight = await get_pet_record(session, Weight, weight_id, pet_id)
    return WeightResponse.model_validate(weight)


@translate_store_errors("create_weight")
async def create_weight(
    session: AsyncSession,
    principal: Optional[Principal],
    pet_id: int,
    data: Union[WeightCreate, Mapping[str, Any]],
) -> WeightResponse:
    payload = parse_payload(WeightCreate, data)
    access = await authorize_pet(
        session, principal, pet_id, Action.WRITE, ResourceKind.WEIGHT
    )

    weight = Weight(pet_id=access.pet.id, **payload.model_dump())
    session.add(weight)
    await refresh_current_weight(session, access.pet)

    logger.info(
        f"Recorded weight {weight.weight_value}{weight.weight_unit} for pet {pet_id}"
    )
    return WeightResponse.model_validate(weight)


@translate_store_errors("update_weight")
async def update_weight(
    session: AsyncSession,
    principal: Optional[Principal],
    pet_id: int,
    weight_id: int,
    data: Union[WeightUpdate, Mapping[str, Any]],
) -> WeightResponse:
    """
    Raises:
        InvalidInputException: If the value is out of range for the unit
    """
    payload = parse_payload(WeightUpdate, data)
    access = await authorize_pet(
        session, principal, pet_id, Action.WRITE, ResourceKind.WEIGHT
    )
    weight = await get_pet_record(session, Weight, weight_id, pet_id)

    changes = changed_fields(payload)
    value = changes.get("weight_value", weight.weight_value)
    unit = changes.get("weight_unit", weight.weight_unit)
    check = validate_weight(value, unit)
    if not check.is_valid:
        raise InvalidInputException(
            check.first_error, field="weight_value", value=value
        )

    weight.update_fields(**changes)
    await refresh_current_weight(session, access.pet)

    logger.info(f"Updated weight {weight_id}: {sorted(changes)}")
    return WeightResponse.model_validate(weight)


@translate_store_errors("delete_weight")
async def delete_weight(
    session: AsyncSession, principal: Optional[Principal], pet_id: int, weight_id: int
) -> None:
    access = await authorize_pet(
        session, principal, pet_id, Action.DELETE, ResourceKind.WEIGHT
    )
    weight = await get_pet_record(session, Weight, weight_id, pet_id)
    await session.delete(weight)
    await refresh_current_weight(session, access.pet)
    logger.info(f"Deleted weight {weight_id} of pet {pet_id}")
