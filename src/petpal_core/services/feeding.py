"""
Feeding schedule operations.
"""

import logging
from typing import Any, List, Mapping, Optional, Union

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..authorization import Action, Principal, ResourceKind
from ..exceptions import translate_store_errors
from ..models import FeedingSchedule
from ..schemas import (
    FeedingScheduleCreate,
    FeedingScheduleResponse,
    FeedingScheduleUpdate,
    changed_fields,
    parse_payload,
)
from .base import authorize_pet, get_pet_record

logger = logging.getLogger(__name__)


async def list_feeding_schedules(
    session: AsyncSession, principal: Optional[Principal], pet_id: int
) -> List[FeedingScheduleResponse]:
    """Feeding slots of a pet ordered by time of day."""
    await authorize_pet(
        session, principal, pet_id, Action.READ, ResourceKind.FEEDING_SCHEDULE
    )
    result = await session.execute(
        select(FeedingSchedule)
        .where(FeedingSchedule.pet_id == pet_id)
        .order_by(FeedingSchedule.feeding_time, FeedingSchedule.id)
    )
    return [FeedingScheduleResponse.model_validate(f) for f in result.scalars().all()]


async def get_feeding_schedule(
    session: AsyncSession,
    principal: Optional[Principal],
    pet_id: int,
    schedule_id: int,
) -> FeedingScheduleResponse:
    await authorize_pet(
        session, principal, pet_id, Action.READ, ResourceKind.FEEDING_SCHEDULE
    )
    schedule = await get_pet_record(session, FeedingSchedule, schedule_id, pet_id)
    return FeedingScheduleResponse.model_validate(schedule)


@translate_store_errors("create_feeding_schedule")
async def create_feeding_schedule(
    session: AsyncSession,
    principal: Optional[Principal],
    pet_id: int,
    data: Union[FeedingScheduleCreate, Mapping[str, Any]],
) -> FeedingScheduleResponse:
    payload = parse_payload(FeedingScheduleCreate, data)
    access = await authorize_pet(
        session, principal, pet_id, Action.WRITE, ResourceKind.FEEDING_SCHEDULE
    )
    schedule = FeedingSchedule(pet_id=access.pet.id, **payload.model_dump())
    session.add(schedule)
    await session.flush()

    logger.info(f"Created feeding schedule {schedule.id} for pet {pet_id}")
    return FeedingScheduleResponse.model_validate(schedule)


@translate_store_errors("update_feeding_schedule")
async def update_feeding_schedule(
    session: AsyncSession,
    principal: Optional[Principal],
    pet_id: int,
    schedule_id: int,
    data: Union[FeedingScheduleUpdate, Mapping[str, Any]],
) -> FeedingScheduleResponse:
    payload = parse_payload(FeedingScheduleUpdate, data)
    await authorize_pet(
        session, principal, pet_id, Action.WRITE, ResourceKind.FEEDING_SCHEDULE
    )
    schedule = await get_pet_record(session, FeedingSchedule, schedule_id, pet_id)
    schedule.update_fields(**changed_fields(payload))
    await session.flush()
    return FeedingScheduleResponse.model_validate(schedule)


@translate_store_errors("delete_feeding_schedule")
async def delete_feeding_schedule(
    session: AsyncSession,
    principal: Optional[Principal],
    pet_id: int,
    schedule_id: int,
) -> None:
    await authorize_pet(
        session, principal, pet_id, Action.DELETE, ResourceKind.FEEDING_SCHEDULE
    )
    schedule = await get_pet_record(session, FeedingSchedule, schedule_id, pet_id)
    await session.delete(schedule)
    await session.flush()
    logger.info(f"Deleted feeding schedule {schedule_id} of pet {pet_id}")
