"""
Tests for feeding schedule operations.
"""

from datetime import time

import pytest

from petpal_core.exceptions import ForbiddenException, SchemaValidationException
from petpal_core.services import feeding


def slot(**overrides):
    payload = {"feeding_time": "07:30", "food_type": "Kibble", "portion": "1 cup"}
    payload.update(overrides)
    return payload


class TestFeedingSchedules:
    async def test_list_is_ordered_by_time_of_day(
        self, async_session, pet, owner_principal
    ):
        evening = await feeding.create_feeding_schedule(
            async_session, owner_principal, pet.id, slot(feeding_time="18:00")
        )
        morning = await feeding.create_feeding_schedule(
            async_session, owner_principal, pet.id, slot()
        )

        listed = await feeding.list_feeding_schedules(
            async_session, owner_principal, pet.id
        )

        assert [s.id for s in listed] == [morning.id, evening.id]
        assert listed[0].feeding_time == time(7, 30)
        assert listed[0].is_active

    async def test_co_owner_updates_and_deletes(
        self, async_session, pet, owner_principal, co_owner_principal
    ):
        created = await feeding.create_feeding_schedule(
            async_session, owner_principal, pet.id, slot()
        )

        updated = await feeding.update_feeding_schedule(
            async_session,
            co_owner_principal,
            pet.id,
            created.id,
            {"portion": "1.5 cups", "is_active": False},
        )
        assert updated.portion == "1.5 cups"
        assert not updated.is_active

        await feeding.delete_feeding_schedule(
            async_session, co_owner_principal, pet.id, created.id
        )
        assert (
            await feeding.list_feeding_schedules(async_session, owner_principal, pet.id)
            == []
        )

    async def test_veterinarian_neither_reads_nor_writes(
        self, async_session, pet, owner_principal, vet_principal
    ):
        created = await feeding.create_feeding_schedule(
            async_session, owner_principal, pet.id, slot()
        )

        with pytest.raises(ForbiddenException):
            await feeding.get_feeding_schedule(
                async_session, vet_principal, pet.id, created.id
            )
        with pytest.raises(ForbiddenException):
            await feeding.list_feeding_schedules(async_session, vet_principal, pet.id)

        with pytest.raises(ForbiddenException):
            await feeding.create_feeding_schedule(
                async_session, vet_principal, pet.id, slot()
            )

    async def test_empty_update_is_rejected(self, async_session, pet, owner_principal):
        created = await feeding.create_feeding_schedule(
            async_session, owner_principal, pet.id, slot()
        )

        with pytest.raises(SchemaValidationException):
            await feeding.update_feeding_schedule(
                async_session, owner_principal, pet.id, created.id, {}
            )

    async def test_portion_is_required(self, async_session, pet, owner_principal):
        with pytest.raises(SchemaValidationException) as exc_info:
            await feeding.create_feeding_schedule(
                async_session, owner_principal, pet.id, slot(portion="  ")
            )

        assert "portion" in exc_info.value.details["validation_errors"]
