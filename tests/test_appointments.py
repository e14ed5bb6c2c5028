"""
Tests for appointment booking and status changes.
"""

from datetime import time, timedelta

import pytest

from petpal_core.exceptions import (
    ForbiddenException,
    ResourceNotFoundException,
    SchemaValidationException,
)
from petpal_core.services import appointments

from .conftest import TODAY, AppointmentFactory, PetFactory


def booking(veterinarian, **overrides):
    payload = {
        "veterinarian_id": veterinarian.id,
        "appointment_date": TODAY + timedelta(days=7),
        "appointment_time": "14:00",
        "appointment_type": "Checkup",
    }
    payload.update(overrides)
    return payload


class TestBookAppointment:
    async def test_new_appointment_is_scheduled(
        self, async_session, pet, co_owner_principal, veterinarian
    ):
        created = await appointments.create_appointment(
            async_session,
            co_owner_principal,
            pet.id,
            booking(veterinarian, status="Completed"),
        )

        assert created.status == "Scheduled"
        assert created.appointment_time == time(14, 0)
        assert created.pet_name == "Buddy"
        assert created.veterinarian_name == "Sam Smith"

    async def test_veterinarian_may_book(
        self, async_session, pet, vet_principal, veterinarian
    ):
        created = await appointments.create_appointment(
            async_session, vet_principal, pet.id, booking(veterinarian)
        )

        assert created.id is not None

    async def test_stranger_cannot_book(
        self, async_session, pet, stranger_principal, veterinarian
    ):
        with pytest.raises(ForbiddenException):
            await appointments.create_appointment(
                async_session, stranger_principal, pet.id, booking(veterinarian)
            )

    async def test_unknown_veterinarian(self, async_session, pet, owner_principal):
        with pytest.raises(ResourceNotFoundException) as exc_info:
            await appointments.create_appointment(
                async_session,
                owner_principal,
                pet.id,
                {
                    "veterinarian_id": 4242,
                    "appointment_date": TODAY,
                    "appointment_time": "09:00",
                    "appointment_type": "Checkup",
                },
            )

        assert exc_info.value.details["resource"] == "Veterinarian"

    async def test_missing_fields(self, async_session, pet, owner_principal):
        with pytest.raises(SchemaValidationException) as exc_info:
            await appointments.create_appointment(
                async_session, owner_principal, pet.id, {"appointment_type": "Checkup"}
            )

        errors = exc_info.value.details["validation_errors"]
        assert "veterinarian_id" in errors
        assert "appointment_date" in errors


class TestManageAppointment:
    async def test_list_is_chronological(
        self, async_session, pet, owner_principal, veterinarian
    ):
        later = await AppointmentFactory.create(
            async_session, pet, veterinarian, appointment_date=TODAY + timedelta(9)
        )
        afternoon = await AppointmentFactory.create(
            async_session, pet, veterinarian, appointment_time=time(15, 0)
        )
        morning = await AppointmentFactory.create(
            async_session, pet, veterinarian, appointment_time=time(8, 0)
        )

        listed = await appointments.list_appointments(
            async_session, owner_principal, pet.id
        )

        assert [a.id for a in listed] == [morning.id, afternoon.id, later.id]

    async def test_reschedule(self, async_session, pet, owner_principal, veterinarian):
        appointment = await AppointmentFactory.create(async_session, pet, veterinarian)

        updated = await appointments.update_appointment(
            async_session,
            owner_principal,
            pet.id,
            appointment.id,
            {"appointment_date": TODAY + timedelta(days=14), "notes": None},
        )

        assert updated.appointment_date == TODAY + timedelta(days=14)
        assert updated.notes is None

    async def test_date_cannot_be_cleared(
        self, async_session, pet, owner_principal, veterinarian
    ):
        appointment = await AppointmentFactory.create(async_session, pet, veterinarian)

        with pytest.raises(SchemaValidationException):
            await appointments.update_appointment(
                async_session,
                owner_principal,
                pet.id,
                appointment.id,
                {"appointment_date": None},
            )

    async def test_status_update(
        self, async_session, pet, vet_principal, veterinarian
    ):
        appointment = await AppointmentFactory.create(async_session, pet, veterinarian)

        updated = await appointments.update_status(
            async_session,
            vet_principal,
            pet.id,
            appointment.id,
            {"status": "Completed"},
        )

        assert updated.status == "Completed"

    async def test_appointment_of_another_pet_is_not_found(
        self, async_session, pet, owner, owner_principal, veterinarian
    ):
        other_pet = await PetFactory.create(async_session, owners=[owner])
        foreign = await AppointmentFactory.create(
            async_session, other_pet, veterinarian
        )

        with pytest.raises(ResourceNotFoundException):
            await appointments.get_appointment(
                async_session, owner_principal, pet.id, foreign.id
            )

    async def test_delete(self, async_session, pet, owner_principal, veterinarian):
        appointment = await AppointmentFactory.create(async_session, pet, veterinarian)

        await appointments.delete_appointment(
            async_session, owner_principal, pet.id, appointment.id
        )

        with pytest.raises(ResourceNotFoundException):
            await appointments.get_appointment(
                async_session, owner_principal, pet.id, appointment.id
            )
