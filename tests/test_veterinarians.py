"""
Tests for the shared veterinarian directory.
"""

import pytest
from sqlalchemy import func, select

from petpal_core.exceptions import (
    ForbiddenException,
    ResourceNotFoundException,
    UnauthenticatedException,
)
from petpal_core.models import Appointment, HealthRecord, Pet
from petpal_core.services import veterinarians

from .conftest import AppointmentFactory, HealthRecordFactory, VeterinarianFactory


class TestDirectoryAccess:
    async def test_everyone_reads_sorted_by_name(
        self, async_session, stranger_principal
    ):
        await VeterinarianFactory.create(
            async_session, first_name="Zed", last_name="Young"
        )
        await VeterinarianFactory.create(
            async_session, first_name="Amy", last_name="Baker"
        )

        listed = await veterinarians.list_veterinarians(
            async_session, stranger_principal
        )

        assert [v.full_name for v in listed] == ["Amy Baker", "Zed Young"]

    async def test_anonymous_callers_are_rejected(self, async_session):
        with pytest.raises(UnauthenticatedException):
            await veterinarians.list_veterinarians(async_session, None)

    async def test_only_admins_write(
        self, async_session, owner_principal, vet_principal, veterinarian
    ):
        for principal in (owner_principal, vet_principal):
            with pytest.raises(ForbiddenException):
                await veterinarians.create_veterinarian(
                    async_session, principal, {"first_name": "Ann", "last_name": "Lee"}
                )
            with pytest.raises(ForbiddenException):
                await veterinarians.delete_veterinarian(
                    async_session, principal, veterinarian.id
                )

    async def test_admin_creates_and_updates(self, async_session, admin_principal):
        created = await veterinarians.create_veterinarian(
            async_session,
            admin_principal,
            {"first_name": "Ann", "last_name": "Lee", "license_number": "vet-77"},
        )
        assert created.license_number == "VET-77"

        updated = await veterinarians.update_veterinarian(
            async_session,
            admin_principal,
            created.id,
            {"clinic_name": "Harbor Vets"},
        )
        assert updated.clinic_name == "Harbor Vets"
        assert updated.full_name == "Ann Lee"

    async def test_unknown_veterinarian(self, async_session, owner_principal):
        with pytest.raises(ResourceNotFoundException):
            await veterinarians.get_veterinarian(async_session, owner_principal, 999)


class TestDeleteVeterinarian:
    async def test_links_are_cleared_and_appointments_removed(
        self, async_session, pet, veterinarian, admin_principal
    ):
        pet.veterinarian_id = veterinarian.id
        record = await HealthRecordFactory.create(
            async_session, pet, veterinarian_id=veterinarian.id
        )
        await AppointmentFactory.create(async_session, pet, veterinarian)
        await async_session.flush()

        await veterinarians.delete_veterinarian(
            async_session, admin_principal, veterinarian.id
        )

        record_vet = await async_session.scalar(
            select(HealthRecord.veterinarian_id).where(HealthRecord.id == record.id)
        )
        pet_vet = await async_session.scalar(
            select(Pet.veterinarian_id).where(Pet.id == pet.id)
        )
        appointment_count = await async_session.scalar(
            select(func.count()).select_from(Appointment)
        )
        assert record_vet is None
        assert pet_vet is None
        assert appointment_count == 0

        with pytest.raises(ResourceNotFoundException):
            await veterinarians.get_veterinarian(
                async_session, admin_principal, veterinarian.id
            )
