"""
Tests for health record and vaccination operations.
"""

from datetime import timedelta

import pytest

from petpal_core.exceptions import (
    ForbiddenException,
    InvalidInputException,
    ResourceNotFoundException,
    SchemaValidationException,
)
from petpal_core.models import VACCINATION_RECORD_TYPE
from petpal_core.services import health_records

from .conftest import TODAY, HealthRecordFactory, PetFactory


def checkup_payload(**overrides):
    payload = {
        "record_type": "Checkup",
        "description": "Annual wellness exam",
        "record_date": TODAY,
    }
    payload.update(overrides)
    return payload


class TestClinicalWriteAccess:
    """
    Alice is Buddy's primary owner and Jane a co-owner. Alice records a
    checkup; Jane can read it but not change it.
    """

    async def test_co_owner_reads_but_cannot_edit(
        self, async_session, pet, owner_principal, co_owner_principal
    ):
        created = await health_records.create_health_record(
            async_session, owner_principal, pet.id, checkup_payload()
        )

        seen = await health_records.get_health_record(
            async_session, co_owner_principal, pet.id, created.id
        )
        assert seen.description == "Annual wellness exam"
        assert seen.pet_name == "Buddy"

        with pytest.raises(ForbiddenException) as exc_info:
            await health_records.update_health_record(
                async_session,
                co_owner_principal,
                pet.id,
                created.id,
                {"notes": "Looks great"},
            )
        assert exc_info.value.details["resource"] == "health_record"

    async def test_co_owner_cannot_create_or_delete(
        self, async_session, pet, co_owner_principal
    ):
        record = await HealthRecordFactory.create(async_session, pet)

        with pytest.raises(ForbiddenException):
            await health_records.create_health_record(
                async_session, co_owner_principal, pet.id, checkup_payload()
            )
        with pytest.raises(ForbiddenException):
            await health_records.delete_health_record(
                async_session, co_owner_principal, pet.id, record.id
            )

    async def test_veterinarian_updates_any_pet(
        self, async_session, pet, vet_principal, veterinarian
    ):
        record = await HealthRecordFactory.create(async_session, pet)

        updated = await health_records.update_health_record(
            async_session,
            vet_principal,
            pet.id,
            record.id,
            {"veterinarian_id": veterinarian.id, "notes": "Follow up in spring"},
        )

        assert updated.veterinarian_name == "Sam Smith"
        assert updated.notes == "Follow up in spring"

    async def test_stranger_cannot_read(self, async_session, pet, stranger_principal):
        with pytest.raises(ForbiddenException):
            await health_records.list_health_records(
                async_session, stranger_principal, pet.id
            )


class TestHealthRecords:
    async def test_list_is_newest_first(self, async_session, pet, owner_principal):
        older = await HealthRecordFactory.create(
            async_session, pet, record_date=TODAY - timedelta(days=90)
        )
        newer = await HealthRecordFactory.create(async_session, pet, record_date=TODAY)

        records = await health_records.list_health_records(
            async_session, owner_principal, pet.id
        )

        assert [r.id for r in records] == [newer.id, older.id]

    async def test_due_date_before_record_date_is_rejected_on_create(
        self, async_session, pet, owner_principal
    ):
        with pytest.raises(SchemaValidationException):
            await health_records.create_health_record(
                async_session,
                owner_principal,
                pet.id,
                checkup_payload(due_date=TODAY - timedelta(days=1)),
            )

    async def test_due_date_before_stored_record_date_is_rejected_on_update(
        self, async_session, pet, owner_principal
    ):
        record = await HealthRecordFactory.create(async_session, pet)

        with pytest.raises(InvalidInputException) as exc_info:
            await health_records.update_health_record(
                async_session,
                owner_principal,
                pet.id,
                record.id,
                {"due_date": record.record_date - timedelta(days=1)},
            )

        assert exc_info.value.details["field"] == "due_date"

    async def test_unknown_veterinarian_is_rejected(
        self, async_session, pet, owner_principal
    ):
        with pytest.raises(ResourceNotFoundException):
            await health_records.create_health_record(
                async_session,
                owner_principal,
                pet.id,
                checkup_payload(veterinarian_id=999),
            )

    async def test_record_of_another_pet_is_not_found(
        self, async_session, pet, owner, owner_principal
    ):
        other_pet = await PetFactory.create(async_session, owners=[owner])
        foreign = await HealthRecordFactory.create(async_session, other_pet)

        with pytest.raises(ResourceNotFoundException):
            await health_records.get_health_record(
                async_session, owner_principal, pet.id, foreign.id
            )

    async def test_primary_owner_deletes(self, async_session, pet, owner_principal):
        record = await HealthRecordFactory.create(async_session, pet)

        await health_records.delete_health_record(
            async_session, owner_principal, pet.id, record.id
        )

        assert (
            await health_records.list_health_records(
                async_session, owner_principal, pet.id
            )
            == []
        )


class TestAttachments:
    async def test_attachments_accumulate(
        self, async_session, pet, owner_principal, blob_store
    ):
        record = await HealthRecordFactory.create(async_session, pet)

        await health_records.add_attachment(
            async_session,
            owner_principal,
            pet.id,
            record.id,
            "bloodwork.pdf",
            b"%PDF",
            blob_store,
        )
        updated = await health_records.add_attachment(
            async_session,
            owner_principal,
            pet.id,
            record.id,
            "xray.png",
            b"png",
            blob_store,
        )

        assert len(updated.attachments) == 2
        assert all(
            url.startswith("https://files.test/documents/")
            for url in updated.attachments
        )
        assert updated.attachments[1].endswith(".png")

    async def test_legacy_single_url_is_kept(
        self, async_session, pet, owner_principal, blob_store
    ):
        record = await HealthRecordFactory.create(
            async_session, pet, attachments="https://files.test/documents/old.pdf"
        )

        updated = await health_records.add_attachment(
            async_session,
            owner_principal,
            pet.id,
            record.id,
            "new.txt",
            b"notes",
            blob_store,
        )

        assert updated.attachments[0] == "https://files.test/documents/old.pdf"
        assert len(updated.attachments) == 2

    async def test_disallowed_document_type(
        self, async_session, pet, owner_principal, blob_store
    ):
        record = await HealthRecordFactory.create(async_session, pet)

        with pytest.raises(InvalidInputException):
            await health_records.add_attachment(
                async_session,
                owner_principal,
                pet.id,
                record.id,
                "setup.exe",
                b"MZ",
                blob_store,
            )

        assert blob_store.files == {}


class TestVaccinations:
    async def test_vaccination_pins_record_type(
        self, async_session, pet, owner_principal
    ):
        created = await health_records.create_vaccination(
            async_session,
            owner_principal,
            pet.id,
            {
                "description": "Rabies",
                "record_date": TODAY,
                "due_date": TODAY + timedelta(days=365),
            },
        )
        await HealthRecordFactory.create(async_session, pet)

        vaccinations = await health_records.list_vaccinations(
            async_session, owner_principal, pet.id
        )
        every_record = await health_records.list_health_records(
            async_session, owner_principal, pet.id
        )

        assert created.record_type == VACCINATION_RECORD_TYPE
        assert [v.id for v in vaccinations] == [created.id]
        assert len(every_record) == 2

    async def test_plain_record_is_not_a_vaccination(
        self, async_session, pet, owner_principal
    ):
        record = await HealthRecordFactory.create(async_session, pet)

        with pytest.raises(ResourceNotFoundException):
            await health_records.get_vaccination(
                async_session, owner_principal, pet.id, record.id
            )

    async def test_update_and_delete_vaccination(
        self, async_session, pet, owner_principal
    ):
        record = await HealthRecordFactory.create_vaccination(async_session, pet)

        updated = await health_records.update_vaccination(
            async_session,
            owner_principal,
            pet.id,
            record.id,
            {"description": "Rabies booster"},
        )
        assert updated.description == "Rabies booster"
        assert updated.record_type == VACCINATION_RECORD_TYPE

        await health_records.delete_vaccination(
            async_session, owner_principal, pet.id, record.id
        )
        assert (
            await health_records.list_vaccinations(
                async_session, owner_principal, pet.id
            )
            == []
        )

    async def test_upcoming_window(self, async_session, pet, owner_principal):
        soon = await HealthRecordFactory.create_vaccination(
            async_session, pet, due_date=TODAY + timedelta(days=5)
        )
        await HealthRecordFactory.create_vaccination(
            async_session, pet, due_date=TODAY + timedelta(days=45)
        )
        await HealthRecordFactory.create_vaccination(
            async_session,
            pet,
            record_date=TODAY - timedelta(days=400),
            due_date=TODAY - timedelta(days=35),
        )

        upcoming = await health_records.list_upcoming_vaccinations(
            async_session, owner_principal, pet.id, today=TODAY
        )

        assert [v.id for v in upcoming] == [soon.id]
        assert not upcoming[0].is_overdue

    async def test_overdue_flag(self, async_session, pet, owner_principal):
        overdue = await HealthRecordFactory.create_vaccination(
            async_session,
            pet,
            record_date=TODAY - timedelta(days=400),
            due_date=TODAY - timedelta(days=35),
        )

        vaccination = await health_records.get_vaccination(
            async_session, owner_principal, pet.id, overdue.id
        )

        assert vaccination.is_overdue

    async def test_user_upcoming_covers_owned_pets(
        self, async_session, pet, owner, stranger, owner_principal
    ):
        second = await PetFactory.create(async_session, owners=[owner], name="Max")
        foreign = await PetFactory.create(async_session, owners=[stranger])
        mine = [
            await HealthRecordFactory.create_vaccination(
                async_session, pet, due_date=TODAY + timedelta(days=20)
            ),
            await HealthRecordFactory.create_vaccination(
                async_session, second, due_date=TODAY + timedelta(days=2)
            ),
        ]
        await HealthRecordFactory.create_vaccination(async_session, foreign)

        upcoming = await health_records.list_user_upcoming_vaccinations(
            async_session, owner_principal, today=TODAY
        )

        assert [v.id for v in upcoming] == [mine[1].id, mine[0].id]
        assert {v.pet_name for v in upcoming} == {"Buddy", "Max"}

    async def test_veterinarian_upcoming_covers_every_pet(
        self, async_session, pet, stranger, vet_principal
    ):
        foreign = await PetFactory.create(async_session, owners=[stranger], name="Rex")
        await HealthRecordFactory.create_vaccination(
            async_session, pet, due_date=TODAY + timedelta(days=3)
        )
        await HealthRecordFactory.create_vaccination(
            async_session, foreign, due_date=TODAY + timedelta(days=5)
        )

        upcoming = await health_records.list_user_upcoming_vaccinations(
            async_session, vet_principal, today=TODAY
        )

        assert [v.pet_name for v in upcoming] == ["Buddy", "Rex"]
