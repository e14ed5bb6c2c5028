"""
Tests for weight measurements and the pet's current weight.
"""

import asyncio
from datetime import date, timedelta
from decimal import Decimal

import pytest
from hypothesis import given, settings, strategies as st

from petpal_core.database import SessionManager, create_engine
from petpal_core.exceptions import (
    ForbiddenException,
    InvalidInputException,
    ResourceNotFoundException,
    SchemaValidationException,
)
from petpal_core.models import Base, Pet
from petpal_core.services import weights

from .conftest import (
    TEST_DATABASE_URL,
    TODAY,
    PetFactory,
    ProfileFactory,
    WeightFactory,
    principal_for,
)


class TestRecordWeight:
    async def test_new_measurement_becomes_current_weight(
        self, async_session, pet, co_owner_principal
    ):
        created = await weights.create_weight(
            async_session,
            co_owner_principal,
            pet.id,
            {"weight_value": "21.4", "date": TODAY},
        )

        assert created.weight_unit == "kg"
        assert pet.weight == Decimal("21.4")

    async def test_backdated_measurement_does_not_replace_current(
        self, async_session, pet, owner_principal
    ):
        await weights.create_weight(
            async_session, owner_principal, pet.id, {"weight_value": 22, "date": TODAY}
        )
        await weights.create_weight(
            async_session,
            owner_principal,
            pet.id,
            {"weight_value": 18, "date": TODAY - timedelta(days=60)},
        )

        assert pet.weight == Decimal("22")

    async def test_same_day_tie_goes_to_newest_row(
        self, async_session, pet, owner_principal
    ):
        for value in ("20", "20.8"):
            await weights.create_weight(
                async_session,
                owner_principal,
                pet.id,
                {"weight_value": value, "date": TODAY},
            )

        assert pet.weight == Decimal("20.8")

    @pytest.mark.parametrize(
        "payload",
        [
            {"weight_value": "1000", "date": TODAY},
            {"weight_value": "0", "date": TODAY},
            {"weight_value": "10", "weight_unit": "stone", "date": TODAY},
            {"weight_value": "10"},
        ],
    )
    async def test_invalid_measurements_are_rejected(
        self, async_session, pet, owner_principal, payload
    ):
        with pytest.raises(SchemaValidationException):
            await weights.create_weight(async_session, owner_principal, pet.id, payload)

    async def test_pounds_have_their_own_limits(
        self, async_session, pet, owner_principal
    ):
        created = await weights.create_weight(
            async_session,
            owner_principal,
            pet.id,
            {"weight_value": "1500", "weight_unit": "LBS", "date": TODAY},
        )

        assert created.weight_unit == "lbs"

    async def test_stranger_cannot_record(self, async_session, pet, stranger_principal):
        with pytest.raises(ForbiddenException):
            await weights.create_weight(
                async_session,
                stranger_principal,
                pet.id,
                {"weight_value": 20, "date": TODAY},
            )


class TestUpdateAndDeleteWeight:
    async def test_update_date_moves_current_weight(
        self, async_session, pet, owner_principal
    ):
        older = await WeightFactory.create(
            async_session, pet, weight_value=Decimal("19"), date=TODAY - timedelta(1)
        )
        await WeightFactory.create(async_session, pet, weight_value=Decimal("20"))

        await weights.update_weight(
            async_session,
            owner_principal,
            pet.id,
            older.id,
            {"date": TODAY + timedelta(days=1)},
        )

        assert pet.weight == Decimal("19")

    async def test_update_checks_range_against_stored_unit(
        self, async_session, pet, owner_principal
    ):
        weight = await WeightFactory.create(async_session, pet)

        with pytest.raises(InvalidInputException) as exc_info:
            await weights.update_weight(
                async_session,
                owner_principal,
                pet.id,
                weight.id,
                {"weight_value": "1500"},
            )

        assert exc_info.value.details["field"] == "weight_value"

    async def test_update_unit_and_value_together(
        self, async_session, pet, owner_principal
    ):
        weight = await WeightFactory.create(async_session, pet)

        updated = await weights.update_weight(
            async_session,
            owner_principal,
            pet.id,
            weight.id,
            {"weight_value": "1500", "weight_unit": "lbs"},
        )

        assert updated.weight_unit == "lbs"

    async def test_delete_latest_falls_back_to_previous(
        self, async_session, pet, owner_principal
    ):
        await WeightFactory.create(
            async_session, pet, weight_value=Decimal("18"), date=TODAY - timedelta(9)
        )
        latest = await weights.create_weight(
            async_session, owner_principal, pet.id, {"weight_value": 21, "date": TODAY}
        )

        await weights.delete_weight(async_session, owner_principal, pet.id, latest.id)

        assert pet.weight == Decimal("18")

    async def test_deleting_last_measurement_keeps_pet_weight(
        self, async_session, pet, owner_principal
    ):
        only = await weights.create_weight(
            async_session, owner_principal, pet.id, {"weight_value": 21, "date": TODAY}
        )

        await weights.delete_weight(async_session, owner_principal, pet.id, only.id)

        assert pet.weight == Decimal("21")
        assert await weights.list_weights(async_session, owner_principal, pet.id) == []

    async def test_weight_of_another_pet_is_not_found(
        self, async_session, pet, owner, owner_principal
    ):
        other_pet = await PetFactory.create(async_session, owners=[owner])
        foreign = await WeightFactory.create(async_session, other_pet)

        with pytest.raises(ResourceNotFoundException):
            await weights.get_weight(async_session, owner_principal, pet.id, foreign.id)


class TestWeightListings:
    async def test_list_is_newest_first_and_history_chronological(
        self, async_session, pet, owner_principal
    ):
        for offset in (10, 0, 5):
            await WeightFactory.create(
                async_session, pet, date=TODAY - timedelta(days=offset)
            )

        listed = await weights.list_weights(async_session, owner_principal, pet.id)
        history = await weights.weight_history(async_session, owner_principal, pet.id)

        assert [w.date for w in listed] == [
            TODAY,
            TODAY - timedelta(days=5),
            TODAY - timedelta(days=10),
        ]
        assert [w.date for w in history] == list(reversed([w.date for w in listed]))


START = date(2024, 1, 1)

weight_values = st.decimals(
    min_value=Decimal("0.50"), max_value=Decimal("150.00"), places=2
)
operations = st.lists(
    st.one_of(
        st.tuples(st.just("add"), st.integers(0, 30), weight_values),
        st.tuples(st.just("update"), st.integers(0, 30), weight_values),
        st.tuples(st.just("delete"), st.integers(0, 30), st.none()),
    ),
    min_size=1,
    max_size=12,
)


async def replay_weight_operations(ops) -> None:
    """
    Apply ``ops`` through the weight service on a fresh database, checking
    after every step that the pet weight equals the latest measurement.
    """
    engine = create_engine(TEST_DATABASE_URL)
    manager = SessionManager(engine)
    await manager.initialize_database(Base.metadata)
    try:
        async with manager.get_session() as session:
            profile = await ProfileFactory.create(session)
            pet = await PetFactory.create(session, owners=[profile])
            principal = principal_for(profile)
            recorded = {}
            expected = None

            for kind, offset, value in ops:
                day = START + timedelta(days=offset)
                if kind == "add":
                    created = await weights.create_weight(
                        session, principal, pet.id, {"weight_value": value, "date": day}
                    )
                    recorded[created.id] = (day, value)
                elif not recorded:
                    continue
                else:
                    weight_id = sorted(recorded)[offset % len(recorded)]
                    if kind == "update":
                        await weights.update_weight(
                            session,
                            principal,
                            pet.id,
                            weight_id,
                            {"weight_value": value, "date": day},
                        )
                        recorded[weight_id] = (day, value)
                    else:
                        await weights.delete_weight(
                            session, principal, pet.id, weight_id
                        )
                        del recorded[weight_id]

                if recorded:
                    latest = max(recorded, key=lambda i: (recorded[i][0], i))
                    expected = recorded[latest][1]
                current = await session.get(Pet, pet.id)
                assert current.weight == expected
    finally:
        await engine.dispose()


class TestCurrentWeightProperty:
    @settings(max_examples=25, deadline=None)
    @given(ops=operations)
    def test_pet_weight_tracks_latest_measurement(self, ops):
        asyncio.run(replay_weight_operations(ops))
