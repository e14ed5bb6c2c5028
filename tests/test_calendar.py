"""
Tests for calendar and dashboard aggregation.
"""

from datetime import date, datetime, time, timedelta, timezone

import pytest
from hypothesis import given, settings, strategies as st

from petpal_core.exceptions import ForbiddenException, ResourceNotFoundException
from petpal_core.models import Appointment, AppointmentStatus, HealthRecord, Medication
from petpal_core.schemas import EVENT_COLORS, CalendarEvent, EventType
from petpal_core.services import appointments, calendar, medications
from petpal_core.services.calendar import (
    appointment_event,
    event_sort_key,
    medication_event,
    sort_events,
    vaccination_event,
)

from .conftest import (
    NOW,
    TODAY,
    AppointmentFactory,
    HealthRecordFactory,
    MedicationFactory,
    PetFactory,
    WeightFactory,
)

DAY0 = datetime(2024, 3, 10, tzinfo=timezone.utc)


def make_event(event_date: date, event_time, event_id: int = 1) -> CalendarEvent:
    return CalendarEvent(
        id=event_id,
        event_type=EventType.APPOINTMENT,
        title="Checkup - Buddy",
        event_date=event_date,
        event_time=event_time,
        pet_id=1,
        pet_name="Buddy",
        display_color=EVENT_COLORS[EventType.APPOINTMENT],
    )


class TestEventOrdering:
    def test_untimed_events_come_first_on_their_date(self):
        timed = make_event(date(2024, 3, 10), time(0, 0), 1)
        untimed = make_event(date(2024, 3, 10), None, 2)

        assert [e.id for e in sort_events([timed, untimed])] == [2, 1]

    def test_earlier_date_wins_over_time(self):
        late_first_day = make_event(date(2024, 3, 10), time(23, 0), 1)
        untimed_next_day = make_event(date(2024, 3, 11), None, 2)

        assert [e.id for e in sort_events([untimed_next_day, late_first_day])] == [
            1,
            2,
        ]


class TestEventProjection:
    """Event titles and descriptions keep the client-facing text layout."""

    def test_medication_description_keeps_separator_without_instructions(self):
        medication = Medication(
            id=3,
            pet_id=1,
            name="Carprofen",
            dosage="25mg",
            instructions=None,
            reminder_time=time(9, 0),
            next_reminder_due=datetime(2024, 3, 11, 9, 0, tzinfo=timezone.utc),
        )

        event = medication_event(medication, "Buddy")

        assert event.title == "Medication: Carprofen - Buddy"
        assert event.description == "25mg, "
        assert event.event_date == date(2024, 3, 11)

    def test_medication_description_joins_dosage_and_instructions(self):
        medication = Medication(
            id=3,
            pet_id=1,
            name="Carprofen",
            dosage="25mg",
            instructions="With food",
            next_reminder_due=datetime(2024, 3, 11, 9, 0, tzinfo=timezone.utc),
        )

        assert medication_event(medication, "Buddy").description == "25mg, With food"

    def test_missing_notes_become_empty_descriptions(self):
        appointment = Appointment(
            id=4,
            pet_id=1,
            appointment_date=date(2024, 3, 17),
            appointment_time=time(10, 0),
            appointment_type="Checkup",
            notes=None,
        )
        record = HealthRecord(
            id=5,
            pet_id=1,
            record_type="Vaccination",
            description="Rabies",
            due_date=date(2024, 3, 20),
            notes=None,
        )

        assert appointment_event(appointment, "Buddy").description == ""
        vaccination = vaccination_event(record, "Buddy")
        assert vaccination.title == "Vaccination Due: Rabies - Buddy"
        assert vaccination.description == ""


event_strategy = st.builds(
    make_event,
    event_date=st.dates(min_value=date(2024, 1, 1), max_value=date(2024, 12, 31)),
    event_time=st.one_of(st.none(), st.times()),
)


class TestCalendarOrderingProperty:
    @settings(max_examples=100)
    @given(events=st.lists(event_strategy, max_size=30))
    def test_sorted_feed_is_non_decreasing(self, events):
        ordered = sort_events(events)

        for earlier, later in zip(ordered, ordered[1:]):
            assert earlier.event_date <= later.event_date
            if earlier.event_date == later.event_date:
                assert event_sort_key(earlier) <= event_sort_key(later)
                if earlier.event_time is not None:
                    assert later.event_time is not None
                    assert earlier.event_time <= later.event_time


class TestBuddyCalendarScenario:
    """
    Buddy has an appointment a week out and a 09:00 daily medication
    reminder that was acknowledged at 09:30 on the first day.
    """

    async def test_calendar_orders_reminder_before_appointment(
        self, async_session, pet, owner_principal, admin_principal, veterinarian
    ):
        await appointments.create_appointment(
            async_session,
            owner_principal,
            pet.id,
            {
                "veterinarian_id": veterinarian.id,
                "appointment_date": DAY0.date() + timedelta(days=7),
                "appointment_time": time(14, 0),
                "appointment_type": "Checkup",
            },
        )
        medication = await medications.create_medication(
            async_session,
            owner_principal,
            pet.id,
            {
                "name": "Carprofen",
                "dosage": "25mg",
                "frequency": "Once daily",
                "start_date": DAY0.date(),
                "reminder_enabled": True,
                "reminder_time": time(9, 0),
            },
            now=DAY0.replace(hour=8),
        )
        assert medication.next_reminder_due == DAY0.replace(hour=9)

        acknowledged = await medications.mark_reminder_sent(
            async_session,
            admin_principal,
            pet.id,
            medication.id,
            now=DAY0.replace(hour=9, minute=30),
        )
        assert acknowledged.next_reminder_due == DAY0.replace(hour=9) + timedelta(
            days=1
        )

        events = await calendar.get_calendar(
            async_session,
            owner_principal,
            pet_id=pet.id,
            start=DAY0,
            end=DAY0 + timedelta(days=10),
        )

        assert [e.event_type for e in events] == [
            EventType.MEDICATION,
            EventType.APPOINTMENT,
        ]
        assert events[0].event_date == DAY0.date() + timedelta(days=1)
        assert events[0].title == f"Medication: Carprofen - {pet.name}"
        assert events[1].event_date == DAY0.date() + timedelta(days=7)
        assert events[1].display_color == EVENT_COLORS[EventType.APPOINTMENT]


class TestBuildCalendar:
    async def test_cancelled_and_out_of_window_rows_are_excluded(
        self, async_session, pet, veterinarian
    ):
        await AppointmentFactory.create(
            async_session, pet, veterinarian, status=AppointmentStatus.CANCELLED.value
        )
        await AppointmentFactory.create(
            async_session,
            pet,
            veterinarian,
            appointment_date=TODAY + timedelta(days=200),
        )
        kept = await AppointmentFactory.create(async_session, pet, veterinarian)

        events = await calendar.build_calendar(async_session, [pet.id], now=NOW)

        assert [e.id for e in events] == [kept.id]

    async def test_vaccinations_due_in_window_are_untimed_events(
        self, async_session, pet
    ):
        record = await HealthRecordFactory.create_vaccination(
            async_session, pet, due_date=TODAY + timedelta(days=5)
        )
        await HealthRecordFactory.create(
            async_session, pet, due_date=TODAY + timedelta(days=5)
        )

        events = await calendar.build_calendar(async_session, [pet.id], now=NOW)

        assert len(events) == 1
        assert events[0].id == record.id
        assert events[0].event_type == EventType.VACCINATION
        assert events[0].event_time is None
        assert events[0].title == f"Vaccination Due: Rabies - {pet.name}"

    async def test_disabled_reminders_do_not_appear(self, async_session, pet):
        await MedicationFactory.create(
            async_session,
            pet,
            reminder_enabled=False,
            next_reminder_due=NOW + timedelta(hours=2),
        )

        assert await calendar.build_calendar(async_session, [pet.id], now=NOW) == []

    async def test_no_pets_gives_empty_feed(self, async_session):
        assert await calendar.build_calendar(async_session, [], now=NOW) == []

    async def test_stranger_cannot_read_pet_calendar(
        self, async_session, pet, stranger_principal
    ):
        with pytest.raises(ForbiddenException):
            await calendar.get_calendar(async_session, stranger_principal, pet.id)

    async def test_user_calendar_covers_owned_pets_only(
        self, async_session, pet, owner, stranger, owner_principal, veterinarian
    ):
        other_pet = await PetFactory.create(async_session, owners=[stranger])
        mine = await AppointmentFactory.create(async_session, pet, veterinarian)
        await AppointmentFactory.create(async_session, other_pet, veterinarian)

        events = await calendar.get_calendar(async_session, owner_principal, now=NOW)

        assert [e.id for e in events] == [mine.id]

    async def test_veterinarian_calendar_is_not_widened(
        self, async_session, pet, vet_principal, admin_principal, veterinarian
    ):
        booked = await AppointmentFactory.create(async_session, pet, veterinarian)

        assert await calendar.get_calendar(async_session, vet_principal, now=NOW) == []
        with pytest.raises(ForbiddenException):
            await calendar.get_calendar(async_session, vet_principal, pet.id)

        everything = await calendar.get_calendar(
            async_session, admin_principal, now=NOW
        )
        assert [e.id for e in everything] == [booked.id]


class TestDashboards:
    async def test_user_dashboard_counts_match_event_list(
        self, async_session, pet, owner, veterinarian
    ):
        second_pet = await PetFactory.create(async_session, owners=[owner], name="Max")
        await AppointmentFactory.create(async_session, pet, veterinarian)
        await AppointmentFactory.create(
            async_session, pet, veterinarian, appointment_date=TODAY + timedelta(days=9)
        )
        await AppointmentFactory.create(async_session, second_pet, veterinarian)
        await HealthRecordFactory.create_vaccination(async_session, second_pet)
        await MedicationFactory.create(async_session, pet)

        dashboard = await calendar.build_user_dashboard(async_session, owner.id, NOW)

        assert dashboard.total_pets == 2
        assert dashboard.user_name == owner.full_name
        for summary in dashboard.pets:
            appointment_events = [
                e
                for e in dashboard.upcoming_events
                if e.pet_id == summary.pet_id
                and e.event_type == EventType.APPOINTMENT
            ]
            vaccination_events = [
                e
                for e in dashboard.upcoming_events
                if e.pet_id == summary.pet_id
                and e.event_type == EventType.VACCINATION
            ]
            assert summary.upcoming_appointments_count == len(appointment_events)
            assert summary.upcoming_vaccinations_count == len(vaccination_events)
        assert dashboard.total_upcoming_appointments == 3
        assert dashboard.total_upcoming_vaccinations == 1
        assert dashboard.total_active_medications == 1

    async def test_user_dashboard_for_missing_profile(self, async_session):
        with pytest.raises(ResourceNotFoundException):
            await calendar.build_user_dashboard(async_session, 999, NOW)

    async def test_pet_dashboard_details_agree_with_counts(
        self, async_session, pet, veterinarian
    ):
        pet.veterinarian_id = veterinarian.id
        await AppointmentFactory.create(async_session, pet, veterinarian)
        await MedicationFactory.create(async_session, pet)
        await MedicationFactory.create(
            async_session, pet, name="Old course", end_date=TODAY - timedelta(days=1)
        )
        await MedicationFactory.create(
            async_session, pet, name="Paused", is_active=False
        )
        await WeightFactory.create(async_session, pet)
        await HealthRecordFactory.create(async_session, pet, veterinarian=veterinarian)

        dashboard = await calendar.build_pet_dashboard(async_session, pet.id, NOW)

        assert dashboard.pet_name == "Buddy"
        assert dashboard.veterinarian_name == "Sam Smith"
        assert dashboard.upcoming_appointments_count == len(
            dashboard.upcoming_appointments
        )
        assert dashboard.active_medications_count == len(dashboard.active_medications)
        assert [m.name for m in dashboard.active_medications] == ["Carprofen"]
        assert dashboard.upcoming_appointments[0].veterinarian_name == "Sam Smith"
        assert len(dashboard.recent_weight_records) == 1
        assert dashboard.recent_health_records[0].veterinarian_name == "Sam Smith"

    async def test_pet_dashboard_requires_read_access(
        self, async_session, pet, co_owner_principal, stranger_principal
    ):
        dashboard = await calendar.get_pet_dashboard(
            async_session, co_owner_principal, pet.id, NOW
        )
        assert dashboard.pet_id == pet.id

        with pytest.raises(ForbiddenException):
            await calendar.get_pet_dashboard(
                async_session, stranger_principal, pet.id, NOW
            )

    async def test_pet_dashboard_is_owner_only_for_veterinarians(
        self, async_session, pet, vet_principal
    ):
        with pytest.raises(ForbiddenException):
            await calendar.get_pet_dashboard(async_session, vet_principal, pet.id, NOW)
