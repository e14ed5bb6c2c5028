"""
Tests for the medication reminder scheduler.
"""

from datetime import datetime, time, timedelta, timezone

import pytest
from hypothesis import given, settings, strategies as st

from petpal_core.exceptions import InvalidStateException
from petpal_core.models import Medication
from petpal_core.services.reminders import (
    ONE_DAY,
    acknowledge_sent,
    recompute,
    recompute_on_save,
    reminder_snapshot,
)

DAY0 = datetime(2024, 3, 10, tzinfo=timezone.utc)


def make_medication(**kwargs) -> Medication:
    defaults = {
        "name": "Carprofen",
        "dosage": "25mg",
        "frequency": "Once daily",
        "start_date": DAY0.date(),
        "reminder_enabled": True,
        "reminder_time": time(9, 0),
    }
    defaults.update(kwargs)
    return Medication(**defaults)


class TestRecompute:
    def test_slot_later_today(self):
        medication = make_medication()

        due = recompute(medication, DAY0.replace(hour=8))

        assert due == DAY0.replace(hour=9)
        assert medication.next_reminder_due == due

    def test_slot_already_passed_moves_to_tomorrow(self):
        medication = make_medication()

        due = recompute(medication, DAY0.replace(hour=9, minute=30))

        assert due == DAY0.replace(hour=9) + ONE_DAY

    def test_reference_equal_to_slot_is_not_due(self):
        medication = make_medication()

        due = recompute(medication, DAY0.replace(hour=9))

        assert due == DAY0.replace(hour=9) + ONE_DAY

    def test_naive_reference_is_treated_as_utc(self):
        medication = make_medication()

        due = recompute(medication, datetime(2024, 3, 10, 8, 0))

        assert due == DAY0.replace(hour=9)

    @pytest.mark.parametrize(
        "overrides",
        [{"reminder_enabled": False}, {"reminder_time": None}],
    )
    def test_disabled_or_untimed_clears_schedule(self, overrides):
        medication = make_medication(**overrides)
        medication.next_reminder_due = DAY0
        medication.last_reminder_sent = DAY0

        assert recompute(medication, DAY0) is None
        assert medication.next_reminder_due is None
        assert medication.last_reminder_sent is None


class TestRecomputeOnSave:
    def test_create_always_recomputes(self):
        medication = make_medication()

        recompute_on_save(medication, now=DAY0.replace(hour=8))

        assert medication.next_reminder_due == DAY0.replace(hour=9)

    def test_unchanged_reminder_fields_keep_due(self):
        medication = make_medication()
        medication.next_reminder_due = DAY0.replace(hour=9)
        previous = reminder_snapshot(medication)
        medication.dosage = "50mg"

        due = recompute_on_save(medication, previous, now=DAY0.replace(hour=20))

        assert due == DAY0.replace(hour=9)

    def test_changed_reminder_time_recomputes(self):
        medication = make_medication()
        medication.next_reminder_due = DAY0.replace(hour=9)
        previous = reminder_snapshot(medication)
        medication.reminder_time = time(18, 0)

        due = recompute_on_save(medication, previous, now=DAY0.replace(hour=12))

        assert due == DAY0.replace(hour=18)


class TestAcknowledgeSent:
    def test_advances_exactly_one_day(self):
        medication = make_medication()
        medication.next_reminder_due = DAY0.replace(hour=9)
        sent_at = DAY0.replace(hour=9, minute=30)

        due = acknowledge_sent(medication, sent_at)

        assert due == DAY0.replace(hour=9) + ONE_DAY
        assert medication.last_reminder_sent == sent_at

    def test_unscheduled_medication_moves_to_tomorrow(self):
        medication = make_medication()

        due = acknowledge_sent(medication, DAY0.replace(hour=7))

        assert due == (DAY0 + ONE_DAY).replace(hour=9)

    def test_disabled_reminders_are_rejected(self):
        medication = make_medication(reminder_enabled=False)

        with pytest.raises(InvalidStateException) as exc_info:
            acknowledge_sent(medication, DAY0)

        assert exc_info.value.details["rule_name"] == "reminder_enabled"

    def test_late_acknowledgement_diverges_from_recompute(self):
        """
        A reminder acknowledged two days late keeps its slot plus one day,
        which is still in the past, while recomputing at the same instant
        picks the next future slot.
        """
        acknowledged = make_medication()
        acknowledged.next_reminder_due = DAY0.replace(hour=9)
        recomputed = make_medication()
        late = DAY0.replace(hour=10) + timedelta(days=2)

        acknowledge_sent(acknowledged, late)
        recompute(recomputed, late)

        assert acknowledged.next_reminder_due == DAY0.replace(hour=9) + ONE_DAY
        assert acknowledged.next_reminder_due < late
        assert recomputed.next_reminder_due == (late + ONE_DAY).replace(hour=9)


instants = st.datetimes(
    min_value=datetime(2000, 1, 1), max_value=datetime(2100, 1, 1)
).map(lambda value: value.replace(tzinfo=timezone.utc))
times_of_day = st.times()


class TestReminderMonotonicityProperty:
    @settings(max_examples=200)
    @given(reference=instants, reminder_time=times_of_day)
    def test_recompute_is_strictly_in_the_future(self, reference, reminder_time):
        medication = make_medication(reminder_time=reminder_time)

        due = recompute(medication, reference)

        assert due > reference
        assert due - reference <= ONE_DAY
        assert due.time() == reminder_time

    @settings(max_examples=200)
    @given(due=instants, sent_at=instants)
    def test_acknowledge_advances_by_one_day(self, due, sent_at):
        medication = make_medication()
        medication.next_reminder_due = due

        assert acknowledge_sent(medication, sent_at) - due == ONE_DAY
