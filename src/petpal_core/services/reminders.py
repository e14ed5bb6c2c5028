"""
Medication reminder scheduler.

Two routines maintain ``Medication.next_reminder_due``:

* ``recompute`` derives the next slot from the configured time of day: today
  at ``reminder_time`` if that is still ahead of the reference instant,
  otherwise tomorrow at the same time. It runs when a medication is created,
  when its reminder fields change and when reminder settings are saved.
* ``acknowledge_sent`` runs when an external poller reports that a reminder
  went out. It moves the due instant exactly one day past its previous value.

The two can disagree: a reminder acknowledged late keeps its original slot
plus one day, while a recompute at the same moment would pick the next
future slot. Both behaviours are kept as they are.
"""

import logging
from datetime import datetime, timedelta
from typing import Any, Dict, Mapping, Optional

from ..exceptions import InvalidStateException
from ..models import REMINDER_FIELDS, Medication
from ..utils.datetime_utils import combine_utc, ensure_utc, get_current_utc

logger = logging.getLogger(__name__)

ONE_DAY = timedelta(days=1)


def reminder_snapshot(medication: Medication) -> Dict[str, Any]:
    """Capture the reminder configuration before applying an update."""
    return {field: getattr(medication, field) for field in REMINDER_FIELDS}


def reminder_fields_changed(
    medication: Medication, previous: Mapping[str, Any]
) -> bool:
    return any(
        getattr(medication, field) != previous.get(field) for field in REMINDER_FIELDS
    )


def recompute(medication: Medication, reference: datetime) -> Optional[datetime]:
    """
    Set ``next_reminder_due`` to the first reminder slot after ``reference``.

    Disabled reminders, or reminders without a time of day, clear both the
    due instant and the last-sent marker.

    Returns:
        The new due instant, or None when reminders are off
    """
    if not medication.reminder_enabled or medication.reminder_time is None:
        medication.next_reminder_due = None
        medication.last_reminder_sent = None
        return None

    reference = ensure_utc(reference)
    candidate = combine_utc(reference.date(), medication.reminder_time)
    if candidate <= reference:
        candidate += ONE_DAY

    medication.next_reminder_due = candidate
    return candidate


def recompute_on_save(
    medication: Medication,
    previous: Optional[Mapping[str, Any]] = None,
    now: Optional[datetime] = None,
) -> Optional[datetime]:
    """
    Recompute after a create or update.

    Args:
        medication: The medication being saved
        previous: Reminder snapshot taken before the update; None on create
        now: Reference instant, defaults to the current UTC time

    Returns:
        The due instant after the save
    """
    if previous is not None and not reminder_fields_changed(medication, previous):
        return medication.next_reminder_due
    return recompute(medication, now or get_current_utc())


def acknowledge_sent(
    medication: Medication, now: Optional[datetime] = None
) -> Optional[datetime]:
    """
    Record that a reminder was sent and advance the due instant by one day.

    A medication that was never scheduled is moved to tomorrow's slot.

    Raises:
        InvalidStateException: If reminders are disabled for the medication
    """
    if not medication.reminder_enabled:
        raise InvalidStateException(
            "Reminders are disabled for this medication",
            rule_name="reminder_enabled",
            context={"medication_id": medication.id},
        )

    now = ensure_utc(now or get_current_utc())
    medication.last_reminder_sent = now

    previous_due = medication.next_reminder_due
    if previous_due is not None:
        medication.next_reminder_due = ensure_utc(previous_due) + ONE_DAY
    elif medication.reminder_time is not None:
        medication.next_reminder_due = combine_utc(
            now.date() + ONE_DAY, medication.reminder_time
        )
    else:
        medication.next_reminder_due = None

    logger.debug(
        f"Reminder for medication {medication.id} acknowledged; "
        f"next due {medication.next_reminder_due}"
    )
    return medication.next_reminder_due
