"""
Calendar and dashboard aggregation.

Appointments, medication reminders and vaccination due dates are fetched once
per request into an ``EventSources`` bundle. The merged event feed, the
per-pet summary counts and the dashboard detail lists are all derived from
that same bundle, so a count can never disagree with the list next to it.

Events are ordered by date, then by time of day; events without a time of
day come first on their date.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..authorization import Action, Principal, ResourceKind
from ..exceptions import ResourceNotFoundException
from ..models import (
    VACCINATION_RECORD_TYPE,
    Appointment,
    AppointmentStatus,
    HealthRecord,
    Medication,
    Pet,
    PetOwner,
    UserProfile,
    Weight,
)
from ..schemas import (
    EVENT_COLORS,
    AppointmentSummary,
    CalendarEvent,
    EventType,
    HealthRecordSummary,
    MedicationSummary,
    PetDashboard,
    PetSummary,
    UserDashboard,
    WeightSummary,
    display_name,
)
from ..utils.datetime_utils import add_months, date_window, ensure_utc, get_current_utc
from .base import (
    authorize_pet,
    owned_pet_ids,
    resolve_profile,
    resolve_veterinarian,
)

logger = logging.getLogger(__name__)

CALENDAR_WINDOW_MONTHS = 3
DASHBOARD_WINDOW_MONTHS = 1
RECENT_ITEMS_LIMIT = 5


@dataclass
class EventSources:
    """
    Rows feeding the calendar for a set of pets and a window.

    ``medications`` holds every active medication of those pets; the reminder
    window filter is applied when projecting events.
    """

    start: datetime
    end: datetime
    appointments: List[Appointment] = field(default_factory=list)
    medications: List[Medication] = field(default_factory=list)
    vaccinations: List[HealthRecord] = field(default_factory=list)

    def for_pet(self, pet_id: int) -> "EventSources":
        return EventSources(
            start=self.start,
            end=self.end,
            appointments=[a for a in self.appointments if a.pet_id == pet_id],
            medications=[m for m in self.medications if m.pet_id == pet_id],
            vaccinations=[v for v in self.vaccinations if v.pet_id == pet_id],
        )

    def due_reminders(self) -> List[Medication]:
        """Active medications whose next reminder falls inside the window."""
        return [
            medication
            for medication in self.medications
            if medication.is_active
            and medication.reminder_enabled
            and medication.next_reminder_due is not None
            and self.start <= ensure_utc(medication.next_reminder_due) <= self.end
        ]

    def current_medications(self) -> List[Medication]:
        today = self.start.date()
        return [m for m in self.medications if m.is_current(today)]


def appointment_event(appointment: Appointment, pet_name: str) -> CalendarEvent:
    return CalendarEvent(
        id=appointment.id,
        event_type=EventType.APPOINTMENT,
        title=f"{appointment.appointment_type} - {pet_name}",
        description=appointment.notes or "",
        event_date=appointment.appointment_date,
        event_time=appointment.appointment_time,
        pet_id=appointment.pet_id,
        pet_name=pet_name,
        display_color=EVENT_COLORS[EventType.APPOINTMENT],
    )


def medication_event(medication: Medication, pet_name: str) -> CalendarEvent:
    return CalendarEvent(
        id=medication.id,
        event_type=EventType.MEDICATION,
        title=f"Medication: {medication.name} - {pet_name}",
        description=f"{medication.dosage}, {medication.instructions or ''}",
        event_date=ensure_utc(medication.next_reminder_due).date(),
        event_time=medication.reminder_time,
        pet_id=medication.pet_id,
        pet_name=pet_name,
        display_color=EVENT_COLORS[EventType.MEDICATION],
    )


def vaccination_event(record: HealthRecord, pet_name: str) -> CalendarEvent:
    return CalendarEvent(
        id=record.id,
        event_type=EventType.VACCINATION,
        title=f"Vaccination Due: {record.description} - {pet_name}",
        description=record.notes or "",
        event_date=record.due_date,
        event_time=None,
        pet_id=record.pet_id,
        pet_name=pet_name,
        display_color=EVENT_COLORS[EventType.VACCINATION],
    )


def event_sort_key(event: CalendarEvent) -> Tuple[date, int, time]:
    """Date, then untimed before timed, then time of day."""
    if event.event_time is None:
        return (event.event_date, 0, time.min)
    return (event.event_date, 1, event.event_time)


def sort_events(events: Iterable[CalendarEvent]) -> List[CalendarEvent]:
    return sorted(events, key=event_sort_key)


def project_events(
    sources: EventSources, pet_names: Mapping[int, str]
) -> List[CalendarEvent]:
    """Project every source row into a ``CalendarEvent`` and order the feed."""
    events = [
        appointment_event(a, pet_names.get(a.pet_id, "")) for a in sources.appointments
    ]
    events.extend(
        medication_event(m, pet_names.get(m.pet_id, ""))
        for m in sources.due_reminders()
    )
    events.extend(
        vaccination_event(v, pet_names.get(v.pet_id, "")) for v in sources.vaccinations
    )
    return sort_events(events)


def summarize_counts(
    sources: EventSources, pet_ids: Iterable[int]
) -> Dict[int, Dict[str, int]]:
    """Group the fetched rows by pet into the three dashboard counters."""
    counts = {
        pet_id: {
            "upcoming_appointments_count": 0,
            "active_medications_count": 0,
            "upcoming_vaccinations_count": 0,
        }
        for pet_id in pet_ids
    }
    for appointment in sources.appointments:
        if appointment.pet_id in counts:
            counts[appointment.pet_id]["upcoming_appointments_count"] += 1
    for medication in sources.current_medications():
        if medication.pet_id in counts:
            counts[medication.pet_id]["active_medications_count"] += 1
    for record in sources.vaccinations:
        if record.pet_id in counts:
            counts[record.pet_id]["upcoming_vaccinations_count"] += 1
    return counts


async def fetch_sources(
    session: AsyncSession, pet_ids: Sequence[int], start: datetime, end: datetime
) -> EventSources:
    """
    Load the three event sources for ``pet_ids`` within ``[start, end]``.

    Appointments and vaccinations are matched on their calendar date, so an
    appointment later on the start day is included even if ``start`` has a
    time component.
    """
    start, end = ensure_utc(start), ensure_utc(end)
    sources = EventSources(start=start, end=end)
    if not pet_ids:
        return sources

    start_day, end_day = date_window(start, end)

    appointments = await session.execute(
        select(Appointment)
        .options(selectinload(Appointment.veterinarian))
        .where(
            Appointment.pet_id.in_(pet_ids),
            Appointment.appointment_date >= start_day,
            Appointment.appointment_date <= end_day,
            Appointment.status != AppointmentStatus.CANCELLED.value,
        )
        .order_by(Appointment.appointment_date, Appointment.appointment_time)
    )
    sources.appointments = list(appointments.scalars().all())

    medications = await session.execute(
        select(Medication)
        .where(Medication.pet_id.in_(pet_ids), Medication.is_active.is_(True))
        .order_by(Medication.name, Medication.id)
    )
    sources.medications = list(medications.scalars().all())

    vaccinations = await session.execute(
        select(HealthRecord)
        .where(
            HealthRecord.pet_id.in_(pet_ids),
            HealthRecord.record_type == VACCINATION_RECORD_TYPE,
            HealthRecord.due_date.is_not(None),
            HealthRecord.due_date >= start_day,
            HealthRecord.due_date <= end_day,
        )
        .order_by(HealthRecord.due_date, HealthRecord.id)
    )
    sources.vaccinations = list(vaccinations.scalars().all())

    return sources


async def _pet_names(session: AsyncSession, pet_ids: Sequence[int]) -> Dict[int, str]:
    if not pet_ids:
        return {}
    result = await session.execute(select(Pet.id, Pet.name).where(Pet.id.in_(pet_ids)))
    return {pet_id: name for pet_id, name in result.all()}


async def build_calendar(
    session: AsyncSession,
    pet_ids: Sequence[int],
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    now: Optional[datetime] = None,
) -> List[CalendarEvent]:
    """
    Merged, ordered event feed for ``pet_ids``.

    The window defaults to ``[now, now + 3 months]``.
    """
    start = ensure_utc(start or now or get_current_utc())
    if end is None:
        end = add_months(start, CALENDAR_WINDOW_MONTHS)
    end = ensure_utc(end)
    sources = await fetch_sources(session, pet_ids, start, end)
    return project_events(sources, await _pet_names(session, pet_ids))


async def build_user_dashboard(
    session: AsyncSession, user_profile_id: int, now: Optional[datetime] = None
) -> UserDashboard:
    """
    Dashboard over every pet owned by ``user_profile_id``.

    Raises:
        ResourceNotFoundException: If the profile does not exist
    """
    profile = await session.get(UserProfile, user_profile_id)
    if profile is None:
        raise ResourceNotFoundException("UserProfile", user_profile_id)

    now = ensure_utc(now or get_current_utc())
    result = await session.execute(
        select(Pet)
        .join(PetOwner)
        .where(PetOwner.user_profile_id == user_profile_id)
        .order_by(Pet.name, Pet.id)
    )
    pets = list(result.scalars().all())
    pet_ids = [pet.id for pet in pets]

    sources = await fetch_sources(
        session, pet_ids, now, add_months(now, DASHBOARD_WINDOW_MONTHS)
    )
    counts = summarize_counts(sources, pet_ids)
    summaries = [
        PetSummary(
            pet_id=pet.id,
            pet_name=pet.name,
            species=pet.species,
            breed=pet.breed,
            image_url=pet.image_url,
            **counts[pet.id],
        )
        for pet in pets
    ]

    return UserDashboard(
        user_profile_id=profile.id,
        user_name=profile.full_name,
        pets=summaries,
        upcoming_events=project_events(sources, {pet.id: pet.name for pet in pets}),
        total_pets=len(pets),
        total_upcoming_appointments=sum(
            s.upcoming_appointments_count for s in summaries
        ),
        total_active_medications=sum(s.active_medications_count for s in summaries),
        total_upcoming_vaccinations=sum(
            s.upcoming_vaccinations_count for s in summaries
        ),
    )


async def build_pet_dashboard(
    session: AsyncSession, pet_id: int, now: Optional[datetime] = None
) -> PetDashboard:
    """
    Dashboard for one pet: profile facts, recent history and upcoming events.

    Raises:
        ResourceNotFoundException: If the pet does not exist
    """
    pet = await session.get(Pet, pet_id)
    if pet is None:
        raise ResourceNotFoundException("Pet", pet_id)
    veterinarian = await resolve_veterinarian(session, pet.veterinarian_id)

    now = ensure_utc(now or get_current_utc())
    sources = await fetch_sources(
        session, [pet.id], now, add_months(now, DASHBOARD_WINDOW_MONTHS)
    )
    counts = summarize_counts(sources, [pet.id])[pet.id]

    records = await session.execute(
        select(HealthRecord)
        .options(selectinload(HealthRecord.veterinarian))
        .where(HealthRecord.pet_id == pet.id)
        .order_by(HealthRecord.record_date.desc(), HealthRecord.id.desc())
        .limit(RECENT_ITEMS_LIMIT)
    )
    weights = await session.execute(
        select(Weight)
        .where(Weight.pet_id == pet.id)
        .order_by(Weight.date.desc(), Weight.id.desc())
        .limit(RECENT_ITEMS_LIMIT)
    )

    return PetDashboard(
        pet_id=pet.id,
        pet_name=pet.name,
        species=pet.species,
        breed=pet.breed,
        date_of_birth=pet.date_of_birth,
        current_weight=pet.weight,
        image_url=pet.image_url,
        veterinarian_name=display_name(veterinarian),
        recent_health_records=[
            HealthRecordSummary(
                id=record.id,
                record_type=record.record_type,
                description=record.description,
                record_date=record.record_date,
                due_date=record.due_date,
                veterinarian_name=display_name(record.veterinarian),
            )
            for record in records.scalars().all()
        ],
        active_medications=[
            MedicationSummary.model_validate(medication)
            for medication in sources.current_medications()
        ],
        upcoming_appointments=[
            AppointmentSummary(
                id=appointment.id,
                appointment_date=appointment.appointment_date,
                appointment_time=appointment.appointment_time,
                appointment_type=appointment.appointment_type,
                veterinarian_name=display_name(appointment.veterinarian),
                status=appointment.status,
            )
            for appointment in sources.appointments
        ],
        recent_weight_records=[
            WeightSummary.model_validate(weight) for weight in weights.scalars().all()
        ],
        upcoming_events=project_events(sources, {pet.id: pet.name}),
        **counts,
    )


async def get_user_dashboard(
    session: AsyncSession,
    principal: Optional[Principal],
    now: Optional[datetime] = None,
) -> UserDashboard:
    """Dashboard for the calling user."""
    profile = await resolve_profile(session, principal)
    return await build_user_dashboard(session, profile.id, now)


async def get_pet_dashboard(
    session: AsyncSession,
    principal: Optional[Principal],
    pet_id: int,
    now: Optional[datetime] = None,
) -> PetDashboard:
    await authorize_pet(session, principal, pet_id, Action.READ, ResourceKind.PET)
    return await build_pet_dashboard(session, pet_id, now)


async def get_calendar(
    session: AsyncSession,
    principal: Optional[Principal],
    pet_id: Optional[int] = None,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    now: Optional[datetime] = None,
) -> List[CalendarEvent]:
    """
    Calendar for one pet, or for every pet visible to the caller.

    Admins see all pets when no pet is named.
    """
    if pet_id is not None:
        await authorize_pet(session, principal, pet_id, Action.READ, ResourceKind.PET)
        pet_ids: Sequence[int] = [pet_id]
    else:
        profile = await resolve_profile(session, principal)
        pet_ids = await owned_pet_ids(session, profile, include_all=principal.is_admin)
    return await build_calendar(session, pet_ids, start, end, now)
