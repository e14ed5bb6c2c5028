"""
Dashboard and calendar schemas.

``CalendarEvent`` is the single display shape that appointments, medication
reminders and vaccination due dates are projected into.
"""

import enum
from datetime import date, datetime, time
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class EventType(str, enum.Enum):
    """Source of a calendar event."""

    APPOINTMENT = "Appointment"
    MEDICATION = "Medication"
    VACCINATION = "Vaccination"


EVENT_COLORS = {
    EventType.APPOINTMENT: "#4285F4",
    EventType.MEDICATION: "#EA4335",
    EventType.VACCINATION: "#FBBC05",
}


class CalendarEvent(BaseModel):
    """A dated entry in the merged calendar feed."""

    model_config = ConfigDict(frozen=True)

    id: int = Field(..., description="Id of the source row")
    event_type: EventType
    title: str
    description: Optional[str] = None
    event_date: date
    event_time: Optional[time] = None
    pet_id: int
    pet_name: str
    display_color: str


class HealthRecordSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    record_type: str
    description: str
    record_date: date
    due_date: Optional[date] = None
    veterinarian_name: Optional[str] = None


class MedicationSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    dosage: str
    frequency: str
    start_date: date
    end_date: Optional[date] = None
    reminder_enabled: bool
    next_reminder_due: Optional[datetime] = None


class AppointmentSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    appointment_date: date
    appointment_time: time
    appointment_type: str
    veterinarian_name: Optional[str] = None
    status: str


class WeightSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    weight_value: Decimal
    weight_unit: str
    date: date


class PetSummary(BaseModel):
    """One pet's card on the user dashboard."""

    pet_id: int
    pet_name: str
    species: str
    breed: Optional[str] = None
    image_url: Optional[str] = None
    upcoming_appointments_count: int = 0
    active_medications_count: int = 0
    upcoming_vaccinations_count: int = 0


class PetDashboard(BaseModel):
    """Everything shown on a single pet's dashboard."""

    pet_id: int
    pet_name: str
    species: str
    breed: Optional[str] = None
    date_of_birth: Optional[date] = None
    current_weight: Optional[Decimal] = None
    image_url: Optional[str] = None
    veterinarian_name: Optional[str] = None
    upcoming_appointments_count: int
    active_medications_count: int
    upcoming_vaccinations_count: int
    recent_health_records: List[HealthRecordSummary] = Field(default_factory=list)
    active_medications: List[MedicationSummary] = Field(default_factory=list)
    upcoming_appointments: List[AppointmentSummary] = Field(default_factory=list)
    recent_weight_records: List[WeightSummary] = Field(default_factory=list)
    upcoming_events: List[CalendarEvent] = Field(default_factory=list)


class UserDashboard(BaseModel):
    """Summary of every pet a user owns plus the merged upcoming feed."""

    user_profile_id: int
    user_name: str
    pets: List[PetSummary] = Field(default_factory=list)
    upcoming_events: List[CalendarEvent] = Field(default_factory=list)
    total_pets: int = 0
    total_upcoming_appointments: int = 0
    total_active_medications: int = 0
    total_upcoming_vaccinations: int = 0
