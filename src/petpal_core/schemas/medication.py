"""
Medication Pydantic schemas, including reminder configuration.
"""

from datetime import date, datetime, time
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..models import Medication


class MedicationCreate(BaseModel):
    """Schema for prescribing a medication."""

    model_config = ConfigDict(validate_assignment=True, str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=200)
    dosage: str = Field(..., description="e.g. '10mg'", min_length=1, max_length=100)
    frequency: str = Field(
        ..., description="e.g. 'Twice daily'", min_length=1, max_length=100
    )
    start_date: date
    end_date: Optional[date] = None
    instructions: Optional[str] = None
    prescriber: Optional[str] = Field(None, max_length=200)
    is_active: bool = True
    reminder_enabled: bool = False
    reminder_frequency: Optional[str] = Field(None, max_length=50)
    reminder_time: Optional[time] = Field(
        None, description="Daily reminder time (UTC)"
    )

    @model_validator(mode="after")
    def validate_date_range(self) -> "MedicationCreate":
        """End date cannot precede the start date."""
        if self.end_date is not None and self.end_date < self.start_date:
            raise ValueError("End date cannot be before start date")
        return self


class MedicationUpdate(BaseModel):
    """Schema for updating a medication; unset fields are left alone."""

    model_config = ConfigDict(validate_assignment=True, str_strip_whitespace=True)

    name: Optional[str] = Field(None, min_length=1, max_length=200)
    dosage: Optional[str] = Field(None, min_length=1, max_length=100)
    frequency: Optional[str] = Field(None, min_length=1, max_length=100)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    instructions: Optional[str] = None
    prescriber: Optional[str] = Field(None, max_length=200)
    is_active: Optional[bool] = None
    reminder_enabled: Optional[bool] = None
    reminder_frequency: Optional[str] = Field(None, max_length=50)
    reminder_time: Optional[time] = None

    @model_validator(mode="after")
    def validate_at_least_one_field(self) -> "MedicationUpdate":
        if not self.model_fields_set:
            raise ValueError("At least one field must be provided for update")
        required_fields = (
            "name",
            "dosage",
            "frequency",
            "start_date",
            "is_active",
            "reminder_enabled",
        )
        for required in required_fields:
            if required in self.model_fields_set and getattr(self, required) is None:
                raise ValueError(f"{required} cannot be cleared")
        return self


class MedicationReminderUpdate(BaseModel):
    """Schema for the reminder-settings endpoint."""

    model_config = ConfigDict(str_strip_whitespace=True)

    reminder_enabled: bool
    reminder_frequency: Optional[str] = Field(None, max_length=50)
    reminder_time: Optional[time] = None


class MedicationResponse(BaseModel):
    """Schema for medication response data."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    pet_id: int
    pet_name: Optional[str] = None
    name: str
    dosage: str
    frequency: str
    start_date: date
    end_date: Optional[date] = None
    instructions: Optional[str] = None
    prescriber: Optional[str] = None
    is_active: bool
    reminder_enabled: bool
    reminder_frequency: Optional[str] = None
    reminder_time: Optional[time] = None
    last_reminder_sent: Optional[datetime] = None
    next_reminder_due: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_model(cls, medication: Medication) -> "MedicationResponse":
        response = cls.model_validate(medication)
        response.pet_name = medication.pet.name if medication.pet else None
        return response


class MedicationReminderResponse(BaseModel):
    """Reminder state of one medication, as listed for a user."""

    medication_id: int
    medication_name: str
    dosage: str
    pet_id: int
    pet_name: Optional[str] = None
    reminder_enabled: bool
    reminder_frequency: Optional[str] = None
    reminder_time: Optional[time] = None
    last_reminder_sent: Optional[datetime] = None
    next_reminder_due: Optional[datetime] = None

    @classmethod
    def from_model(cls, medication: Medication) -> "MedicationReminderResponse":
        return cls(
            medication_id=medication.id,
            medication_name=medication.name,
            dosage=medication.dosage,
            pet_id=medication.pet_id,
            pet_name=medication.pet.name if medication.pet else None,
            reminder_enabled=medication.reminder_enabled,
            reminder_frequency=medication.reminder_frequency,
            reminder_time=medication.reminder_time,
            last_reminder_sent=medication.last_reminder_sent,
            next_reminder_due=medication.next_reminder_due,
        )
