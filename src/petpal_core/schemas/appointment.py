"""
Appointment Pydantic schemas for validation and serialization.
"""

from datetime import date, datetime, time
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..models import Appointment
from .base import display_name


class AppointmentCreate(BaseModel):
    """
    Schema for booking an appointment.

    New appointments always start out ``Scheduled``; status changes go
    through ``AppointmentStatusUpdate``.
    """

    model_config = ConfigDict(validate_assignment=True, str_strip_whitespace=True)

    veterinarian_id: int = Field(..., description="Attending veterinarian", gt=0)
    appointment_date: date = Field(..., description="Day of the appointment")
    appointment_time: time = Field(..., description="Time of day")
    appointment_type: str = Field(
        ...,
        description="Checkup, Vaccination, Surgery, ...",
        min_length=1,
        max_length=100,
    )
    notes: Optional[str] = None


class AppointmentUpdate(BaseModel):
    """Schema for rescheduling or editing an appointment."""

    model_config = ConfigDict(validate_assignment=True, str_strip_whitespace=True)

    veterinarian_id: Optional[int] = Field(None, gt=0)
    appointment_date: Optional[date] = None
    appointment_time: Optional[time] = None
    appointment_type: Optional[str] = Field(None, min_length=1, max_length=100)
    notes: Optional[str] = None
    status: Optional[str] = Field(None, min_length=1, max_length=30)

    @model_validator(mode="after")
    def validate_at_least_one_field(self) -> "AppointmentUpdate":
        if not self.model_fields_set:
            raise ValueError("At least one field must be provided for update")
        for field_name in self.model_fields_set:
            if field_name != "notes" and getattr(self, field_name) is None:
                raise ValueError(f"{field_name} cannot be cleared")
        return self


class AppointmentStatusUpdate(BaseModel):
    """Schema for changing only the appointment status."""

    model_config = ConfigDict(str_strip_whitespace=True)

    status: str = Field(..., min_length=1, max_length=30)


class AppointmentResponse(BaseModel):
    """Schema for appointment response data."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    pet_id: int
    pet_name: Optional[str] = None
    veterinarian_id: int
    veterinarian_name: Optional[str] = None
    appointment_date: date
    appointment_time: time
    appointment_type: str
    notes: Optional[str] = None
    status: str
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_model(cls, appointment: Appointment) -> "AppointmentResponse":
        response = cls.model_validate(appointment)
        response.pet_name = appointment.pet.name if appointment.pet else None
        response.veterinarian_name = display_name(appointment.veterinarian)
        return response
