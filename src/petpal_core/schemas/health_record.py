"""
Health record and vaccination Pydantic schemas.

Vaccinations share the health record table; their schemas simply omit
``record_type``, which the service pins to ``"Vaccination"``.
"""

from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..models import HealthRecord
from .base import display_name


class HealthRecordBase(BaseModel):
    """Fields shared by health record create payloads."""

    model_config = ConfigDict(validate_assignment=True, str_strip_whitespace=True)

    description: str = Field(
        ..., description="What was done or observed", min_length=1
    )
    record_date: date = Field(..., description="Date of the visit or procedure")
    due_date: Optional[date] = Field(None, description="Follow-up or booster date")
    veterinarian_id: Optional[int] = Field(None, gt=0)
    notes: Optional[str] = None

    @model_validator(mode="after")
    def validate_due_date(self) -> "HealthRecordBase":
        """A due date, when given, cannot precede the record date."""
        if self.due_date is not None and self.due_date < self.record_date:
            raise ValueError("Due date cannot be before the record date")
        return self


class HealthRecordCreate(HealthRecordBase):
    """Schema for creating a health record."""

    record_type: str = Field(
        ..., description="Free-text category", min_length=1, max_length=50
    )


class HealthRecordUpdate(BaseModel):
    """Schema for updating a health record; unset fields are left alone."""

    model_config = ConfigDict(validate_assignment=True, str_strip_whitespace=True)

    record_type: Optional[str] = Field(None, min_length=1, max_length=50)
    description: Optional[str] = Field(None, min_length=1)
    record_date: Optional[date] = None
    due_date: Optional[date] = None
    veterinarian_id: Optional[int] = Field(None, gt=0)
    notes: Optional[str] = None

    @model_validator(mode="after")
    def validate_at_least_one_field(self) -> "HealthRecordUpdate":
        if not self.model_fields_set:
            raise ValueError("At least one field must be provided for update")
        for required in ("record_type", "description", "record_date"):
            if required in self.model_fields_set and getattr(self, required) is None:
                raise ValueError(f"{required} cannot be cleared")
        return self


class VaccinationCreate(HealthRecordBase):
    """Schema for recording a vaccination."""


class VaccinationUpdate(BaseModel):
    """Schema for updating a vaccination record."""

    model_config = ConfigDict(validate_assignment=True, str_strip_whitespace=True)

    description: Optional[str] = Field(None, min_length=1)
    record_date: Optional[date] = None
    due_date: Optional[date] = None
    veterinarian_id: Optional[int] = Field(None, gt=0)
    notes: Optional[str] = None

    @model_validator(mode="after")
    def validate_at_least_one_field(self) -> "VaccinationUpdate":
        if not self.model_fields_set:
            raise ValueError("At least one field must be provided for update")
        for required in ("description", "record_date"):
            if required in self.model_fields_set and getattr(self, required) is None:
                raise ValueError(f"{required} cannot be cleared")
        return self


class HealthRecordResponse(BaseModel):
    """Schema for health record response data."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    pet_id: int
    pet_name: Optional[str] = None
    record_type: str
    description: str
    record_date: date
    due_date: Optional[date] = None
    veterinarian_id: Optional[int] = None
    veterinarian_name: Optional[str] = None
    notes: Optional[str] = None
    attachments: List[str] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_model(cls, record: HealthRecord) -> "HealthRecordResponse":
        return cls(
            id=record.id,
            pet_id=record.pet_id,
            pet_name=record.pet.name if record.pet is not None else None,
            record_type=record.record_type,
            description=record.description,
            record_date=record.record_date,
            due_date=record.due_date,
            veterinarian_id=record.veterinarian_id,
            veterinarian_name=display_name(record.veterinarian),
            notes=record.notes,
            attachments=record.attachment_urls,
            created_at=record.created_at,
            updated_at=record.updated_at,
        )


class VaccinationResponse(HealthRecordResponse):
    """Vaccination view of a health record."""

    is_overdue: bool = Field(False, description="Due date has passed")

    @classmethod
    def from_model(
        cls, record: HealthRecord, today: Optional[date] = None
    ) -> "VaccinationResponse":
        base = HealthRecordResponse.from_model(record).model_dump()
        today = today or date.today()
        return cls(
            **base,
            is_overdue=record.due_date is not None and record.due_date < today,
        )
