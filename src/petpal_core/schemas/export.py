"""
Export document schemas.

An ``ExportDocument`` is the fully assembled, denormalized view of one pet
that formatters render into CSV, PDF or any other output.
"""

import enum
from datetime import date, datetime, time
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ExportSection(str, enum.Enum):
    """Selectable parts of a pet export."""

    BASIC_INFO = "BasicInfo"
    HEALTH_RECORDS = "HealthRecords"
    MEDICATIONS = "Medications"
    APPOINTMENTS = "Appointments"
    WEIGHT_RECORDS = "WeightRecords"
    FEEDING_SCHEDULES = "FeedingSchedules"
    ALL = "All"


class ExportRequest(BaseModel):
    """Parameters of an export call."""

    model_config = ConfigDict(str_strip_whitespace=True)

    format: str = Field("CSV", description="Output format name, e.g. CSV or PDF")
    sections: List[str] = Field(
        default_factory=list, description="Section names; empty means All"
    )
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    @model_validator(mode="after")
    def validate_range(self) -> "ExportRequest":
        if (
            self.start_date is not None
            and self.end_date is not None
            and self.end_date < self.start_date
        ):
            raise ValueError("End date cannot be before start date")
        return self


class OwnerExport(BaseModel):
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    is_primary_owner: bool = False


class HealthRecordExport(BaseModel):
    record_type: str
    description: str
    record_date: date
    due_date: Optional[date] = None
    veterinarian_name: Optional[str] = None
    notes: Optional[str] = None


class MedicationExport(BaseModel):
    name: str
    dosage: str
    frequency: str
    start_date: date
    end_date: Optional[date] = None
    instructions: Optional[str] = None
    prescriber: Optional[str] = None
    is_active: bool


class AppointmentExport(BaseModel):
    appointment_date: date
    appointment_time: time
    appointment_type: str
    veterinarian_name: Optional[str] = None
    notes: Optional[str] = None
    status: str


class WeightExport(BaseModel):
    weight_value: Decimal
    weight_unit: str
    date: date
    notes: Optional[str] = None


class FeedingScheduleExport(BaseModel):
    feeding_time: time
    food_type: str
    portion: str
    notes: Optional[str] = None
    is_active: bool


class PetInfoExport(BaseModel):
    """Basic profile facts of the exported pet."""

    name: str
    species: str
    breed: Optional[str] = None
    date_of_birth: Optional[date] = None
    weight: Optional[Decimal] = None
    color: Optional[str] = None
    microchip_number: Optional[str] = None
    owners: List[OwnerExport] = Field(default_factory=list)


class ExportDocument(BaseModel):
    """
    Assembled export of one pet.

    Sections that were not requested are ``None``; requested sections with no
    matching rows are empty lists.
    """

    pet_id: int
    pet_name: str
    export_date: datetime
    sections: List[ExportSection]
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    basic_info: Optional[PetInfoExport] = None
    health_records: Optional[List[HealthRecordExport]] = None
    medications: Optional[List[MedicationExport]] = None
    appointments: Optional[List[AppointmentExport]] = None
    weight_records: Optional[List[WeightExport]] = None
    feeding_schedules: Optional[List[FeedingScheduleExport]] = None


class ExportResult(BaseModel):
    """Rendered export ready to be streamed to the caller."""

    file_name: str
    content_type: str
    content: bytes
