"""
Pydantic schemas for data validation and serialization.

This module contains the request, response and document schemas used by the
PetPal services.
"""

from .appointment import (
    AppointmentCreate,
    AppointmentResponse,
    AppointmentStatusUpdate,
    AppointmentUpdate,
)
from .base import changed_fields, display_name, parse_payload
from .care_provider import (
    CareProviderCreate,
    CareProviderResponse,
    CareProviderUpdate,
)
from .dashboard import (
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
)
from .export import (
    AppointmentExport,
    ExportDocument,
    ExportRequest,
    ExportResult,
    ExportSection,
    FeedingScheduleExport,
    HealthRecordExport,
    MedicationExport,
    OwnerExport,
    PetInfoExport,
    WeightExport,
)
from .feeding_schedule import (
    FeedingScheduleCreate,
    FeedingScheduleResponse,
    FeedingScheduleUpdate,
)
from .health_record import (
    HealthRecordCreate,
    HealthRecordResponse,
    HealthRecordUpdate,
    VaccinationCreate,
    VaccinationResponse,
    VaccinationUpdate,
)
from .medication import (
    MedicationCreate,
    MedicationReminderResponse,
    MedicationReminderUpdate,
    MedicationResponse,
    MedicationUpdate,
)
from .pet import (
    PetCreate,
    PetOwnerAdd,
    PetOwnerResponse,
    PetResponse,
    PetUpdate,
)
from .settings import (
    NotificationSettingsResponse,
    NotificationSettingsUpdate,
    ThemePreference,
)
from .user import (
    LoginRequest,
    PasswordResetRequest,
    ProfileResponse,
    ProfileUpdate,
    RegisterRequest,
)
from .veterinarian import (
    VeterinarianCreate,
    VeterinarianResponse,
    VeterinarianUpdate,
)
from .weight import WeightCreate, WeightResponse, WeightUpdate

__all__ = [
    # Helpers
    "parse_payload",
    "changed_fields",
    "display_name",
    # Pet schemas
    "PetCreate",
    "PetUpdate",
    "PetResponse",
    "PetOwnerAdd",
    "PetOwnerResponse",
    # Health record schemas
    "HealthRecordCreate",
    "HealthRecordUpdate",
    "HealthRecordResponse",
    "VaccinationCreate",
    "VaccinationUpdate",
    "VaccinationResponse",
    # Appointment schemas
    "AppointmentCreate",
    "AppointmentUpdate",
    "AppointmentStatusUpdate",
    "AppointmentResponse",
    # Medication schemas
    "MedicationCreate",
    "MedicationUpdate",
    "MedicationReminderUpdate",
    "MedicationResponse",
    "MedicationReminderResponse",
    # Weight schemas
    "WeightCreate",
    "WeightUpdate",
    "WeightResponse",
    # Feeding schedule schemas
    "FeedingScheduleCreate",
    "FeedingScheduleUpdate",
    "FeedingScheduleResponse",
    # Directory schemas
    "CareProviderCreate",
    "CareProviderUpdate",
    "CareProviderResponse",
    "VeterinarianCreate",
    "VeterinarianUpdate",
    "VeterinarianResponse",
    # Account and settings schemas
    "RegisterRequest",
    "LoginRequest",
    "PasswordResetRequest",
    "ProfileUpdate",
    "ProfileResponse",
    "NotificationSettingsResponse",
    "NotificationSettingsUpdate",
    "ThemePreference",
    # Dashboard and calendar schemas
    "EventType",
    "EVENT_COLORS",
    "CalendarEvent",
    "HealthRecordSummary",
    "MedicationSummary",
    "AppointmentSummary",
    "WeightSummary",
    "PetSummary",
    "PetDashboard",
    "UserDashboard",
    # Export schemas
    "ExportSection",
    "ExportRequest",
    "ExportDocument",
    "ExportResult",
    "PetInfoExport",
    "OwnerExport",
    "HealthRecordExport",
    "MedicationExport",
    "AppointmentExport",
    "WeightExport",
    "FeedingScheduleExport",
]
