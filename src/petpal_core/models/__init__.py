"""
SQLAlchemy models for the petpal-core package.

Importing this package registers every table on ``Base.metadata``.
"""

from .appointment import Appointment, AppointmentStatus
from .base import Base, BaseModel
from .care_provider import CareProvider
from .feeding_schedule import FeedingSchedule
from .health_record import VACCINATION_RECORD_TYPE, HealthRecord
from .medication import REMINDER_FIELDS, Medication
from .notification_settings import NOTIFICATION_DEFAULTS, NotificationSettings
from .pet import Pet, PetOwner
from .user_profile import THEME_CHOICES, UserProfile
from .veterinarian import Veterinarian
from .weight import Weight

__all__ = [
    "Base",
    "BaseModel",
    "UserProfile",
    "THEME_CHOICES",
    "Pet",
    "PetOwner",
    "Veterinarian",
    "HealthRecord",
    "VACCINATION_RECORD_TYPE",
    "Appointment",
    "AppointmentStatus",
    "Medication",
    "REMINDER_FIELDS",
    "Weight",
    "FeedingSchedule",
    "CareProvider",
    "NotificationSettings",
    "NOTIFICATION_DEFAULTS",
]
