"""
Notification settings and theme preference schemas.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..models import THEME_CHOICES


class NotificationSettingsResponse(BaseModel):
    """Schema for notification settings response data."""

    model_config = ConfigDict(from_attributes=True)

    user_profile_id: int
    email_notifications: bool
    push_notifications: bool
    appointment_reminders: bool
    medication_reminders: bool
    vaccination_reminders: bool
    weight_reminders: bool
    feeding_reminders: bool
    reminder_lead_time: int = Field(..., description="Hours before an event")


class NotificationSettingsUpdate(BaseModel):
    """Schema for changing notification toggles; unset toggles are kept."""

    email_notifications: Optional[bool] = None
    push_notifications: Optional[bool] = None
    appointment_reminders: Optional[bool] = None
    medication_reminders: Optional[bool] = None
    vaccination_reminders: Optional[bool] = None
    weight_reminders: Optional[bool] = None
    feeding_reminders: Optional[bool] = None
    reminder_lead_time: Optional[int] = Field(None, ge=1, le=168)


class ThemePreference(BaseModel):
    """Schema for reading and setting the UI theme."""

    model_config = ConfigDict(str_strip_whitespace=True)

    theme: str = Field(..., description=f"One of: {', '.join(THEME_CHOICES)}")

    @field_validator("theme")
    @classmethod
    def validate_theme(cls, v: str) -> str:
        v = v.lower()
        if v not in THEME_CHOICES:
            raise ValueError(f"Theme must be one of: {', '.join(THEME_CHOICES)}")
        return v
