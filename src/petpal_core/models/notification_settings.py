"""
NotificationSettings model for the petpal-core package.
"""

from typing import TYPE_CHECKING

from sqlalchemy import Boolean, ForeignKey, Integer
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import BaseModel

if TYPE_CHECKING:
    from .user_profile import UserProfile

NOTIFICATION_DEFAULTS = {
    "email_notifications": True,
    "push_notifications": True,
    "appointment_reminders": True,
    "medication_reminders": True,
    "vaccination_reminders": True,
    "weight_reminders": False,
    "feeding_reminders": False,
    "reminder_lead_time": 24,
}


class NotificationSettings(BaseModel):
    """Per-profile notification toggles, created lazily on first access."""

    __tablename__ = "notification_settings"

    def __init__(self, **kwargs) -> None:
        for key, value in NOTIFICATION_DEFAULTS.items():
            kwargs.setdefault(key, value)
        super().__init__(**kwargs)

    user_profile_id: Mapped[int] = mapped_column(
        ForeignKey("user_profiles.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )

    email_notifications: Mapped[bool] = mapped_column(Boolean, nullable=False)
    push_notifications: Mapped[bool] = mapped_column(Boolean, nullable=False)
    appointment_reminders: Mapped[bool] = mapped_column(Boolean, nullable=False)
    medication_reminders: Mapped[bool] = mapped_column(Boolean, nullable=False)
    vaccination_reminders: Mapped[bool] = mapped_column(Boolean, nullable=False)
    weight_reminders: Mapped[bool] = mapped_column(Boolean, nullable=False)
    feeding_reminders: Mapped[bool] = mapped_column(Boolean, nullable=False)

    reminder_lead_time: Mapped[int] = mapped_column(
        Integer, nullable=False, comment="Hours before an event to notify"
    )

    user_profile: Mapped["UserProfile"] = relationship(
        back_populates="notification_settings"
    )
