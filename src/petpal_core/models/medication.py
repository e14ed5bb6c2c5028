"""
Medication model for the petpal-core package.

Besides the prescription itself a medication carries reminder state:
whether reminders are enabled, the daily time-of-day they fire at, and the
last-sent / next-due instants maintained by the reminder scheduler.
"""

from datetime import date, datetime, time
from typing import TYPE_CHECKING, Optional

from sqlalchemy import Boolean, Date, ForeignKey, Index, String, Text, Time
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import BaseModel

if TYPE_CHECKING:
    from .pet import Pet

REMINDER_FIELDS = ("reminder_enabled", "reminder_frequency", "reminder_time")


class Medication(BaseModel):
    """Prescribed medication with its reminder schedule."""

    __tablename__ = "medications"

    def __init__(self, **kwargs) -> None:
        if "is_active" not in kwargs:
            kwargs["is_active"] = True
        if "reminder_enabled" not in kwargs:
            kwargs["reminder_enabled"] = False
        super().__init__(**kwargs)

    pet_id: Mapped[int] = mapped_column(
        ForeignKey("pets.id", ondelete="CASCADE"), nullable=False, index=True
    )

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    dosage: Mapped[str] = mapped_column(String(100), nullable=False)
    frequency: Mapped[str] = mapped_column(String(100), nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    instructions: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    prescriber: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    reminder_enabled: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )
    reminder_frequency: Mapped[Optional[str]] = mapped_column(
        String(50), nullable=True
    )
    reminder_time: Mapped[Optional[time]] = mapped_column(Time, nullable=True)
    last_reminder_sent: Mapped[Optional[datetime]] = mapped_column(nullable=True)
    next_reminder_due: Mapped[Optional[datetime]] = mapped_column(nullable=True)

    pet: Mapped["Pet"] = relationship(back_populates="medications")

    __table_args__ = (
        Index("idx_medications_reminder_due", "reminder_enabled", "next_reminder_due"),
    )

    def __repr__(self) -> str:
        return f"<Medication(id={self.id}, pet_id={self.pet_id}, name='{self.name}')>"

    def is_current(self, on: date) -> bool:
        """Active and not past its end date on ``on``."""
        return self.is_active and (self.end_date is None or self.end_date >= on)
