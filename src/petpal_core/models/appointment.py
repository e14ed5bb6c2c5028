"""
Appointment model for the petpal-core package.

Date and time-of-day are stored in separate columns. ``status`` is a free
string; the well-known values are listed in ``AppointmentStatus``.
"""

import enum
from datetime import date, time
from typing import TYPE_CHECKING, Optional

from sqlalchemy import Date, ForeignKey, Index, String, Text, Time
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import BaseModel

if TYPE_CHECKING:
    from .pet import Pet
    from .veterinarian import Veterinarian


class AppointmentStatus(str, enum.Enum):
    """Well-known appointment status values."""

    SCHEDULED = "Scheduled"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"
    NO_SHOW = "NoShow"


class Appointment(BaseModel):
    """Scheduled visit of a pet with a veterinarian."""

    __tablename__ = "appointments"

    def __init__(self, **kwargs) -> None:
        if "status" not in kwargs:
            kwargs["status"] = AppointmentStatus.SCHEDULED.value
        super().__init__(**kwargs)

    pet_id: Mapped[int] = mapped_column(
        ForeignKey("pets.id", ondelete="CASCADE"), nullable=False, index=True
    )

    veterinarian_id: Mapped[int] = mapped_column(
        ForeignKey("veterinarians.id", ondelete="CASCADE"), nullable=False, index=True
    )

    appointment_date: Mapped[date] = mapped_column(Date, nullable=False)
    appointment_time: Mapped[time] = mapped_column(Time, nullable=False)
    appointment_type: Mapped[str] = mapped_column(String(100), nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    status: Mapped[str] = mapped_column(
        String(30), nullable=False, default=AppointmentStatus.SCHEDULED.value
    )

    pet: Mapped["Pet"] = relationship(back_populates="appointments")
    veterinarian: Mapped["Veterinarian"] = relationship()

    __table_args__ = (
        Index("idx_appointments_pet_date", "pet_id", "appointment_date"),
    )

    def __repr__(self) -> str:
        return (
            f"<Appointment(id={self.id}, pet_id={self.pet_id}, "
            f"date={self.appointment_date}, status='{self.status}')>"
        )

    @property
    def is_cancelled(self) -> bool:
        return self.status == AppointmentStatus.CANCELLED.value
