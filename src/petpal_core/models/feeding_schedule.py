"""
FeedingSchedule model for the petpal-core package.
"""

from datetime import time
from typing import TYPE_CHECKING, Optional

from sqlalchemy import Boolean, ForeignKey, String, Text, Time
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import BaseModel

if TYPE_CHECKING:
    from .pet import Pet


class FeedingSchedule(BaseModel):
    """Daily feeding slot for a pet."""

    __tablename__ = "feeding_schedules"

    def __init__(self, **kwargs) -> None:
        if "is_active" not in kwargs:
            kwargs["is_active"] = True
        super().__init__(**kwargs)

    pet_id: Mapped[int] = mapped_column(
        ForeignKey("pets.id", ondelete="CASCADE"), nullable=False, index=True
    )

    feeding_time: Mapped[time] = mapped_column(Time, nullable=False)
    food_type: Mapped[str] = mapped_column(String(100), nullable=False)
    portion: Mapped[str] = mapped_column(String(100), nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    pet: Mapped["Pet"] = relationship(back_populates="feeding_schedules")

    def __repr__(self) -> str:
        return (
            f"<FeedingSchedule(id={self.id}, pet_id={self.pet_id}, "
            f"time={self.feeding_time})>"
        )
