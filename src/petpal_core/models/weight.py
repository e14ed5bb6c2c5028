"""
Weight model for the petpal-core package.
"""

import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Optional

from sqlalchemy import Date, ForeignKey, Index, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import BaseModel

if TYPE_CHECKING:
    from .pet import Pet


class Weight(BaseModel):
    """A dated weight measurement for a pet."""

    __tablename__ = "weights"

    def __init__(self, **kwargs) -> None:
        if "weight_unit" not in kwargs:
            kwargs["weight_unit"] = "kg"
        super().__init__(**kwargs)

    pet_id: Mapped[int] = mapped_column(
        ForeignKey("pets.id", ondelete="CASCADE"), nullable=False, index=True
    )

    weight_value: Mapped[Decimal] = mapped_column(Numeric(6, 2), nullable=False)
    weight_unit: Mapped[str] = mapped_column(String(10), nullable=False, default="kg")
    date: Mapped[datetime.date] = mapped_column(Date, nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    pet: Mapped["Pet"] = relationship(back_populates="weights")

    __table_args__ = (Index("idx_weights_pet_date", "pet_id", "date"),)

    def __repr__(self) -> str:
        return (
            f"<Weight(id={self.id}, pet_id={self.pet_id}, "
            f"value={self.weight_value}, date={self.date})>"
        )
