"""
HealthRecord model for the petpal-core package.

Vaccinations are not a separate table: a vaccination is a health record
whose ``record_type`` equals ``VACCINATION_RECORD_TYPE``. Its ``due_date``
drives the upcoming-vaccination views.
"""

import json
from datetime import date
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import Date, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import BaseModel

if TYPE_CHECKING:
    from .pet import Pet
    from .veterinarian import Veterinarian

VACCINATION_RECORD_TYPE = "Vaccination"


class HealthRecord(BaseModel):
    """Clinical record attached to a pet."""

    __tablename__ = "health_records"

    pet_id: Mapped[int] = mapped_column(
        ForeignKey("pets.id", ondelete="CASCADE"), nullable=False, index=True
    )

    record_type: Mapped[str] = mapped_column(
        String(50), nullable=False, comment="Free-text category"
    )

    description: Mapped[str] = mapped_column(Text, nullable=False)
    record_date: Mapped[date] = mapped_column(Date, nullable=False)
    due_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    veterinarian_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("veterinarians.id", ondelete="SET NULL"), nullable=True
    )

    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    attachments: Mapped[Optional[str]] = mapped_column(
        Text, nullable=True, comment="JSON-encoded list of attachment URLs"
    )

    pet: Mapped["Pet"] = relationship(back_populates="health_records")
    veterinarian: Mapped[Optional["Veterinarian"]] = relationship()

    __table_args__ = (
        Index("idx_health_records_pet_type_due", "pet_id", "record_type", "due_date"),
    )

    def __repr__(self) -> str:
        return (
            f"<HealthRecord(id={self.id}, pet_id={self.pet_id}, "
            f"record_type='{self.record_type}')>"
        )

    @property
    def is_vaccination(self) -> bool:
        return self.record_type == VACCINATION_RECORD_TYPE

    @property
    def attachment_urls(self) -> List[str]:
        """
        Decode ``attachments`` into a list of URLs.

        Older rows stored a bare URL instead of a JSON list; such a value is
        returned as a one-element list.
        """
        if not self.attachments:
            return []
        try:
            decoded = json.loads(self.attachments)
        except json.JSONDecodeError:
            return [self.attachments]
        if isinstance(decoded, list):
            return [str(url) for url in decoded]
        return [str(decoded)]

    def add_attachment_url(self, url: str) -> None:
        """Append ``url`` and re-encode the attachment list."""
        urls = self.attachment_urls
        urls.append(url)
        self.attachments = json.dumps(urls)
