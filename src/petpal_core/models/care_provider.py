"""
CareProvider model for the petpal-core package.

Care providers form a personal directory (groomers, sitters, boarding).
They are owned by an external identity id, not by a profile or a pet.
"""

from typing import Optional

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import BaseModel


class CareProvider(BaseModel):
    """Personal directory entry for a non-veterinary care provider."""

    __tablename__ = "care_providers"

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    provider_type: Mapped[str] = mapped_column(
        "type", String(50), nullable=False, comment="Groomer, Sitter, Boarding, ..."
    )
    address: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    website: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    user_id: Mapped[str] = mapped_column(
        String(450), nullable=False, index=True, comment="Owning identity id"
    )

    def __repr__(self) -> str:
        return (
            f"<CareProvider(id={self.id}, name='{self.name}', "
            f"user_id='{self.user_id}')>"
        )
