"""
Veterinarian model for the petpal-core package.

Veterinarians are a shared directory referenced by health records
(nullable link) and appointments (required link).
"""

from typing import Optional

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from .base import BaseModel


class Veterinarian(BaseModel):
    """Veterinarian contact and licensing details."""

    __tablename__ = "veterinarians"

    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)

    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)
    specialty: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    clinic_name: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    address: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    license_number: Mapped[Optional[str]] = mapped_column(
        String(50), nullable=True, index=True
    )

    def __repr__(self) -> str:
        return f"<Veterinarian(id={self.id}, name='{self.full_name}')>"

    @property
    def full_name(self) -> str:
        """Display name in ``First Last`` form."""
        return f"{self.first_name} {self.last_name}".strip()
