"""
UserProfile model for the petpal-core package.

A profile is the application-side record for an identity managed by the
external identity provider. Pet ownership hangs off the profile, not the
identity.
"""

from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import BaseModel

if TYPE_CHECKING:
    from .notification_settings import NotificationSettings
    from .pet import PetOwner

THEME_CHOICES = ("light", "dark", "system")


class UserProfile(BaseModel):
    """Application profile linked to an external identity id."""

    __tablename__ = "user_profiles"

    def __init__(self, **kwargs) -> None:
        if "theme_preference" not in kwargs:
            kwargs["theme_preference"] = "light"
        super().__init__(**kwargs)

    identity_id: Mapped[str] = mapped_column(
        String(450),
        nullable=False,
        unique=True,
        index=True,
        comment="Identifier issued by the identity provider",
    )

    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)

    email: Mapped[str] = mapped_column(
        String(255), nullable=False, unique=True, index=True
    )

    address: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)

    theme_preference: Mapped[str] = mapped_column(
        String(20), nullable=False, default="light"
    )

    pet_links: Mapped[List["PetOwner"]] = relationship(
        back_populates="user_profile",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    notification_settings: Mapped[Optional["NotificationSettings"]] = relationship(
        back_populates="user_profile",
        cascade="all, delete-orphan",
        passive_deletes=True,
        uselist=False,
    )

    def __repr__(self) -> str:
        return f"<UserProfile(id={self.id}, email='{self.email}')>"

    @property
    def full_name(self) -> str:
        """Display name in ``First Last`` form."""
        return f"{self.first_name} {self.last_name}".strip()
