"""
Pet and PetOwner models for the petpal-core package.

A pet is owned by one or more user profiles through ``PetOwner`` links.
Exactly one link per pet may carry the primary-owner flag; this is enforced
by a partial unique index as well as by the ownership service.
"""

from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import (
    Boolean,
    Date,
    ForeignKey,
    Index,
    Numeric,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import BaseModel

if TYPE_CHECKING:
    from .appointment import Appointment
    from .feeding_schedule import FeedingSchedule
    from .health_record import HealthRecord
    from .medication import Medication
    from .user_profile import UserProfile
    from .veterinarian import Veterinarian
    from .weight import Weight


_CHILD_RELATIONSHIP = dict(cascade="all, delete-orphan", passive_deletes=True)


class Pet(BaseModel):
    """
    Pet profile with its owner links and record collections.

    ``weight`` is a denormalized copy of the latest ``Weight`` row and is
    maintained by the weight service, never edited independently.
    """

    __tablename__ = "pets"

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    species: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    breed: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    date_of_birth: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    weight: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(6, 2), nullable=True, comment="Current weight (latest Weight row)"
    )

    color: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    image_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    microchip_number: Mapped[Optional[str]] = mapped_column(
        String(50), nullable=True, index=True
    )

    veterinarian_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("veterinarians.id", ondelete="SET NULL"),
        nullable=True,
        comment="Primary veterinarian",
    )

    owners: Mapped[List["PetOwner"]] = relationship(
        back_populates="pet", **_CHILD_RELATIONSHIP
    )
    health_records: Mapped[List["HealthRecord"]] = relationship(
        back_populates="pet", **_CHILD_RELATIONSHIP
    )
    appointments: Mapped[List["Appointment"]] = relationship(
        back_populates="pet", **_CHILD_RELATIONSHIP
    )
    medications: Mapped[List["Medication"]] = relationship(
        back_populates="pet", **_CHILD_RELATIONSHIP
    )
    weights: Mapped[List["Weight"]] = relationship(
        back_populates="pet", **_CHILD_RELATIONSHIP
    )
    feeding_schedules: Mapped[List["FeedingSchedule"]] = relationship(
        back_populates="pet", **_CHILD_RELATIONSHIP
    )
    veterinarian: Mapped[Optional["Veterinarian"]] = relationship()

    def __repr__(self) -> str:
        return f"<Pet(id={self.id}, name='{self.name}', species='{self.species}')>"

    @property
    def primary_owner(self) -> Optional["PetOwner"]:
        """The owner link flagged primary, if one is loaded."""
        return next((link for link in self.owners if link.is_primary_owner), None)


class PetOwner(BaseModel):
    """Join row between a pet and a user profile."""

    __tablename__ = "pet_owners"

    def __init__(self, **kwargs) -> None:
        if "is_primary_owner" not in kwargs:
            kwargs["is_primary_owner"] = False
        super().__init__(**kwargs)

    pet_id: Mapped[int] = mapped_column(
        ForeignKey("pets.id", ondelete="CASCADE"), nullable=False, index=True
    )

    user_profile_id: Mapped[int] = mapped_column(
        ForeignKey("user_profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    is_primary_owner: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )

    pet: Mapped["Pet"] = relationship(back_populates="owners")
    user_profile: Mapped["UserProfile"] = relationship(back_populates="pet_links")

    __table_args__ = (
        UniqueConstraint("pet_id", "user_profile_id", name="uq_pet_owners_pet_profile"),
    )

    def __repr__(self) -> str:
        return (
            f"<PetOwner(pet_id={self.pet_id}, user_profile_id={self.user_profile_id}, "
            f"primary={self.is_primary_owner})>"
        )


Index(
    "uq_pet_owners_single_primary",
    PetOwner.pet_id,
    unique=True,
    postgresql_where=PetOwner.is_primary_owner.is_(True),
    sqlite_where=PetOwner.is_primary_owner.is_(True),
)
