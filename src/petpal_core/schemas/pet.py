"""
Pet Pydantic schemas for validation and serialization.

This module contains the create, update and response schemas for pets and
their owner links.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    EmailStr,
    Field,
    field_validator,
    model_validator,
)

from ..models import Pet, PetOwner
from ..utils.datetime_utils import calculate_pet_age, format_pet_age
from .base import display_name


class PetBase(BaseModel):
    """Base schema for pet profile fields."""

    model_config = ConfigDict(
        from_attributes=True,
        validate_assignment=True,
        str_strip_whitespace=True,
    )

    name: str = Field(..., description="Pet's name", min_length=1, max_length=100)
    species: str = Field(
        ..., description="Pet's species (Dog, Cat, ...)", min_length=1, max_length=50
    )
    breed: Optional[str] = Field(None, description="Pet's breed", max_length=100)
    date_of_birth: Optional[date] = Field(None, description="Pet's birth date")
    color: Optional[str] = Field(None, description="Coat color", max_length=50)
    microchip_number: Optional[str] = Field(
        None, description="Microchip identification number", max_length=50
    )
    veterinarian_id: Optional[int] = Field(
        None, description="Primary veterinarian", gt=0
    )

    @field_validator("name", "species")
    @classmethod
    def validate_required_text(cls, v: str) -> str:
        """Reject values that are blank after stripping."""
        if not v:
            raise ValueError("Value cannot be blank")
        return v

    @field_validator("date_of_birth")
    @classmethod
    def validate_date_of_birth(cls, v: Optional[date]) -> Optional[date]:
        """Birth dates cannot lie in the future."""
        if v is not None and v > date.today():
            raise ValueError("Date of birth cannot be in the future")
        return v

    @field_validator("microchip_number")
    @classmethod
    def validate_microchip_number(cls, v: Optional[str]) -> Optional[str]:
        """Normalize microchip numbers to upper case without spaces."""
        if v is None:
            return v
        v = v.replace(" ", "").upper()
        return v or None


class PetCreate(PetBase):
    """Schema for creating a new pet."""

    weight: Optional[Decimal] = Field(
        None,
        description="Initial weight in kilograms",
        gt=0,
        le=Decimal("999.99"),
    )


class PetUpdate(BaseModel):
    """
    Schema for updating pet profile fields.

    The current weight is not editable here; it follows the weight history.
    """

    model_config = ConfigDict(validate_assignment=True, str_strip_whitespace=True)

    name: Optional[str] = Field(None, min_length=1, max_length=100)
    species: Optional[str] = Field(None, min_length=1, max_length=50)
    breed: Optional[str] = Field(None, max_length=100)
    date_of_birth: Optional[date] = None
    color: Optional[str] = Field(None, max_length=50)
    microchip_number: Optional[str] = Field(None, max_length=50)
    veterinarian_id: Optional[int] = Field(None, gt=0)

    @field_validator("date_of_birth")
    @classmethod
    def validate_date_of_birth(cls, v: Optional[date]) -> Optional[date]:
        return PetBase.validate_date_of_birth(v)

    @field_validator("microchip_number")
    @classmethod
    def validate_microchip_number(cls, v: Optional[str]) -> Optional[str]:
        return PetBase.validate_microchip_number(v)

    @model_validator(mode="after")
    def validate_at_least_one_field(self) -> "PetUpdate":
        """Ensure at least one field is provided for update."""
        if not self.model_fields_set:
            raise ValueError("At least one field must be provided for update")
        for required in ("name", "species"):
            if required in self.model_fields_set and getattr(self, required) is None:
                raise ValueError(f"{required} cannot be cleared")
        return self


class PetResponse(BaseModel):
    """Schema for pet response data."""

    model_config = ConfigDict(from_attributes=True)

    id: int = Field(..., description="Pet's unique identifier")
    name: str
    species: str
    breed: Optional[str] = None
    date_of_birth: Optional[date] = None
    age: Optional[str] = Field(None, description="Human readable age")
    weight: Optional[Decimal] = Field(None, description="Current weight")
    color: Optional[str] = None
    image_url: Optional[str] = None
    microchip_number: Optional[str] = None
    veterinarian_id: Optional[int] = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_model(cls, pet: Pet, today: Optional[date] = None) -> "PetResponse":
        response = cls.model_validate(pet)
        if pet.date_of_birth is not None:
            response.age = format_pet_age(calculate_pet_age(pet.date_of_birth, today))
        return response


class PetOwnerResponse(BaseModel):
    """Owner link as seen from a pet."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    pet_id: int
    user_profile_id: int
    owner_name: Optional[str] = None
    email: Optional[str] = None
    is_primary_owner: bool

    @classmethod
    def from_model(cls, link: PetOwner) -> "PetOwnerResponse":
        profile = link.user_profile
        return cls(
            id=link.id,
            pet_id=link.pet_id,
            user_profile_id=link.user_profile_id,
            owner_name=display_name(profile),
            email=profile.email if profile is not None else None,
            is_primary_owner=link.is_primary_owner,
        )


class PetOwnerAdd(BaseModel):
    """Schema for adding a co-owner, by profile id or by registered email."""

    model_config = ConfigDict(str_strip_whitespace=True)

    user_profile_id: Optional[int] = Field(None, gt=0)
    email: Optional[EmailStr] = None
    is_primary_owner: bool = Field(
        False, description="Make the new owner primary, demoting the current one"
    )

    @model_validator(mode="after")
    def validate_target(self) -> "PetOwnerAdd":
        """Exactly one way of identifying the new owner must be given."""
        if (self.user_profile_id is None) == (self.email is None):
            raise ValueError("Provide either user_profile_id or email")
        return self
