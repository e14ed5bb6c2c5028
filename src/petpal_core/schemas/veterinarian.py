"""
Veterinarian Pydantic schemas.
"""

from datetime import datetime
from typing import Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    EmailStr,
    Field,
    field_validator,
    model_validator,
)


class VeterinarianCreate(BaseModel):
    """Schema for adding a veterinarian to the shared directory."""

    model_config = ConfigDict(validate_assignment=True, str_strip_whitespace=True)

    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=30)
    specialty: Optional[str] = Field(None, max_length=100)
    clinic_name: Optional[str] = Field(None, max_length=200)
    address: Optional[str] = Field(None, max_length=500)
    license_number: Optional[str] = Field(None, max_length=50)

    @field_validator("license_number")
    @classmethod
    def validate_license_number(cls, v: Optional[str]) -> Optional[str]:
        """License numbers are stored upper case."""
        if v is None:
            return v
        return v.upper() or None


class VeterinarianUpdate(BaseModel):
    """Schema for updating a veterinarian."""

    model_config = ConfigDict(validate_assignment=True, str_strip_whitespace=True)

    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=30)
    specialty: Optional[str] = Field(None, max_length=100)
    clinic_name: Optional[str] = Field(None, max_length=200)
    address: Optional[str] = Field(None, max_length=500)
    license_number: Optional[str] = Field(None, max_length=50)

    @field_validator("license_number")
    @classmethod
    def validate_license_number(cls, v: Optional[str]) -> Optional[str]:
        return VeterinarianCreate.validate_license_number(v)

    @model_validator(mode="after")
    def validate_names_kept(self) -> "VeterinarianUpdate":
        for required in ("first_name", "last_name"):
            if required in self.model_fields_set and getattr(self, required) is None:
                raise ValueError(f"{required} cannot be cleared")
        return self


class VeterinarianResponse(BaseModel):
    """Schema for veterinarian response data."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    first_name: str
    last_name: str
    full_name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    specialty: Optional[str] = None
    clinic_name: Optional[str] = None
    address: Optional[str] = None
    license_number: Optional[str] = None
    created_at: datetime
