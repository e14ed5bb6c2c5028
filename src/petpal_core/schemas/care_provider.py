"""
Care provider Pydantic schemas.
"""

import re
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

URL_PATTERN = re.compile(r"^https?://[^\s/$.?#].[^\s]*$", re.IGNORECASE)


class CareProviderBase(BaseModel):
    """Contact fields of a care provider."""

    model_config = ConfigDict(validate_assignment=True, str_strip_whitespace=True)

    address: Optional[str] = Field(None, max_length=500)
    phone: Optional[str] = Field(None, max_length=30)
    email: Optional[EmailStr] = None
    website: Optional[str] = Field(None, max_length=500)
    notes: Optional[str] = None

    @field_validator("website")
    @classmethod
    def validate_website(cls, v: Optional[str]) -> Optional[str]:
        """Websites must be absolute http(s) URLs."""
        if v is None or v == "":
            return None
        if not URL_PATTERN.match(v):
            raise ValueError("Website must be an http or https URL")
        return v


class CareProviderCreate(CareProviderBase):
    """Schema for adding a care provider to the personal directory."""

    name: str = Field(..., min_length=1, max_length=200)
    provider_type: str = Field(
        ..., description="Groomer, Sitter, Boarding, ...", min_length=1, max_length=50
    )


class CareProviderUpdate(CareProviderBase):
    """Schema for updating a care provider."""

    name: Optional[str] = Field(None, min_length=1, max_length=200)
    provider_type: Optional[str] = Field(None, min_length=1, max_length=50)

    @model_validator(mode="after")
    def validate_at_least_one_field(self) -> "CareProviderUpdate":
        if not self.model_fields_set:
            raise ValueError("At least one field must be provided for update")
        for required in ("name", "provider_type"):
            if required in self.model_fields_set and getattr(self, required) is None:
                raise ValueError(f"{required} cannot be cleared")
        return self


class CareProviderResponse(BaseModel):
    """Schema for care provider response data."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    provider_type: str
    address: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    website: Optional[str] = None
    notes: Optional[str] = None
    user_id: str
    created_at: datetime
    updated_at: datetime
