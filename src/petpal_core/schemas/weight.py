"""
Weight Pydantic schemas.
"""

import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..utils.validation import WEIGHT_LIMITS, validate_weight


class WeightCreate(BaseModel):
    """Schema for recording a weight measurement."""

    model_config = ConfigDict(validate_assignment=True, str_strip_whitespace=True)

    weight_value: Decimal = Field(..., description="Measured weight", gt=0)
    weight_unit: str = Field("kg", description="Unit of measurement (kg or lbs)")
    date: datetime.date = Field(..., description="Day of the measurement")
    notes: Optional[str] = None

    @field_validator("weight_unit")
    @classmethod
    def validate_weight_unit(cls, v: str) -> str:
        v = v.lower()
        if v not in WEIGHT_LIMITS:
            raise ValueError(f"Weight unit must be one of: {', '.join(WEIGHT_LIMITS)}")
        return v

    @model_validator(mode="after")
    def validate_weight_range(self) -> "WeightCreate":
        """Check the value against the limits for its unit."""
        result = validate_weight(self.weight_value, self.weight_unit)
        if not result.is_valid:
            raise ValueError(result.first_error)
        return self


class WeightUpdate(BaseModel):
    """
    Schema for correcting a weight measurement.

    Range limits depend on the unit stored on the row, so they are checked by
    the weight service after the changes are applied.
    """

    model_config = ConfigDict(validate_assignment=True, str_strip_whitespace=True)

    weight_value: Optional[Decimal] = Field(None, gt=0)
    weight_unit: Optional[str] = None
    date: Optional[datetime.date] = None
    notes: Optional[str] = None

    @field_validator("weight_unit")
    @classmethod
    def validate_weight_unit(cls, v: Optional[str]) -> Optional[str]:
        if v is not None:
            return WeightCreate.validate_weight_unit(v)
        return v

    @model_validator(mode="after")
    def validate_at_least_one_field(self) -> "WeightUpdate":
        if not self.model_fields_set:
            raise ValueError("At least one field must be provided for update")
        for required in ("weight_value", "weight_unit", "date"):
            if required in self.model_fields_set and getattr(self, required) is None:
                raise ValueError(f"{required} cannot be cleared")
        return self


class WeightResponse(BaseModel):
    """Schema for weight response data."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    pet_id: int
    weight_value: Decimal
    weight_unit: str
    date: datetime.date
    notes: Optional[str] = None
    created_at: datetime.datetime
