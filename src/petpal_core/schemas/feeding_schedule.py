"""
Feeding schedule Pydantic schemas.
"""

from datetime import datetime, time
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class FeedingScheduleCreate(BaseModel):
    """Schema for adding a daily feeding slot."""

    model_config = ConfigDict(validate_assignment=True, str_strip_whitespace=True)

    feeding_time: time
    food_type: str = Field(..., min_length=1, max_length=100)
    portion: str = Field(..., description="e.g. '1 cup'", min_length=1, max_length=100)
    notes: Optional[str] = None
    is_active: bool = True


class FeedingScheduleUpdate(BaseModel):
    """Schema for updating a feeding slot."""

    model_config = ConfigDict(validate_assignment=True, str_strip_whitespace=True)

    feeding_time: Optional[time] = None
    food_type: Optional[str] = Field(None, min_length=1, max_length=100)
    portion: Optional[str] = Field(None, min_length=1, max_length=100)
    notes: Optional[str] = None
    is_active: Optional[bool] = None

    @model_validator(mode="after")
    def validate_at_least_one_field(self) -> "FeedingScheduleUpdate":
        if not self.model_fields_set:
            raise ValueError("At least one field must be provided for update")
        for field_name in self.model_fields_set:
            if field_name != "notes" and getattr(self, field_name) is None:
                raise ValueError(f"{field_name} cannot be cleared")
        return self


class FeedingScheduleResponse(BaseModel):
    """Schema for feeding schedule response data."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    pet_id: int
    feeding_time: time
    food_type: str
    portion: str
    notes: Optional[str] = None
    is_active: bool
    created_at: datetime
    updated_at: datetime
