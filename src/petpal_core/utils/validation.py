"""
Validation and data processing utilities for pet record operations.

Weight range and file type checks shared by the pydantic schemas, the
weight service and the file storage layer.
"""

from decimal import Decimal, InvalidOperation
from pathlib import PurePath
from typing import Any, Dict, Generic, Iterable, List, Optional, TypeVar, Union

T = TypeVar("T")


class ValidationError(Exception):
    """Custom validation error with structured error information."""

    def __init__(
        self, message: str, field: Optional[str] = None, code: Optional[str] = None
    ):
        self.message = message
        self.field = field
        self.code = code
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert the error to a dictionary format."""
        return {"message": self.message, "field": self.field, "code": self.code}


class ValidationResult(Generic[T]):
    """Result of a validation operation."""

    def __init__(
        self, value: Optional[T] = None, errors: Optional[List[ValidationError]] = None
    ):
        self.value = value
        self.errors = errors or []
        self.is_valid = len(self.errors) == 0

    def add_error(self, error: ValidationError) -> None:
        """Add an error to the result."""
        self.errors.append(error)
        self.is_valid = False

    @property
    def first_error(self) -> Optional[str]:
        """Message of the first recorded error, if any."""
        return self.errors[0].message if self.errors else None


WEIGHT_LIMITS = {
    "kg": (Decimal("0.01"), Decimal("999.99")),
    "lbs": (Decimal("0.02"), Decimal("2204.6")),
}


def validate_weight(
    weight: Union[str, float, Decimal], unit: str = "kg"
) -> ValidationResult[Decimal]:
    """
    Validate a pet's weight.

    Args:
        weight: The weight value
        unit: Unit of measurement ('kg' or 'lbs')

    Returns:
        ValidationResult with the weight as Decimal or errors
    """
    result = ValidationResult[Decimal]()

    try:
        weight_decimal = Decimal(str(weight))
    except (InvalidOperation, ValueError):
        result.add_error(
            ValidationError("Weight must be a valid number", "weight", "invalid_number")
        )
        return result

    limits = WEIGHT_LIMITS.get(unit)
    if limits is None:
        result.add_error(
            ValidationError("Invalid weight unit", "weight_unit", "invalid_unit")
        )
        return result

    min_weight, max_weight = limits
    if weight_decimal < min_weight:
        result.add_error(
            ValidationError(
                f"Weight must be at least {min_weight} {unit}", "weight", "too_low"
            )
        )
    elif weight_decimal > max_weight:
        result.add_error(
            ValidationError(
                f"Weight cannot exceed {max_weight} {unit}", "weight", "too_high"
            )
        )
    else:
        result.value = weight_decimal

    return result


def validate_file_extension(
    filename: str, allowed_extensions: Iterable[str]
) -> ValidationResult[str]:
    """
    Check that a file name carries one of the allowed extensions.

    Returns:
        ValidationResult with the lower-cased extension (including the dot)
    """
    result = ValidationResult[str]()
    extension = PurePath(filename or "").suffix.lower()

    if not extension:
        result.add_error(
            ValidationError("File name has no extension", "file", "missing_extension")
        )
    elif extension not in set(allowed_extensions):
        result.add_error(
            ValidationError(
                f"File type '{extension}' is not allowed", "file", "invalid_type"
            )
        )
    else:
        result.value = extension

    return result
