"""
Shared helpers for the PetPal pydantic schemas.
"""

from typing import Any, Mapping, Optional, Type, TypeVar, Union

from pydantic import BaseModel, ValidationError

from ..exceptions import SchemaValidationException, format_validation_errors

SchemaT = TypeVar("SchemaT", bound=BaseModel)


def parse_payload(
    schema_cls: Type[SchemaT], data: Union[SchemaT, Mapping[str, Any]]
) -> SchemaT:
    """
    Validate ``data`` against ``schema_cls``.

    Already-validated instances are returned unchanged, so service functions
    accept either a schema object or a plain mapping.

    Raises:
        SchemaValidationException: If the payload does not match the schema
    """
    if isinstance(data, schema_cls):
        return data
    try:
        return schema_cls.model_validate(data)
    except ValidationError as e:
        raise SchemaValidationException(
            f"Invalid {schema_cls.__name__} payload",
            schema_name=schema_cls.__name__,
            validation_errors=format_validation_errors(e.errors()),
        ) from e


def changed_fields(payload: BaseModel) -> dict:
    """Return only the fields the caller explicitly set on an update payload."""
    return payload.model_dump(exclude_unset=True)


def display_name(entity: Any) -> Optional[str]:
    """``"First Last"`` for a person-like entity, ``None`` when it is absent."""
    if entity is None:
        return None
    return f"{entity.first_name} {entity.last_name}".strip()
