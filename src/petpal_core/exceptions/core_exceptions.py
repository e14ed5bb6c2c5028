"""
Core exceptions for the petpal-core package.

This module defines the exception hierarchy used by the authorization engine,
the domain services and the storage layer. Every exception carries a
machine-readable error code and an HTTP-equivalent status so an endpoint
layer can translate it without inspecting the message.
"""

import functools
import logging
import time
import traceback
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError


class PetPalException(Exception):
    """
    Base exception class for all petpal-core exceptions.

    Provides a consistent interface for error handling across the package.
    """

    status_code: int = 500

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        """
        Initialize the exception.

        Args:
            message: Human-readable error message
            error_code: Machine-readable error code
            details: Additional error details
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert exception to dictionary format.

        Returns:
            Dictionary representation of the exception
        """
        return {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "status": self.status_code,
            "message": self.message,
            "details": self.details,
            "timestamp": time.time(),
        }

    def get_debug_info(self) -> Dict[str, Any]:
        """
        Get detailed debug information for the exception.

        Returns:
            Dictionary with debug information including traceback
        """
        debug_info = self.to_dict()
        formatted = traceback.format_exc()
        debug_info.update(
            {
                "traceback": (
                    formatted if formatted.strip() != "NoneType: None" else None
                ),
                "module": self.__class__.__module__,
                "class_name": self.__class__.__name__,
            }
        )
        return debug_info

    def log_error(
        self, logger: Optional[logging.Logger] = None, level: int = logging.ERROR
    ) -> None:
        """
        Log the exception with appropriate level and context.

        Args:
            logger: Logger instance to use (creates default if None)
            level: Logging level to use
        """
        if logger is None:
            logger = logging.getLogger(__name__)

        log_data = {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
        }

        logger.log(
            level,
            f"Exception occurred: {self.message}",
            extra={"exception_data": log_data},
        )

    def __str__(self) -> str:
        """String representation of the exception."""
        if self.details:
            return f"{self.message} (Details: {self.details})"
        return self.message


class AccessException(PetPalException):
    """Base exception for authentication and authorization failures."""

    status_code = 403


class UnauthenticatedException(AccessException):
    """Raised when an operation requires a principal and none was supplied."""

    status_code = 401

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message, error_code="UNAUTHENTICATED")


class ForbiddenException(AccessException):
    """Raised when the authorization predicate denies an operation."""

    def __init__(
        self,
        message: str = "Operation not permitted",
        action: Optional[str] = None,
        resource: Optional[str] = None,
        reason: Optional[str] = None,
    ):
        """
        Initialize forbidden exception.

        Args:
            message: Error message
            action: The attempted action (read, write, delete)
            resource: The kind of resource targeted
            reason: Why the policy denied the request
        """
        details = {}
        if action:
            details["action"] = action
        if resource:
            details["resource"] = resource
        if reason:
            details["reason"] = reason

        super().__init__(message, error_code="FORBIDDEN", details=details)


class NotFoundException(PetPalException):
    """Base exception for missing entities."""

    status_code = 404


class ResourceNotFoundException(NotFoundException):
    """Raised when a target pet, record or owner link does not exist."""

    def __init__(
        self,
        resource: str,
        resource_id: Optional[Any] = None,
        message: Optional[str] = None,
    ):
        """
        Initialize resource-not-found exception.

        Args:
            resource: Name of the missing resource type
            resource_id: Identifier that was looked up
            message: Optional custom message
        """
        details: Dict[str, Any] = {"resource": resource}
        if resource_id is not None:
            details["resource_id"] = str(resource_id)

        super().__init__(
            message or f"{resource} not found",
            error_code="RESOURCE_NOT_FOUND",
            details=details,
        )
        self.resource = resource
        self.resource_id = resource_id


class ProfileNotFoundException(NotFoundException):
    """Raised when an authenticated principal has no user profile."""

    def __init__(self, identity_id: Optional[str] = None):
        details = {"identity_id": identity_id} if identity_id else {}
        super().__init__(
            "User profile not found",
            error_code="PROFILE_NOT_FOUND",
            details=details,
        )
        self.identity_id = identity_id


class ConflictException(PetPalException):
    """Raised when a write would duplicate an existing unique entity."""

    status_code = 409

    def __init__(
        self,
        message: str = "Resource already exists",
        resource: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        details: Dict[str, Any] = {}
        if resource:
            details["resource"] = resource
        if context:
            details["context"] = context

        super().__init__(message, error_code="CONFLICT", details=details)


class DatabaseException(PetPalException):
    """Base exception for database-related errors."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        original_error: Optional[Exception] = None,
    ):
        """
        Initialize database exception.

        Args:
            message: Human-readable error message
            error_code: Machine-readable error code
            details: Additional error details
            original_error: Original exception that caused this error
        """
        super().__init__(message, error_code, details)
        self.original_error = original_error

        if original_error and "original_error" not in self.details:
            self.details["original_error"] = str(original_error)


class StoreFailureException(DatabaseException):
    """
    Raised when the underlying persistence layer fails.

    Store failures are always surfaced to the caller and never retried by
    the core; retry policy belongs to the infrastructure layer.
    """

    def __init__(
        self,
        message: str = "Database operation failed",
        operation: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ):
        details = {}
        if operation:
            details["operation"] = operation

        super().__init__(
            message=message,
            error_code="STORE_FAILURE",
            details=details,
            original_error=original_error,
        )


class ValidationException(PetPalException):
    """Base exception for data validation errors."""

    status_code = 400

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        value: Optional[Any] = None,
        validation_errors: Optional[Dict[str, Any]] = None,
    ):
        """
        Initialize validation exception.

        Args:
            message: Error message
            field: Field that failed validation
            value: Value that failed validation
            validation_errors: Detailed validation errors
        """
        details = {}
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = str(value)
        if validation_errors:
            details["validation_errors"] = validation_errors

        super().__init__(
            message=message,
            error_code="VALIDATION_ERROR",
            details=details,
        )


class InvalidInputException(ValidationException):
    """Raised for malformed payloads, disallowed file types or unknown options."""

    def __init__(
        self,
        message: str = "Invalid input",
        field: Optional[str] = None,
        value: Optional[Any] = None,
        validation_errors: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, field, value, validation_errors)
        self.error_code = "INVALID_INPUT"


class SchemaValidationException(InvalidInputException):
    """Exception raised when Pydantic schema validation fails."""

    def __init__(
        self,
        message: str = "Schema validation failed",
        schema_name: Optional[str] = None,
        validation_errors: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, validation_errors=validation_errors)
        self.error_code = "SCHEMA_VALIDATION_ERROR"
        if schema_name:
            self.details["schema_name"] = schema_name


class BusinessRuleException(ValidationException):
    """Exception raised when a business rule rejects an operation."""

    status_code = 400

    def __init__(
        self,
        message: str = "Business rule validation failed",
        rule_name: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        """
        Initialize business rule exception.

        Args:
            message: Error message
            rule_name: Name of the business rule that failed
            context: Additional context about the failure
        """
        super().__init__(message=message)
        self.error_code = "BUSINESS_RULE_ERROR"
        if rule_name:
            self.details["rule_name"] = rule_name
        if context:
            self.details["context"] = context


class InvalidStateException(BusinessRuleException):
    """Raised when an entity's current state does not allow the operation."""

    status_code = 409

    def __init__(
        self,
        message: str = "Operation not allowed in the current state",
        rule_name: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, rule_name, context)
        self.error_code = "INVALID_STATE"


class ConfigurationException(PetPalException):
    """Base exception for configuration-related errors."""

    def __init__(
        self,
        message: str = "Configuration error",
        config_key: Optional[str] = None,
        config_value: Optional[str] = None,
    ):
        """
        Initialize configuration exception.

        Args:
            message: Error message
            config_key: Configuration key that caused the error
            config_value: Configuration value (will be sanitized)
        """
        details = {}
        if config_key:
            details["config_key"] = config_key
        if config_value:
            details["config_value"] = self._sanitize_config_value(
                config_key, config_value
            )

        super().__init__(
            message=message,
            error_code="CONFIGURATION_ERROR",
            details=details,
        )

    @staticmethod
    def _sanitize_config_value(key: Optional[str], value: str) -> str:
        """Sanitize configuration values to avoid exposing secrets."""
        if not key:
            return "[REDACTED]"

        sensitive_keys = ["password", "secret", "key", "token", "credential"]
        if any(sensitive in key.lower() for sensitive in sensitive_keys):
            return "[REDACTED]"

        return value


def format_validation_errors(errors: List[Dict[str, Any]]) -> Dict[str, List[str]]:
    """
    Format Pydantic validation errors into a user-friendly structure.

    Args:
        errors: List of Pydantic validation errors

    Returns:
        Dictionary mapping field names to lists of error messages
    """
    formatted_errors: Dict[str, List[str]] = {}

    for error in errors:
        field_path = ".".join(str(loc) for loc in error.get("loc", []))
        if not field_path:
            field_path = "root"

        message = error.get("msg", "Validation error")
        error_type = error.get("type", "unknown")

        if error_type == "value_error":
            formatted_message = message
        elif error_type == "missing":
            formatted_message = "This field is required"
        else:
            formatted_message = f"{message} (type: {error_type})"

        formatted_errors.setdefault(field_path, []).append(formatted_message)

    return formatted_errors


def create_error_response(
    exception: PetPalException,
    include_debug: bool = False,
    include_traceback: bool = False,
) -> Dict[str, Any]:
    """
    Create a standardized error response from an exception.

    Args:
        exception: The exception to format
        include_debug: Whether to include debug information
        include_traceback: Whether to include traceback information

    Returns:
        Standardized error response dictionary
    """
    response: Dict[str, Any] = {
        "success": False,
        "status": exception.status_code,
        "error": {
            "type": exception.__class__.__name__,
            "code": exception.error_code,
            "message": exception.message,
        },
    }

    if exception.details:
        response["error"]["details"] = exception.details

    if include_debug:
        debug_info = exception.get_debug_info()
        response["debug"] = {
            "timestamp": debug_info["timestamp"],
            "module": debug_info["module"],
            "class_name": debug_info["class_name"],
        }

        if include_traceback and debug_info.get("traceback"):
            response["debug"]["traceback"] = debug_info["traceback"]

    return response


def translate_store_errors(
    operation_name: str, logger: Optional[logging.Logger] = None
):
    """
    Decorator converting SQLAlchemy errors raised by a coroutine into
    StoreFailureException.

    The wrapped operation is attempted exactly once.

    Args:
        operation_name: Name of the operation for logging
        logger: Logger instance to use

    Returns:
        Decorator function
    """

    def decorator(func):
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            operation_logger = logger or logging.getLogger(func.__module__)
            try:
                return await func(*args, **kwargs)
            except SQLAlchemyError as e:
                error = StoreFailureException(
                    f"Database operation '{operation_name}' failed",
                    operation=operation_name,
                    original_error=e,
                )
                operation_logger.error(
                    f"Database operation '{operation_name}' failed: {e}",
                    extra={"exception_data": error.to_dict()},
                )
                raise error from e

        return wrapper

    return decorator


def log_exception_context(
    exception: Exception,
    context: Dict[str, Any],
    logger: Optional[logging.Logger] = None,
    level: int = logging.ERROR,
) -> None:
    """
    Log an exception with additional context information.

    Args:
        exception: The exception to log
        context: Additional context information
        logger: Logger instance to use
        level: Logging level
    """
    if logger is None:
        logger = logging.getLogger(__name__)

    if isinstance(exception, PetPalException):
        log_data = exception.to_dict()
        log_data["context"] = context
        logger.log(
            level,
            f"Exception with context: {exception.message}",
            extra={"exception_data": log_data},
        )
    else:
        logger.log(
            level,
            f"Unhandled exception: {exception}",
            extra={
                "exception_type": exception.__class__.__name__,
                "exception_message": str(exception),
                "context": context,
            },
        )
