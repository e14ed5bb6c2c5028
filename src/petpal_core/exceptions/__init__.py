"""
Custom exceptions for the petpal-core package.

This module defines the exception hierarchy shared by the authorization
engine, the domain services and the storage layer.
"""

from .core_exceptions import (
    AccessException,
    BusinessRuleException,
    ConfigurationException,
    ConflictException,
    DatabaseException,
    ForbiddenException,
    InvalidInputException,
    InvalidStateException,
    NotFoundException,
    PetPalException,
    ProfileNotFoundException,
    ResourceNotFoundException,
    SchemaValidationException,
    StoreFailureException,
    UnauthenticatedException,
    ValidationException,
    create_error_response,
    format_validation_errors,
    log_exception_context,
    translate_store_errors,
)

__all__ = [
    # Exception classes
    "PetPalException",
    "AccessException",
    "UnauthenticatedException",
    "ForbiddenException",
    "NotFoundException",
    "ResourceNotFoundException",
    "ProfileNotFoundException",
    "ConflictException",
    "DatabaseException",
    "StoreFailureException",
    "ValidationException",
    "InvalidInputException",
    "SchemaValidationException",
    "BusinessRuleException",
    "InvalidStateException",
    "ConfigurationException",
    # Utility functions
    "format_validation_errors",
    "create_error_response",
    "translate_store_errors",
    "log_exception_context",
]
