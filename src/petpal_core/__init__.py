"""
PetPal Core Package

The domain core of the PetPal pet health records platform: data models,
validation schemas, the authorization policy and the services that pet
owners, veterinarians and administrators call through the API layer.

It includes:

- SQLAlchemy models for pets, owners, health records, appointments,
  medications, weights, feeding schedules and care providers
- Pydantic schemas for request/response validation and serialization
- A role and ownership based authorization policy
- The medication reminder scheduler
- Calendar and dashboard aggregation
- Pet record export with pluggable formatters
- Async database session management

Quick Start:
    >>> from petpal_core.database import SessionManager, create_engine
    >>> from petpal_core.authorization import Principal
    >>> from petpal_core.services import pets

    >>> manager = SessionManager(create_engine("sqlite+aiosqlite:///./petpal.db"))
    >>> principal = Principal.with_roles("identity-123", {"User"})
    >>> async with manager.get_transaction() as session:
    ...     pet = await pets.create_pet(
    ...         session, principal, {"name": "Buddy", "species": "Dog"}
    ...     )

Requirements:
    - Python 3.11+
    - PostgreSQL 13+ (SQLite for development and tests)
    - SQLAlchemy 2.0+
    - Pydantic 2.5+
"""

__version__ = "0.1.0"
__author__ = "PetPal Platform Team"
__email__ = "dev@petpal.app"
__license__ = "MIT"

from . import authorization, database, exceptions, models, schemas, services, utils

# Convenience imports for common usage patterns
from .authorization import AuthorizationPolicy, Principal, Role
from .database import SessionManager, create_engine, get_session, get_transaction
from .exceptions import (
    ForbiddenException,
    PetPalException,
    ResourceNotFoundException,
    ValidationException,
)
from .models import Pet, PetOwner, UserProfile

__all__ = [
    # Version and metadata
    "__version__",
    "__author__",
    "__email__",
    "__license__",
    # Core modules
    "authorization",
    "database",
    "exceptions",
    "models",
    "schemas",
    "services",
    "utils",
    # Convenience imports
    "AuthorizationPolicy",
    "Principal",
    "Role",
    "SessionManager",
    "create_engine",
    "get_session",
    "get_transaction",
    "PetPalException",
    "ForbiddenException",
    "ResourceNotFoundException",
    "ValidationException",
    "Pet",
    "PetOwner",
    "UserProfile",
]
