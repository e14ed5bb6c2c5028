"""
Domain services for the petpal-core package.

Each module groups the operations of one area. Every operation takes an
``AsyncSession`` and the caller's ``Principal``, enforces the authorization
policy, flushes its changes and leaves commit or rollback to the caller.

Example:
    >>> from petpal_core.services import pets
    >>> async with session_manager.get_transaction() as session:
    ...     pet = await pets.create_pet(session, principal, {"name": "Buddy",
    ...                                                      "species": "Dog"})
"""

from . import (
    accounts,
    appointments,
    calendar,
    care_providers,
    export,
    feeding,
    files,
    health_records,
    medications,
    pets,
    reminders,
    settings,
    veterinarians,
    weights,
)
from .base import PetAccess, authorize_pet, load_pet, resolve_profile
from .calendar import build_calendar, build_pet_dashboard, build_user_dashboard
from .export import (
    CsvExportFormatter,
    ExportFormatter,
    ExportFormatterRegistry,
    assemble_export,
    default_registry,
)
from .files import BlobStore, LocalFileStore
from .reminders import acknowledge_sent, recompute_on_save

__all__ = [
    # Service modules
    "accounts",
    "appointments",
    "calendar",
    "care_providers",
    "export",
    "feeding",
    "files",
    "health_records",
    "medications",
    "pets",
    "reminders",
    "settings",
    "veterinarians",
    "weights",
    # Shared plumbing
    "PetAccess",
    "authorize_pet",
    "load_pet",
    "resolve_profile",
    # Reminder scheduler
    "recompute_on_save",
    "acknowledge_sent",
    # Aggregator
    "build_calendar",
    "build_pet_dashboard",
    "build_user_dashboard",
    # Export
    "assemble_export",
    "ExportFormatter",
    "CsvExportFormatter",
    "ExportFormatterRegistry",
    "default_registry",
    # Blob storage
    "BlobStore",
    "LocalFileStore",
]
