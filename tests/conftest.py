"""
Pytest configuration and fixtures for petpal-core tests.

This module provides common fixtures for all tests in the petpal-core
package: an in-memory SQLite database per test, factory classes for the
domain entities, principals for each role and an in-memory identity
provider.
"""

import secrets
import uuid
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal
from typing import AsyncGenerator, Dict, Iterable, Optional, Set

import pytest
import pytest_asyncio
from faker import Faker
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from petpal_core.authorization import Principal, Role
from petpal_core.database import SessionManager, close_engine, create_engine
from petpal_core.models import (
    VACCINATION_RECORD_TYPE,
    Appointment,
    AppointmentStatus,
    Base,
    HealthRecord,
    Medication,
    Pet,
    PetOwner,
    UserProfile,
    Veterinarian,
    Weight,
)
from petpal_core.services.files import check_extension

fake = Faker()

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

# Fixed reference instant so calendar and reminder tests are deterministic
NOW = datetime(2024, 3, 10, 9, 0, tzinfo=timezone.utc)
TODAY = NOW.date()


@pytest_asyncio.fixture
async def test_engine() -> AsyncGenerator[AsyncEngine, None]:
    """A fresh in-memory database for every test."""
    engine = create_engine(TEST_DATABASE_URL)
    yield engine
    await close_engine(engine)


@pytest_asyncio.fixture
async def session_manager(
    test_engine: AsyncEngine,
) -> AsyncGenerator[SessionManager, None]:
    manager = SessionManager(test_engine)
    await manager.initialize_database(Base.metadata)
    yield manager
    await manager.close_all_sessions()


@pytest_asyncio.fixture
async def async_session(
    session_manager: SessionManager,
) -> AsyncGenerator[AsyncSession, None]:
    """
    Provide an async session; services only flush, so nothing is committed
    and the database disappears with the engine.
    """
    async with session_manager.get_session() as session:
        yield session


# Factory classes for creating test entities
class ProfileFactory:
    """Factory for creating test UserProfile instances."""

    @staticmethod
    def build(**kwargs) -> UserProfile:
        defaults = {
            "identity_id": f"identity_{uuid.uuid4().hex[:12]}",
            "first_name": fake.first_name(),
            "last_name": fake.last_name(),
            "email": f"{uuid.uuid4().hex[:8]}_{fake.email()}".lower(),
            "phone": "555-0100",
            "address": fake.street_address(),
        }
        defaults.update(kwargs)
        return UserProfile(**defaults)

    @staticmethod
    async def create(session: AsyncSession, **kwargs) -> UserProfile:
        profile = ProfileFactory.build(**kwargs)
        session.add(profile)
        await session.flush()
        return profile


class VeterinarianFactory:
    """Factory for creating test Veterinarian instances."""

    @staticmethod
    def build(**kwargs) -> Veterinarian:
        defaults = {
            "first_name": fake.first_name(),
            "last_name": fake.last_name(),
            "email": fake.email(),
            "specialty": "General Practice",
            "clinic_name": f"{fake.city()} Animal Hospital",
            "license_number": f"VET{uuid.uuid4().hex[:6].upper()}",
        }
        defaults.update(kwargs)
        return Veterinarian(**defaults)

    @staticmethod
    async def create(session: AsyncSession, **kwargs) -> Veterinarian:
        veterinarian = VeterinarianFactory.build(**kwargs)
        session.add(veterinarian)
        await session.flush()
        return veterinarian


class PetFactory:
    """
    Factory for creating test Pet instances.

    The first profile in ``owners`` becomes the primary owner unless
    ``primary`` names another one.
    """

    @staticmethod
    def build(**kwargs) -> Pet:
        defaults = {
            "name": fake.first_name(),
            "species": "Dog",
            "breed": "Golden Retriever",
            "date_of_birth": date(2020, 1, 1),
        }
        defaults.update(kwargs)
        return Pet(**defaults)

    @staticmethod
    async def create(
        session: AsyncSession,
        owners: Iterable[UserProfile] = (),
        primary: Optional[UserProfile] = None,
        **kwargs,
    ) -> Pet:
        owners = list(owners)
        if primary is None and owners:
            primary = owners[0]
        pet = PetFactory.build(**kwargs)
        for profile in owners:
            pet.owners.append(
                PetOwner(user_profile=profile, is_primary_owner=profile is primary)
            )
        session.add(pet)
        await session.flush()
        return pet


class HealthRecordFactory:
    """Factory for creating test HealthRecord instances."""

    @staticmethod
    async def create(session: AsyncSession, pet: Pet, **kwargs) -> HealthRecord:
        defaults = {
            "pet_id": pet.id,
            "record_type": "Checkup",
            "description": "Annual wellness exam",
            "record_date": TODAY - timedelta(days=30),
        }
        defaults.update(kwargs)
        record = HealthRecord(**defaults)
        session.add(record)
        await session.flush()
        return record

    @staticmethod
    async def create_vaccination(
        session: AsyncSession, pet: Pet, **kwargs
    ) -> HealthRecord:
        defaults = {
            "record_type": VACCINATION_RECORD_TYPE,
            "description": "Rabies",
            "due_date": TODAY + timedelta(days=10),
        }
        defaults.update(kwargs)
        return await HealthRecordFactory.create(session, pet, **defaults)


class MedicationFactory:
    """Factory for creating test Medication instances."""

    @staticmethod
    def build(**kwargs) -> Medication:
        defaults = {
            "name": "Carprofen",
            "dosage": "25mg",
            "frequency": "Once daily",
            "start_date": TODAY - timedelta(days=5),
        }
        defaults.update(kwargs)
        return Medication(**defaults)

    @staticmethod
    async def create(session: AsyncSession, pet: Pet, **kwargs) -> Medication:
        medication = MedicationFactory.build(pet_id=pet.id, **kwargs)
        session.add(medication)
        await session.flush()
        return medication


class AppointmentFactory:
    """Factory for creating test Appointment instances."""

    @staticmethod
    async def create(
        session: AsyncSession, pet: Pet, veterinarian: Veterinarian, **kwargs
    ) -> Appointment:
        defaults = {
            "pet_id": pet.id,
            "veterinarian": veterinarian,
            "appointment_date": TODAY + timedelta(days=3),
            "appointment_time": time(10, 30),
            "appointment_type": "Checkup",
            "status": AppointmentStatus.SCHEDULED.value,
        }
        defaults.update(kwargs)
        appointment = Appointment(**defaults)
        session.add(appointment)
        await session.flush()
        return appointment


class WeightFactory:
    """Factory for creating test Weight instances."""

    @staticmethod
    async def create(session: AsyncSession, pet: Pet, **kwargs) -> Weight:
        defaults = {
            "pet_id": pet.id,
            "weight_value": Decimal("20.50"),
            "date": TODAY,
        }
        defaults.update(kwargs)
        weight = Weight(**defaults)
        session.add(weight)
        await session.flush()
        return weight


def principal_for(profile: UserProfile, *roles: Role) -> Principal:
    """Principal for ``profile``'s identity; every identity holds ``User``."""
    return Principal.with_roles(profile.identity_id, {Role.USER, *roles})


class InMemoryIdentityProvider:
    """Identity provider double keeping identities in dictionaries."""

    def __init__(self) -> None:
        self.identities: Dict[str, str] = {}
        self.passwords: Dict[str, str] = {}
        self.roles: Dict[str, Set[str]] = {}
        self.sessions: Dict[str, str] = {}
        self.reset_tokens: Dict[str, str] = {}

    async def register(self, email: str, password: str) -> str:
        identity_id = f"identity_{uuid.uuid4().hex[:12]}"
        self.identities[email] = identity_id
        self.passwords[email] = password
        self.roles[identity_id] = set()
        return identity_id

    async def check_password(self, email: str, password: str) -> Optional[str]:
        if self.passwords.get(email) == password:
            return self.identities[email]
        return None

    async def issue_session(self, identity_id: str) -> str:
        token = secrets.token_hex(16)
        self.sessions[token] = identity_id
        return token

    async def end_session(self, token: str) -> None:
        self.sessions.pop(token, None)

    async def get_roles(self, identity_id: str) -> Set[str]:
        return set(self.roles.get(identity_id, set()))

    async def generate_reset_token(self, email: str) -> Optional[str]:
        if email not in self.identities:
            return None
        token = secrets.token_urlsafe(16)
        self.reset_tokens[email] = token
        return token

    async def reset_password(self, email: str, token: str, new_password: str) -> bool:
        if self.reset_tokens.get(email) != token:
            return False
        self.passwords[email] = new_password
        del self.reset_tokens[email]
        return True


class InMemoryBlobStore:
    """Blob store double recording saved and deleted files."""

    def __init__(self, base_url: str = "https://files.test") -> None:
        self.base_url = base_url
        self.files: Dict[str, bytes] = {}
        self.deleted: list = []

    async def save(self, filename: str, content: bytes, container: str) -> str:
        file_id = f"{uuid.uuid4().hex}{check_extension(filename, container)}"
        self.files[f"{container}/{file_id}"] = content
        return file_id

    async def delete(self, file_id: str, container: str) -> None:
        self.deleted.append(f"{container}/{file_id}")
        self.files.pop(f"{container}/{file_id}", None)

    def url_for(self, file_id: str, container: str) -> str:
        return f"{self.base_url}/{container}/{file_id}"


@pytest.fixture
def identity_provider() -> InMemoryIdentityProvider:
    return InMemoryIdentityProvider()


@pytest.fixture
def blob_store() -> InMemoryBlobStore:
    return InMemoryBlobStore()


@pytest_asyncio.fixture
async def owner(async_session: AsyncSession) -> UserProfile:
    return await ProfileFactory.create(async_session, first_name="Alice")


@pytest_asyncio.fixture
async def co_owner(async_session: AsyncSession) -> UserProfile:
    return await ProfileFactory.create(async_session, first_name="Jane")


@pytest_asyncio.fixture
async def stranger(async_session: AsyncSession) -> UserProfile:
    return await ProfileFactory.create(async_session)


@pytest_asyncio.fixture
async def vet_profile(async_session: AsyncSession) -> UserProfile:
    return await ProfileFactory.create(async_session, first_name="Vera")


@pytest_asyncio.fixture
async def admin_profile(async_session: AsyncSession) -> UserProfile:
    return await ProfileFactory.create(async_session, first_name="Ada")


@pytest_asyncio.fixture
async def veterinarian(async_session: AsyncSession) -> Veterinarian:
    return await VeterinarianFactory.create(
        async_session, first_name="Sam", last_name="Smith"
    )


@pytest_asyncio.fixture
async def pet(
    async_session: AsyncSession, owner: UserProfile, co_owner: UserProfile
) -> Pet:
    """Buddy, owned by Alice (primary) and Jane."""
    return await PetFactory.create(
        async_session, owners=[owner, co_owner], name="Buddy"
    )


@pytest.fixture
def owner_principal(owner: UserProfile) -> Principal:
    return principal_for(owner)


@pytest.fixture
def co_owner_principal(co_owner: UserProfile) -> Principal:
    return principal_for(co_owner)


@pytest.fixture
def stranger_principal(stranger: UserProfile) -> Principal:
    return principal_for(stranger)


@pytest.fixture
def vet_principal(vet_profile: UserProfile) -> Principal:
    return principal_for(vet_profile, Role.VETERINARIAN)


@pytest.fixture
def admin_principal(admin_profile: UserProfile) -> Principal:
    return principal_for(admin_profile, Role.ADMIN)
