#!/usr/bin/env python3
"""
Basic usage examples for the petpal-core package.

This example walks through the most common flows: registering an account,
creating a pet, recording a weight and a medication with reminders, and
reading the dashboard and an export. It runs against an in-memory SQLite
database, so it needs the ``sqlite`` extra installed.
"""

import asyncio
import os
import secrets
import uuid
from datetime import date, time
from typing import Dict, Optional, Set

from petpal_core import PetPalException, SessionManager, create_engine
from petpal_core.authorization import resolve_principal
from petpal_core.database import close_engine
from petpal_core.models import Base
from petpal_core.services import (
    accounts,
    build_user_dashboard,
    export,
    medications,
    pets,
    weights,
)
from petpal_core.utils import PetPalSettings


class DemoIdentityProvider:
    """Minimal identity provider keeping accounts in memory."""

    def __init__(self) -> None:
        self.accounts: Dict[str, tuple] = {}
        self.sessions: Dict[str, str] = {}

    async def register(self, email: str, password: str) -> str:
        identity_id = f"demo_{uuid.uuid4().hex[:8]}"
        self.accounts[email] = (identity_id, password)
        return identity_id

    async def check_password(self, email: str, password: str) -> Optional[str]:
        identity_id, stored = self.accounts.get(email, (None, None))
        return identity_id if stored == password else None

    async def issue_session(self, identity_id: str) -> str:
        token = secrets.token_hex(8)
        self.sessions[token] = identity_id
        return token

    async def end_session(self, token: str) -> None:
        self.sessions.pop(token, None)

    async def get_roles(self, identity_id: str) -> Set[str]:
        return set()

    async def generate_reset_token(self, email: str) -> Optional[str]:
        return None

    async def reset_password(self, email: str, token: str, new_password: str) -> bool:
        return False


async def setup_database() -> SessionManager:
    """Set up an in-memory database for the examples."""
    database_url = os.getenv("PETPAL_DATABASE_URL", "sqlite+aiosqlite:///:memory:")
    manager = SessionManager(create_engine(database_url))
    await manager.initialize_database(Base.metadata)
    return manager


async def main() -> None:
    settings = PetPalSettings.from_environment()
    settings.configure_logging()

    manager = await setup_database()
    identity = DemoIdentityProvider()

    print("\n=== Registering Account ===")
    async with manager.get_transaction() as session:
        profile = await accounts.register_account(
            session,
            identity,
            {
                "email": "alice@example.com",
                "password": "walkies123",
                "first_name": "Alice",
                "last_name": "Walker",
            },
        )
    print(f"✓ Profile {profile.id} created for {profile.full_name}")

    async with manager.get_session() as session:
        token, _ = await accounts.login(
            session, identity, {"email": "alice@example.com", "password": "walkies123"}
        )
    principal = await resolve_principal(identity, identity.sessions[token])
    print(f"✓ Signed in with session {token}")

    print("\n=== Creating Pet ===")
    async with manager.get_transaction() as session:
        pet = await pets.create_pet(
            session,
            principal,
            {
                "name": "Buddy",
                "species": "Dog",
                "breed": "Golden Retriever",
                "date_of_birth": date(2020, 3, 15),
                "weight": "29.5",
            },
        )
        await weights.create_weight(
            session, principal, pet.id, {"weight_value": "30.1", "date": date.today()}
        )
        medication = await medications.create_medication(
            session,
            principal,
            pet.id,
            {
                "name": "Heartgard",
                "dosage": "68mg",
                "frequency": "Monthly",
                "start_date": date.today(),
                "reminder_enabled": True,
                "reminder_time": time(8, 0),
            },
        )
    print(f"✓ Pet created with ID: {pet.id}")
    print(f"✓ Next reminder for {medication.name}: {medication.next_reminder_due}")

    print("\n=== Dashboard ===")
    async with manager.get_session() as session:
        dashboard = await build_user_dashboard(session, profile.id)
        for summary in dashboard.pets:
            print(
                f"  {summary.pet_name}: "
                f"{summary.active_medications_count} active medication(s)"
            )
        for event in dashboard.upcoming_events:
            print(f"  {event.event_date} {event.title}")

    print("\n=== Export ===")
    async with manager.get_session() as session:
        result = await export.export_pet(
            session, principal, pet.id, {"sections": ["BasicInfo", "WeightRecords"]}
        )
    print(f"✓ {result.file_name} ({result.content_type})")
    print(result.content.decode("utf-8"))

    print("\n=== Error Handling ===")
    try:
        async with manager.get_transaction() as session:
            owners = await pets.list_owners(session, principal, pet.id)
            await pets.remove_owner(session, principal, pet.id, owners[0].id)
    except PetPalException as e:
        print(f"✗ {e.error_code}: {e.message}")

    await manager.close_all_sessions()
    await close_engine(manager.engine)


if __name__ == "__main__":
    asyncio.run(main())
