"""
Identity provider contract.

Credentials, password hashing and session tokens live outside the core.
Anything that implements ``IdentityProvider`` can back account
registration and principal resolution.
"""

from typing import Optional, Protocol, Set, runtime_checkable

from .principal import Principal, Role


@runtime_checkable
class IdentityProvider(Protocol):
    """Operations the core expects from the external identity service."""

    async def register(self, email: str, password: str) -> str:
        """Create an identity and return its id."""
        ...

    async def check_password(self, email: str, password: str) -> Optional[str]:
        """Return the identity id when the credentials match, else ``None``."""
        ...

    async def issue_session(self, identity_id: str) -> str:
        """Start a session and return its opaque token."""
        ...

    async def end_session(self, token: str) -> None:
        ...

    async def get_roles(self, identity_id: str) -> Set[str]:
        ...

    async def generate_reset_token(self, email: str) -> Optional[str]:
        """Return a password reset token, or ``None`` for unknown emails."""
        ...

    async def reset_password(self, email: str, token: str, new_password: str) -> bool:
        ...


async def resolve_principal(
    provider: IdentityProvider, identity_id: Optional[str]
) -> Optional[Principal]:
    """
    Build a ``Principal`` for ``identity_id`` with its current roles.

    Returns ``None`` for anonymous callers. Every identity implicitly holds
    the ``User`` role.
    """
    if not identity_id:
        return None
    roles = {Role.USER.value}
    roles.update(await provider.get_roles(identity_id))
    return Principal.with_roles(identity_id, roles)
