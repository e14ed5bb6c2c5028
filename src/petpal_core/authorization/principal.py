"""
Principal and role definitions.

A principal is the authenticated caller as reported by the identity
provider: an opaque identity id plus the set of roles granted to it.
"""

import enum
from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, Union


class Role(enum.Enum):
    """Enumeration of roles recognised by the authorization policy."""

    ADMIN = "Admin"
    USER = "User"
    VETERINARIAN = "Veterinarian"


def _coerce_role(value: Union[Role, str]) -> Role:
    if isinstance(value, Role):
        return value
    for role in Role:
        if role.value.lower() == str(value).lower():
            return role
    raise ValueError(f"Unknown role: {value}")


@dataclass(frozen=True)
class Principal:
    """
    Authenticated caller.

    Attributes:
        identity_id: Identifier issued by the identity provider
        roles: Granted roles; string names are accepted and normalized
    """

    identity_id: str
    roles: FrozenSet[Role] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        if not self.identity_id:
            raise ValueError("identity_id is required")
        object.__setattr__(
            self, "roles", frozenset(_coerce_role(role) for role in self.roles)
        )

    @classmethod
    def with_roles(
        cls, identity_id: str, roles: Iterable[Union[Role, str]]
    ) -> "Principal":
        return cls(identity_id=identity_id, roles=frozenset(roles))

    def has_role(self, role: Role) -> bool:
        return role in self.roles

    @property
    def is_admin(self) -> bool:
        """Check if the principal holds the Admin role."""
        return Role.ADMIN in self.roles

    @property
    def is_veterinarian(self) -> bool:
        """Check if the principal holds the Veterinarian role."""
        return Role.VETERINARIAN in self.roles

    @property
    def is_staff(self) -> bool:
        """Admins and veterinarians see upcoming vaccinations of every pet."""
        return self.is_admin or self.is_veterinarian
