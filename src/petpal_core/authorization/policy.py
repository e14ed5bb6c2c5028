"""
Authorization predicate engine.

``AuthorizationPolicy.evaluate`` answers "may this principal perform this
action on this resource?" from the principal's roles, its profile id and the
owner links of the pet that owns the resource. It is a pure function of its
inputs: callers load the pet and its owners once, in the same unit of work,
before asking.

Rules are evaluated in order and the first match wins:

1. ``Admin`` is always allowed.
2. Care providers belong to an identity; only that identity may touch them.
   The veterinarian directory is readable by everyone and writable by
   admins only.
3. Any owner may read pet-scoped resources. Veterinarians may read
   clinical records and appointments of any pet.
4. Deleting the pet itself is reserved to its primary owner.
5. Clinical records (health records, vaccinations) may be written by
   veterinarians and by the primary owner only.
6. Care-logistics resources may be written by any owner; veterinarians may
   also write appointments.
7. Everything else is denied.
"""

import enum
import logging
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from ..exceptions import ForbiddenException
from .principal import Principal

logger = logging.getLogger(__name__)


class Action(enum.Enum):
    """Kinds of operation subject to authorization."""

    READ = "read"
    WRITE = "write"
    DELETE = "delete"


class ResourceKind(enum.Enum):
    """Resources guarded by the policy."""

    PET = "pet"
    OWNERSHIP = "ownership"
    HEALTH_RECORD = "health_record"
    VACCINATION = "vaccination"
    APPOINTMENT = "appointment"
    MEDICATION = "medication"
    WEIGHT = "weight"
    FEEDING_SCHEDULE = "feeding_schedule"
    CARE_PROVIDER = "care_provider"
    VETERINARIAN = "veterinarian"


CLINICAL_KINDS = frozenset({ResourceKind.HEALTH_RECORD, ResourceKind.VACCINATION})

LOGISTICS_KINDS = frozenset(
    {
        ResourceKind.PET,
        ResourceKind.OWNERSHIP,
        ResourceKind.APPOINTMENT,
        ResourceKind.MEDICATION,
        ResourceKind.WEIGHT,
        ResourceKind.FEEDING_SCHEDULE,
    }
)

PET_SCOPED_KINDS = CLINICAL_KINDS | LOGISTICS_KINDS

VET_READABLE_KINDS = CLINICAL_KINDS | {ResourceKind.APPOINTMENT}


@dataclass(frozen=True)
class OwnerLink:
    """Ownership facts the policy needs about one owner of a pet."""

    user_profile_id: int
    is_primary_owner: bool = False

    @classmethod
    def from_model(cls, link) -> "OwnerLink":
        return cls(
            user_profile_id=link.user_profile_id,
            is_primary_owner=bool(link.is_primary_owner),
        )


def owner_links(links: Iterable) -> Sequence[OwnerLink]:
    """Snapshot ``PetOwner`` rows (or anything shaped like them) as ``OwnerLink``."""
    return tuple(OwnerLink.from_model(link) for link in links)


@dataclass(frozen=True)
class Decision:
    """Outcome of a policy evaluation."""

    allowed: bool
    reason: str

    def __bool__(self) -> bool:
        return self.allowed


class AuthorizationPolicy:
    """Role and ownership based access rules."""

    def evaluate(
        self,
        principal: Principal,
        action: Action,
        kind: ResourceKind,
        *,
        profile_id: Optional[int] = None,
        owners: Iterable[OwnerLink] = (),
        record_user_id: Optional[str] = None,
    ) -> Decision:
        """
        Decide whether ``principal`` may perform ``action`` on a resource.

        Args:
            principal: The authenticated caller
            action: Operation being attempted
            kind: Kind of the target resource
            profile_id: Caller's user profile id, if it has one
            owners: Owner links of the pet the resource belongs to
            record_user_id: Owning identity id, for care provider records

        Returns:
            Decision with the verdict and the rule that produced it
        """
        if principal.is_admin:
            return Decision(True, "admin")

        if kind is ResourceKind.CARE_PROVIDER:
            if record_user_id is not None and record_user_id == principal.identity_id:
                return Decision(True, "record owner")
            return Decision(False, "care provider belongs to another user")

        if kind is ResourceKind.VETERINARIAN:
            if action is Action.READ:
                return Decision(True, "directory read")
            return Decision(False, "only admins manage veterinarians")

        if kind not in PET_SCOPED_KINDS:
            return Decision(False, "unknown resource kind")

        link = self._find_link(profile_id, owners)

        if action is Action.READ:
            if link is not None:
                return Decision(True, "owner read")
            if kind in VET_READABLE_KINDS and principal.is_veterinarian:
                return Decision(True, "veterinarian read")
            return Decision(False, "not an owner of this pet")

        if kind is ResourceKind.PET and action is Action.DELETE:
            if link is not None and link.is_primary_owner:
                return Decision(True, "primary owner")
            return Decision(False, "only the primary owner may delete a pet")

        if kind in CLINICAL_KINDS:
            if principal.is_veterinarian:
                return Decision(True, "veterinarian clinical write")
            if link is not None and link.is_primary_owner:
                return Decision(True, "primary owner")
            if link is not None:
                return Decision(False, "co-owners cannot modify clinical records")
            return Decision(False, "not an owner of this pet")

        if link is not None:
            return Decision(True, "owner")
        if kind is ResourceKind.APPOINTMENT and principal.is_veterinarian:
            return Decision(True, "veterinarian appointment write")
        return Decision(False, "not an owner of this pet")

    def enforce(
        self,
        principal: Principal,
        action: Action,
        kind: ResourceKind,
        *,
        profile_id: Optional[int] = None,
        owners: Iterable[OwnerLink] = (),
        record_user_id: Optional[str] = None,
    ) -> Decision:
        """
        Evaluate and raise on denial.

        Raises:
            ForbiddenException: If the policy denies the operation
        """
        decision = self.evaluate(
            principal,
            action,
            kind,
            profile_id=profile_id,
            owners=owners,
            record_user_id=record_user_id,
        )
        if not decision.allowed:
            logger.warning(
                f"Denied {action.value} on {kind.value} for {principal.identity_id}: "
                f"{decision.reason}"
            )
            raise ForbiddenException(
                action=action.value, resource=kind.value, reason=decision.reason
            )
        return decision

    @staticmethod
    def _find_link(
        profile_id: Optional[int], owners: Iterable[OwnerLink]
    ) -> Optional[OwnerLink]:
        if profile_id is None:
            return None
        for link in owners:
            if link.user_profile_id == profile_id:
                return link
        return None


default_policy = AuthorizationPolicy()
