"""
Shared plumbing for the PetPal services.

Every service operation follows the same steps: require a principal,
resolve its user profile, load the owning pet together with its owner
links, ask the authorization policy, then read or write rows. The helpers
here implement those steps once.
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional, Sequence, Type, TypeVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..authorization import (
    Action,
    AuthorizationPolicy,
    Principal,
    ResourceKind,
    default_policy,
    owner_links,
)
from ..exceptions import (
    ProfileNotFoundException,
    ResourceNotFoundException,
    UnauthenticatedException,
)
from ..models import BaseModel, Pet, PetOwner, UserProfile, Veterinarian

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


@dataclass
class PetAccess:
    """A pet loaded with its owners, plus the caller that was authorized on it."""

    principal: Principal
    profile: UserProfile
    pet: Pet


def require_principal(principal: Optional[Principal]) -> Principal:
    """
    Raises:
        UnauthenticatedException: If no principal was supplied
    """
    if principal is None:
        raise UnauthenticatedException()
    return principal


async def resolve_profile(
    session: AsyncSession, principal: Optional[Principal]
) -> UserProfile:
    """
    Load the user profile linked to the principal's identity id.

    Raises:
        UnauthenticatedException: If no principal was supplied
        ProfileNotFoundException: If the identity has no profile
    """
    principal = require_principal(principal)
    result = await session.execute(
        select(UserProfile).where(UserProfile.identity_id == principal.identity_id)
    )
    profile = result.scalar_one_or_none()
    if profile is None:
        raise ProfileNotFoundException(principal.identity_id)
    return profile


async def load_pet(session: AsyncSession, pet_id: int) -> Pet:
    """
    Load a pet and its owner links (with their profiles) in one unit of work.

    Raises:
        ResourceNotFoundException: If the pet does not exist
    """
    result = await session.execute(
        select(Pet)
        .options(selectinload(Pet.owners).selectinload(PetOwner.user_profile))
        .where(Pet.id == pet_id)
    )
    pet = result.scalar_one_or_none()
    if pet is None:
        raise ResourceNotFoundException("Pet", pet_id)
    return pet


async def authorize_pet(
    session: AsyncSession,
    principal: Optional[Principal],
    pet_id: int,
    action: Action,
    kind: ResourceKind,
    policy: AuthorizationPolicy = default_policy,
) -> PetAccess:
    """
    Resolve the caller, load the pet and enforce the policy for ``kind``.

    The owner list the policy sees is the one loaded here; it is not
    re-queried afterwards.
    """
    profile = await resolve_profile(session, principal)
    pet = await load_pet(session, pet_id)
    policy.enforce(
        principal,
        action,
        kind,
        profile_id=profile.id,
        owners=owner_links(pet.owners),
    )
    return PetAccess(principal=principal, profile=profile, pet=pet)


async def get_pet_record(
    session: AsyncSession,
    model: Type[ModelT],
    record_id: int,
    pet_id: int,
    options: Sequence[Any] = (),
    resource: Optional[str] = None,
) -> ModelT:
    """
    Load a pet-owned row, treating rows of another pet as missing.

    Raises:
        ResourceNotFoundException: If no such row belongs to ``pet_id``
    """
    result = await session.execute(
        select(model).options(*options).where(model.id == record_id)
    )
    record = result.scalar_one_or_none()
    if record is None or record.pet_id != pet_id:
        raise ResourceNotFoundException(resource or model.__name__, record_id)
    return record


async def owned_pet_ids(
    session: AsyncSession, profile: UserProfile, include_all: bool = False
) -> Sequence[int]:
    """Ids of the pets owned by ``profile``, or of every pet with ``include_all``."""
    stmt = select(Pet.id).order_by(Pet.id)
    if not include_all:
        stmt = stmt.join(PetOwner).where(PetOwner.user_profile_id == profile.id)
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def resolve_veterinarian(
    session: AsyncSession, veterinarian_id: Optional[int]
) -> Optional[Veterinarian]:
    """
    Raises:
        ResourceNotFoundException: If an id is given and no such vet exists
    """
    if veterinarian_id is None:
        return None
    veterinarian = await session.get(Veterinarian, veterinarian_id)
    if veterinarian is None:
        raise ResourceNotFoundException("Veterinarian", veterinarian_id)
    return veterinarian
