"""
Pet profile and ownership operations.

The creator of a pet becomes its primary owner. Ownership changes keep two
invariants: a pet has at most one primary owner, and a pet always keeps at
least one owner.
"""

import logging
from typing import Any, List, Mapping, Optional, Union

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..authorization import Action, Principal, ResourceKind
from ..exceptions import (
    ConflictException,
    InvalidStateException,
    ResourceNotFoundException,
    translate_store_errors,
)
from ..models import (
    Appointment,
    FeedingSchedule,
    HealthRecord,
    Medication,
    Pet,
    PetOwner,
    UserProfile,
    Weight,
)
from ..schemas import (
    PetCreate,
    PetOwnerAdd,
    PetOwnerResponse,
    PetResponse,
    PetUpdate,
    changed_fields,
    parse_payload,
)
from ..utils.datetime_utils import get_current_utc
from .base import authorize_pet, resolve_profile, resolve_veterinarian
from .files import PET_IMAGES_CONTAINER, BlobStore, file_id_from_url

logger = logging.getLogger(__name__)

PET_CHILD_MODELS = (HealthRecord, Appointment, Medication, Weight, FeedingSchedule)


async def list_pets(
    session: AsyncSession, principal: Optional[Principal]
) -> List[PetResponse]:
    """Pets owned by the caller; admins see every pet."""
    profile = await resolve_profile(session, principal)
    stmt = select(Pet).order_by(Pet.name, Pet.id)
    if not principal.is_admin:
        stmt = stmt.join(PetOwner).where(PetOwner.user_profile_id == profile.id)
    result = await session.execute(stmt)
    return [PetResponse.from_model(pet) for pet in result.scalars().all()]


async def get_pet(
    session: AsyncSession, principal: Optional[Principal], pet_id: int
) -> PetResponse:
    access = await authorize_pet(
        session, principal, pet_id, Action.READ, ResourceKind.PET
    )
    return PetResponse.from_model(access.pet)


@translate_store_errors("create_pet")
async def create_pet(
    session: AsyncSession,
    principal: Optional[Principal],
    data: Union[PetCreate, Mapping[str, Any]],
) -> PetResponse:
    """
    Create a pet owned (as primary) by the caller.

    An initial weight is recorded as the first weight measurement so that the
    current weight keeps following the weight history.
    """
    payload = parse_payload(PetCreate, data)
    profile = await resolve_profile(session, principal)
    await resolve_veterinarian(session, payload.veterinarian_id)

    pet = Pet(**payload.model_dump(exclude={"weight"}))
    pet.owners.append(PetOwner(user_profile=profile, is_primary_owner=True))
    session.add(pet)
    await session.flush()

    if payload.weight is not None:
        session.add(
            Weight(
                pet_id=pet.id,
                weight_value=payload.weight,
                date=get_current_utc().date(),
                notes="Initial weight",
            )
        )
        pet.weight = payload.weight
        await session.flush()

    logger.info(f"Created pet {pet.id} for profile {profile.id}")
    return PetResponse.from_model(pet)


@translate_store_errors("update_pet")
async def update_pet(
    session: AsyncSession,
    principal: Optional[Principal],
    pet_id: int,
    data: Union[PetUpdate, Mapping[str, Any]],
) -> PetResponse:
    payload = parse_payload(PetUpdate, data)
    access = await authorize_pet(
        session, principal, pet_id, Action.WRITE, ResourceKind.PET
    )
    changes = changed_fields(payload)
    if "veterinarian_id" in changes:
        await resolve_veterinarian(session, changes["veterinarian_id"])

    access.pet.update_fields(**changes)
    await session.flush()
    logger.info(f"Updated pet {pet_id}: {sorted(changes)}")
    return PetResponse.from_model(access.pet)


@translate_store_errors("delete_pet")
async def delete_pet(
    session: AsyncSession, principal: Optional[Principal], pet_id: int
) -> None:
    """
    Delete a pet and everything recorded for it.

    Child rows are removed explicitly in the same transaction before the pet
    row itself, so the cascade does not depend on the database enforcing
    foreign keys.
    """
    access = await authorize_pet(
        session, principal, pet_id, Action.DELETE, ResourceKind.PET
    )
    pet = access.pet

    for model in PET_CHILD_MODELS:
        await session.execute(delete(model).where(model.pet_id == pet.id))
    session.expire(
        pet,
        [
            "health_records",
            "appointments",
            "medications",
            "weights",
            "feeding_schedules",
        ],
    )

    await session.delete(pet)
    await session.flush()
    logger.info(f"Deleted pet {pet_id} and its records")


async def list_owners(
    session: AsyncSession, principal: Optional[Principal], pet_id: int
) -> List[PetOwnerResponse]:
    access = await authorize_pet(
        session, principal, pet_id, Action.READ, ResourceKind.OWNERSHIP
    )
    links = sorted(
        access.pet.owners, key=lambda link: (not link.is_primary_owner, link.id)
    )
    return [PetOwnerResponse.from_model(link) for link in links]


async def _make_primary(session: AsyncSession, pet: Pet, target: PetOwner) -> None:
    """Flip the primary flag to ``target``, demoting the current primary first."""
    current = pet.primary_owner
    if current is target:
        return
    if current is not None:
        current.is_primary_owner = False
        await session.flush()
    target.is_primary_owner = True
    await session.flush()


def _find_link(pet: Pet, owner_id: int) -> PetOwner:
    for link in pet.owners:
        if link.id == owner_id:
            return link
    raise ResourceNotFoundException(
        "PetOwner", owner_id, "Owner not found for this pet"
    )


@translate_store_errors("add_owner")
async def add_owner(
    session: AsyncSession,
    principal: Optional[Principal],
    pet_id: int,
    data: Union[PetOwnerAdd, Mapping[str, Any]],
) -> PetOwnerResponse:
    """
    Add a co-owner, optionally making them the primary owner.

    Raises:
        ResourceNotFoundException: If the target profile does not exist
        ConflictException: If the profile already owns the pet
    """
    payload = parse_payload(PetOwnerAdd, data)
    access = await authorize_pet(
        session, principal, pet_id, Action.WRITE, ResourceKind.OWNERSHIP
    )
    pet = access.pet

    if payload.user_profile_id is not None:
        profile = await session.get(UserProfile, payload.user_profile_id)
        lookup = payload.user_profile_id
    else:
        result = await session.execute(
            select(UserProfile).where(UserProfile.email == payload.email.lower())
        )
        profile = result.scalar_one_or_none()
        lookup = payload.email
    if profile is None:
        raise ResourceNotFoundException("UserProfile", lookup)

    if any(link.user_profile_id == profile.id for link in pet.owners):
        raise ConflictException(
            "This user is already an owner of this pet",
            resource="PetOwner",
            context={"pet_id": pet.id, "user_profile_id": profile.id},
        )

    link = PetOwner(pet=pet, user_profile=profile, is_primary_owner=False)
    session.add(link)
    await session.flush()

    if payload.is_primary_owner or pet.primary_owner is None:
        await _make_primary(session, pet, link)

    logger.info(
        f"Added profile {profile.id} as {'primary' if link.is_primary_owner else 'co'}"
        f"-owner of pet {pet.id}"
    )
    return PetOwnerResponse.from_model(link)


@translate_store_errors("transfer_primary_owner")
async def transfer_primary_owner(
    session: AsyncSession,
    principal: Optional[Principal],
    pet_id: int,
    owner_id: int,
) -> PetOwnerResponse:
    """
    Make the owner link ``owner_id`` the primary owner of the pet.

    The old primary is demoted and the new one promoted in the caller's
    transaction, touching two rows (one when the pet had no primary).
    """
    access = await authorize_pet(
        session, principal, pet_id, Action.WRITE, ResourceKind.OWNERSHIP
    )
    target = _find_link(access.pet, owner_id)
    await _make_primary(session, access.pet, target)
    logger.info(
        f"Primary owner of pet {pet_id} is now profile {target.user_profile_id}"
    )
    return PetOwnerResponse.from_model(target)


@translate_store_errors("remove_owner")
async def remove_owner(
    session: AsyncSession,
    principal: Optional[Principal],
    pet_id: int,
    owner_id: int,
    reassign_to: Optional[int] = None,
) -> None:
    """
    Remove an owner link from a pet.

    Args:
        owner_id: Id of the owner link to remove
        reassign_to: Owner link that becomes primary when the primary owner
            is removed

    Raises:
        InvalidStateException: When removing the only owner, or the primary
            owner without naming who takes over
    """
    access = await authorize_pet(
        session, principal, pet_id, Action.WRITE, ResourceKind.OWNERSHIP
    )
    pet = access.pet
    link = _find_link(pet, owner_id)

    if len(pet.owners) == 1:
        raise InvalidStateException(
            "Cannot remove the only owner of a pet",
            rule_name="pet_requires_owner",
            context={"pet_id": pet.id},
        )

    if link.is_primary_owner:
        if reassign_to is None:
            raise InvalidStateException(
                "Cannot remove the primary owner. "
                "Transfer primary ownership to another owner first.",
                rule_name="primary_owner_reassignment",
                context={"pet_id": pet.id},
            )
        if reassign_to == link.id:
            raise InvalidStateException(
                "Primary ownership must pass to a different owner",
                rule_name="primary_owner_reassignment",
                context={"pet_id": pet.id},
            )
        await _make_primary(session, pet, _find_link(pet, reassign_to))

    pet.owners.remove(link)
    await session.flush()
    logger.info(f"Removed owner link {owner_id} from pet {pet_id}")


@translate_store_errors("upload_pet_photo")
async def upload_pet_photo(
    session: AsyncSession,
    principal: Optional[Principal],
    pet_id: int,
    filename: str,
    content: bytes,
    store: BlobStore,
) -> PetResponse:
    """
    Store a new photo for the pet and drop the previous one.

    Raises:
        InvalidInputException: If the file is not an allowed image type
    """
    access = await authorize_pet(
        session, principal, pet_id, Action.WRITE, ResourceKind.PET
    )
    pet = access.pet
    previous_id = file_id_from_url(pet.image_url)

    file_id = await store.save(filename, content, PET_IMAGES_CONTAINER)
    pet.image_url = store.url_for(file_id, PET_IMAGES_CONTAINER)
    await session.flush()

    if previous_id is not None:
        await store.delete(previous_id, PET_IMAGES_CONTAINER)

    logger.info(f"Updated photo of pet {pet_id}")
    return PetResponse.from_model(pet)
