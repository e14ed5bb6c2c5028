"""
Personal directory of non-veterinary care providers.

Entries belong to an identity id rather than to a pet, so the policy is
asked with the record's ``user_id`` instead of a pet owner list.
"""

import logging
from typing import Any, List, Mapping, Optional, Union

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..authorization import (
    Action,
    AuthorizationPolicy,
    Principal,
    ResourceKind,
    default_policy,
)
from ..exceptions import ResourceNotFoundException, translate_store_errors
from ..models import CareProvider
from ..schemas import (
    CareProviderCreate,
    CareProviderResponse,
    CareProviderUpdate,
    changed_fields,
    parse_payload,
)
from .base import resolve_profile

logger = logging.getLogger(__name__)


async def _load_provider(
    session: AsyncSession,
    principal: Principal,
    provider_id: int,
    action: Action,
    policy: AuthorizationPolicy,
) -> CareProvider:
    provider = await session.get(CareProvider, provider_id)
    if provider is None:
        raise ResourceNotFoundException("CareProvider", provider_id)
    policy.enforce(
        principal, action, ResourceKind.CARE_PROVIDER, record_user_id=provider.user_id
    )
    return provider


async def list_care_providers(
    session: AsyncSession, principal: Optional[Principal]
) -> List[CareProviderResponse]:
    """The caller's own providers by name; admins see every entry."""
    await resolve_profile(session, principal)
    stmt = select(CareProvider).order_by(CareProvider.name, CareProvider.id)
    if not principal.is_admin:
        stmt = stmt.where(CareProvider.user_id == principal.identity_id)
    result = await session.execute(stmt)
    return [CareProviderResponse.model_validate(p) for p in result.scalars().all()]


async def get_care_provider(
    session: AsyncSession,
    principal: Optional[Principal],
    provider_id: int,
    policy: AuthorizationPolicy = default_policy,
) -> CareProviderResponse:
    await resolve_profile(session, principal)
    provider = await _load_provider(
        session, principal, provider_id, Action.READ, policy
    )
    return CareProviderResponse.model_validate(provider)


@translate_store_errors("create_care_provider")
async def create_care_provider(
    session: AsyncSession,
    principal: Optional[Principal],
    data: Union[CareProviderCreate, Mapping[str, Any]],
) -> CareProviderResponse:
    """Add an entry owned by the caller's identity."""
    payload = parse_payload(CareProviderCreate, data)
    await resolve_profile(session, principal)

    provider = CareProvider(user_id=principal.identity_id, **payload.model_dump())
    session.add(provider)
    await session.flush()

    logger.info(f"Created care provider {provider.id} for {principal.identity_id}")
    return CareProviderResponse.model_validate(provider)


@translate_store_errors("update_care_provider")
async def update_care_provider(
    session: AsyncSession,
    principal: Optional[Principal],
    provider_id: int,
    data: Union[CareProviderUpdate, Mapping[str, Any]],
    policy: AuthorizationPolicy = default_policy,
) -> CareProviderResponse:
    payload = parse_payload(CareProviderUpdate, data)
    await resolve_profile(session, principal)
    provider = await _load_provider(
        session, principal, provider_id, Action.WRITE, policy
    )
    provider.update_fields(**changed_fields(payload))
    await session.flush()
    return CareProviderResponse.model_validate(provider)


@translate_store_errors("delete_care_provider")
async def delete_care_provider(
    session: AsyncSession,
    principal: Optional[Principal],
    provider_id: int,
    policy: AuthorizationPolicy = default_policy,
) -> None:
    await resolve_profile(session, principal)
    provider = await _load_provider(
        session, principal, provider_id, Action.DELETE, policy
    )
    await session.delete(provider)
    await session.flush()
    logger.info(f"Deleted care provider {provider_id}")
