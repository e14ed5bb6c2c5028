"""
Account registration, sign-in and the caller's own profile.

Identities and credentials belong to the identity provider; the core only
keeps the ``UserProfile`` that pets and settings hang off.
"""

import logging
from typing import Any, Mapping, Optional, Tuple, Union

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..authorization import IdentityProvider, Principal, resolve_principal
from ..exceptions import (
    ConflictException,
    InvalidInputException,
    UnauthenticatedException,
    translate_store_errors,
)
from ..models import UserProfile
from ..schemas import (
    LoginRequest,
    PasswordResetRequest,
    ProfileResponse,
    ProfileUpdate,
    RegisterRequest,
    changed_fields,
    parse_payload,
)
from .base import resolve_profile

logger = logging.getLogger(__name__)


@translate_store_errors("register_account")
async def register_account(
    session: AsyncSession,
    identity: IdentityProvider,
    data: Union[RegisterRequest, Mapping[str, Any]],
) -> ProfileResponse:
    """
    Create an identity with the provider and a profile linked to it.

    Raises:
        ConflictException: If a profile already uses the email address
    """
    payload = parse_payload(RegisterRequest, data)

    existing = await session.scalar(
        select(UserProfile.id).where(UserProfile.email == payload.email)
    )
    if existing is not None:
        logger.warning(f"Registration rejected, email in use: {payload.email}")
        raise ConflictException(
            "An account with this email already exists",
            resource="UserProfile",
            context={"email": payload.email},
        )

    identity_id = await identity.register(payload.email, payload.password)
    profile = UserProfile(
        identity_id=identity_id,
        **payload.model_dump(exclude={"password"}),
    )
    session.add(profile)
    await session.flush()

    logger.info(f"Registered profile {profile.id} for identity {identity_id}")
    return ProfileResponse.model_validate(profile)


async def get_current_profile(
    session: AsyncSession, principal: Optional[Principal]
) -> ProfileResponse:
    return ProfileResponse.model_validate(await resolve_profile(session, principal))


@translate_store_errors("update_profile")
async def update_profile(
    session: AsyncSession,
    principal: Optional[Principal],
    data: Union[ProfileUpdate, Mapping[str, Any]],
) -> ProfileResponse:
    payload = parse_payload(ProfileUpdate, data)
    profile = await resolve_profile(session, principal)
    profile.update_fields(**changed_fields(payload))
    await session.flush()
    return ProfileResponse.model_validate(profile)


async def login(
    session: AsyncSession,
    identity: IdentityProvider,
    data: Union[LoginRequest, Mapping[str, Any]],
) -> Tuple[str, ProfileResponse]:
    """
    Check credentials with the identity provider and open a session.

    Returns:
        The session token and the caller's profile

    Raises:
        UnauthenticatedException: If the credentials do not match
        ProfileNotFoundException: If the identity has no profile
    """
    payload = parse_payload(LoginRequest, data)
    identity_id = await identity.check_password(payload.email, payload.password)
    if identity_id is None:
        logger.warning(f"Failed login for {payload.email}")
        raise UnauthenticatedException("Invalid email or password")

    principal = await resolve_principal(identity, identity_id)
    profile = await resolve_profile(session, principal)
    token = await identity.issue_session(identity_id)

    logger.info(f"Profile {profile.id} signed in")
    return token, ProfileResponse.model_validate(profile)


async def logout(identity: IdentityProvider, token: str) -> None:
    await identity.end_session(token)


async def request_password_reset(
    identity: IdentityProvider, email: str
) -> Optional[str]:
    """
    Ask the provider for a reset token to deliver to ``email``.

    Unknown addresses yield ``None`` so callers can answer identically
    whether or not the account exists.
    """
    token = await identity.generate_reset_token(email.strip().lower())
    if token is None:
        logger.info("Password reset requested for an unknown email")
    return token


async def reset_password(
    identity: IdentityProvider,
    data: Union[PasswordResetRequest, Mapping[str, Any]],
) -> None:
    """
    Raises:
        InvalidInputException: If the provider rejects the reset token
    """
    payload = parse_payload(PasswordResetRequest, data)
    accepted = await identity.reset_password(
        payload.email, payload.token, payload.new_password
    )
    if not accepted:
        raise InvalidInputException("Invalid or expired reset token", field="token")
    logger.info(f"Password reset completed for {payload.email}")
