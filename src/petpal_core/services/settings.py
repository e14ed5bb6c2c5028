"""
Per-profile notification settings and theme preference.
"""

import logging
from typing import Any, Mapping, Optional, Union

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..authorization import Principal
from ..exceptions import translate_store_errors
from ..models import NotificationSettings, UserProfile
from ..schemas import (
    NotificationSettingsResponse,
    NotificationSettingsUpdate,
    ThemePreference,
    changed_fields,
    parse_payload,
)
from .base import resolve_profile

logger = logging.getLogger(__name__)


async def _settings_for(
    session: AsyncSession, profile: UserProfile
) -> NotificationSettings:
    """Load the profile's settings row, creating it with defaults if missing."""
    settings = await session.scalar(
        select(NotificationSettings).where(
            NotificationSettings.user_profile_id == profile.id
        )
    )
    if settings is None:
        settings = NotificationSettings(user_profile_id=profile.id)
        session.add(settings)
        await session.flush()
        logger.info(f"Created default notification settings for profile {profile.id}")
    return settings


@translate_store_errors("get_notification_settings")
async def get_notification_settings(
    session: AsyncSession, principal: Optional[Principal]
) -> NotificationSettingsResponse:
    profile = await resolve_profile(session, principal)
    settings = await _settings_for(session, profile)
    return NotificationSettingsResponse.model_validate(settings)


@translate_store_errors("update_notification_settings")
async def update_notification_settings(
    session: AsyncSession,
    principal: Optional[Principal],
    data: Union[NotificationSettingsUpdate, Mapping[str, Any]],
) -> NotificationSettingsResponse:
    """Change the given toggles; toggles left unset or null keep their value."""
    payload = parse_payload(NotificationSettingsUpdate, data)
    profile = await resolve_profile(session, principal)
    settings = await _settings_for(session, profile)

    changes = {k: v for k, v in changed_fields(payload).items() if v is not None}
    settings.update_fields(**changes)
    await session.flush()

    logger.info(f"Updated notification settings of profile {profile.id}")
    return NotificationSettingsResponse.model_validate(settings)


async def get_theme(
    session: AsyncSession, principal: Optional[Principal]
) -> ThemePreference:
    profile = await resolve_profile(session, principal)
    return ThemePreference(theme=profile.theme_preference)


@translate_store_errors("update_theme")
async def update_theme(
    session: AsyncSession,
    principal: Optional[Principal],
    data: Union[ThemePreference, Mapping[str, Any]],
) -> ThemePreference:
    """
    Raises:
        SchemaValidationException: If the theme is not light, dark or system
    """
    payload = parse_payload(ThemePreference, data)
    profile = await resolve_profile(session, principal)
    profile.theme_preference = payload.theme
    await session.flush()
    return ThemePreference(theme=profile.theme_preference)
