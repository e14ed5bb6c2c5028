"""
Database-agnostic column types for petpal-core.

PostgreSQL stores ``timestamptz`` and hands back aware datetimes, while
SQLite stores text and hands back naive ones. The types here normalise both
backends to aware UTC so comparisons in the services never mix naive and
aware values.
"""

from datetime import datetime
from typing import Any, Optional

from sqlalchemy import DateTime, TypeDecorator
from sqlalchemy.engine import Dialect

from ..utils.datetime_utils import UTC, ensure_utc


class UTCDateTime(TypeDecorator):
    """
    Timezone-aware UTC timestamp column.

    Values are converted to UTC on the way in and always come back aware,
    regardless of whether the backend preserves the offset.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(
        self, value: Optional[datetime], dialect: Dialect
    ) -> Optional[datetime]:
        """Process value when storing to database."""
        if value is None:
            return None
        value = ensure_utc(value)
        if dialect.name == "sqlite":
            return value.replace(tzinfo=None)
        return value

    def process_result_value(self, value: Any, dialect: Dialect) -> Optional[datetime]:
        """Process value when loading from database."""
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value.astimezone(UTC)
