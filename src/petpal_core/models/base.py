"""
Base model class for all SQLAlchemy models in the petpal-core package.

Every PetPal entity has a surrogate integer primary key and UTC
``created_at``/``updated_at`` audit timestamps. ``updated_at`` is refreshed
by the ORM on every UPDATE the session flushes.

Example:
    >>> from petpal_core.models.base import BaseModel
    >>> from sqlalchemy.orm import Mapped, mapped_column
    >>> from sqlalchemy import String

    >>> class MyModel(BaseModel):
    ...     __tablename__ = "my_table"
    ...     name: Mapped[str] = mapped_column(String(100))

    >>> instance = MyModel(name="Test")
    >>> data = instance.to_dict()
    >>> print(data['name'])  # "Test"
"""

from datetime import date, datetime, time
from decimal import Decimal
from typing import Any, Dict, TypeVar

from sqlalchemy import Integer
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from ..database.types import UTCDateTime
from ..utils.datetime_utils import get_current_utc

T = TypeVar("T", bound="BaseModel")


class Base(DeclarativeBase):
    """
    Base declarative class for all SQLAlchemy models.

    Maps ``datetime`` annotations to the UTC-normalising column type so
    SQLite and PostgreSQL behave the same.
    """

    type_annotation_map = {
        datetime: UTCDateTime(),
    }


class BaseModel(Base):
    """
    Abstract base model class providing common functionality for all entities.

    Attributes:
        id (int): Surrogate primary key
        created_at (datetime): Timestamp when record was created (UTC)
        updated_at (datetime): Timestamp when record was last updated (UTC)

    Note:
        This is an abstract base class and cannot be instantiated directly.
        All concrete models must define a __tablename__ attribute.
    """

    __abstract__ = True

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    created_at: Mapped[datetime] = mapped_column(
        nullable=False,
        default=get_current_utc,
    )

    updated_at: Mapped[datetime] = mapped_column(
        nullable=False,
        default=get_current_utc,
        onupdate=get_current_utc,
    )

    def __repr__(self) -> str:
        """Return string representation in the form ``<ModelName(id=1)>``."""
        return f"<{self.__class__.__name__}(id={self.id})>"

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert model instance to dictionary representation.

        Converts column values to JSON-serializable types:
        - datetime, date and time objects to ISO format strings
        - Decimal to string
        - Other types remain unchanged

        Returns:
            Dictionary with column names as keys and serialized values.
        """
        result = {}
        for column in self.__table__.columns:
            value = getattr(self, column.key)
            if isinstance(value, (datetime, date, time)):
                result[column.key] = value.isoformat()
            elif isinstance(value, Decimal):
                result[column.key] = str(value)
            else:
                result[column.key] = value
        return result

    @classmethod
    def get_table_name(cls) -> str:
        """Get the database table name for this model."""
        return cls.__tablename__

    def update_fields(self, **kwargs) -> None:
        """
        Update multiple fields on the model instance in a single operation.

        Args:
            **kwargs: Field names as keys and new values as values.
                     Only existing model attributes can be updated.

        Raises:
            AttributeError: If any field name doesn't exist on the model.

        Note:
            This method only modifies the instance. You must flush or commit
            the session to persist changes to the database.
        """
        for field, value in kwargs.items():
            if hasattr(self, field):
                setattr(self, field, value)
            else:
                raise AttributeError(
                    f"'{self.__class__.__name__}' has no attribute '{field}'"
                )
