"""
Base model class for all SQLAlchemy models in the vetcare package.

This module provides the foundational base model class that all other models
inherit from: an integer primary key, a UTC creation timestamp and common
utility methods.

Example:
    >>> from vetcare.models.base import BaseModel
    >>> from sqlalchemy.orm import Mapped, mapped_column
    >>> from sqlalchemy import String

    >>> class Kennel(BaseModel):
    ...     __tablename__ = "kennels"
    ...     name: Mapped[str] = mapped_column(String(100))
"""

from datetime import datetime
from typing import Any, Dict, Set

from sqlalchemy import Integer, inspect
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from ..database.types import UTCDateTime
from ..utils.datetime_utils import get_current_utc


class Base(DeclarativeBase):
    """
    Base declarative class for all SQLAlchemy models.

    Attributes:
        type_annotation_map: Maps Python types to SQLAlchemy column types
    """

    type_annotation_map = {
        datetime: UTCDateTime(),
    }


class BaseModel(Base):
    """
    Abstract base model class providing common functionality for all entities.

    Attributes:
        id (int): Auto-incrementing primary key
        created_at (datetime): Timestamp when record was created (UTC)

    Note:
        This is an abstract base class and cannot be instantiated directly.
        All concrete models must define a __tablename__ attribute.
    """

    __abstract__ = True

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        nullable=False,
        default=get_current_utc,
    )

    def __repr__(self) -> str:
        """
        Return string representation of the model instance.

        Returns:
            String in format: <ModelName(id=42)>
        """
        return f"<{self.__class__.__name__}(id={self.id})>"

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert model columns to a dictionary.

        Datetimes are rendered as ISO strings; relations are not included.
        """
        result = {}
        for column in self.__table__.columns:
            value = getattr(self, column.key)
            if isinstance(value, datetime):
                result[column.key] = value.isoformat()
            else:
                result[column.key] = value
        return result

    def is_loaded(self, relation: str) -> bool:
        """
        Check whether a relationship has been loaded on this instance.

        Reading an unloaded relation on an async session would trigger
        implicit IO, so projections check this first.
        """
        return relation not in inspect(self).unloaded

    @classmethod
    def column_names(cls) -> Set[str]:
        """Get the names of all mapped columns of this model."""
        return {column.key for column in cls.__table__.columns}

    @classmethod
    def get_table_name(cls) -> str:
        """Get the database table name for this model."""
        return cls.__tablename__

    def update_fields(self, **kwargs: Any) -> None:
        """
        Update multiple fields on the model instance in a single operation.

        Args:
            **kwargs: Field names as keys and new values as values.
                     Only existing model attributes can be updated.

        Raises:
            AttributeError: If any field name doesn't exist on the model.

        Note:
            This method only modifies the instance. You must commit the
            transaction to persist changes to the database.
        """
        for field, value in kwargs.items():
            if hasattr(self, field):
                setattr(self, field, value)
            else:
                raise AttributeError(
                    f"'{self.__class__.__name__}' has no attribute '{field}'"
                )
