"""
SQLAlchemy declarative base and common model mixins.

This module provides the SQLAlchemy DeclarativeBase with async attribute
support, an integer primary key mixin, and dictionary conversion helpers that
let the in-memory storage backend build the same model objects the relational
backend returns.
"""

from typing import Any, Dict, Optional, Type, TypeVar

from sqlalchemy import Integer
from sqlalchemy.ext.asyncio import AsyncAttrs
from sqlalchemy.orm import DeclarativeBase, Mapped, declared_attr, mapped_column

from storefront.core.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T", bound="Base")


class Base(AsyncAttrs, DeclarativeBase):
    """
    Base class for all SQLAlchemy models with async support.

    Provides common functionality for all database models including
    async attribute loading and dictionary conversion.
    """

    __abstract__ = True

    def to_dict(self, exclude: Optional[set[str]] = None) -> Dict[str, Any]:
        """
        Convert model instance to a dictionary of column values.

        Values are returned as stored (Decimal, datetime, int), not
        JSON-encoded.

        Args:
            exclude: Set of column names to exclude from output

        Returns:
            Dictionary keyed by mapped attribute name
        """
        exclude = exclude or set()
        return {
            attr.key: getattr(self, attr.key)
            for attr in self.__mapper__.column_attrs
            if attr.key not in exclude
        }

    @classmethod
    def from_dict(cls: Type[T], data: Dict[str, Any]) -> T:
        """
        Create model instance from dictionary.

        Unknown keys are ignored and scalar column defaults are applied to
        missing keys, mirroring what an INSERT would produce.

        Args:
            data: Dictionary containing model attributes

        Returns:
            New, transient model instance

        Raises:
            ValueError: If the instance cannot be constructed
        """
        column_attrs = {attr.key: attr for attr in cls.__mapper__.column_attrs}
        values: Dict[str, Any] = {
            key: value for key, value in data.items() if key in column_attrs
        }

        for key, attr in column_attrs.items():
            if key in values:
                continue
            default = attr.columns[0].default
            if default is not None and default.is_scalar:
                values[key] = default.arg

        try:
            return cls(**values)
        except Exception as e:
            logger.error(
                "Failed to create model from dictionary",
                model=cls.__name__,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise ValueError(
                f"Failed to create {cls.__name__} from dictionary: {e}"
            ) from e

    def __repr__(self) -> str:
        pk_values = []
        for column in self.__table__.primary_key.columns:
            value = getattr(self, column.key, None)
            if value is not None:
                pk_values.append(f"{column.key}={value!r}")

        pk_str = ", ".join(pk_values) if pk_values else "no primary key"
        return f"<{self.__class__.__name__}({pk_str})>"


class IntegerIdMixin:
    """
    Mixin for an auto-incrementing integer primary key.

    The storefront UI addresses every record by a small integer id, so
    tables use a serial key rather than UUIDs.
    """

    @declared_attr
    def id(cls) -> Mapped[int]:
        return mapped_column(
            Integer,
            primary_key=True,
            autoincrement=True,
            comment="Unique identifier for the record",
        )


class BaseModel(Base, IntegerIdMixin):
    """
    Base model with an integer primary key.

    Example:
        class Category(BaseModel):
            __tablename__ = "categories"

            name: Mapped[str] = mapped_column(Text)
    """

    __abstract__ = True
