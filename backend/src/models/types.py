"""
Custom SQLAlchemy types for cross-database compatibility.

Provides types that work across PostgreSQL and SQLite for testing.
"""

import enum
from typing import Type

from sqlalchemy import TypeDecorator, JSON, Enum
from sqlalchemy.dialects.postgresql import JSONB


class JSONBType(TypeDecorator):
    """
    Platform-independent JSONB type.

    Uses PostgreSQL's native JSONB type when available,
    otherwise falls back to JSON for SQLite.

    Used for list-valued fields such as graphics formats and
    sponsorship stage history.
    """

    impl = JSON
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == 'postgresql':
            return dialect.type_descriptor(JSONB())
        return dialect.type_descriptor(JSON())


def enum_type(enum_cls: Type[enum.Enum], length: int = 30) -> Enum:
    """
    Build a VARCHAR-backed Enum column type storing member values.

    Workflow enums are stored as plain strings (no native PostgreSQL enum)
    so new statuses only need a code change, not a type migration.

    Args:
        enum_cls: Python enum class
        length: Column length for the stored value

    Returns:
        SQLAlchemy Enum type
    """
    return Enum(
        enum_cls,
        values_callable=lambda members: [m.value for m in members],
        native_enum=False,
        create_constraint=False,
        length=length,
    )
