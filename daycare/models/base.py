# base.py
from enum import Enum as PyEnum
from typing import Type
from sqlalchemy import Enum

from daycare.core.database import Base, TimestampMixin


def enum_column(enum_cls: Type[PyEnum]) -> Enum:
    """Store enum values (not member names) as plain strings."""
    return Enum(
        enum_cls,
        values_callable=lambda members: [member.value for member in members],
        native_enum=False,
        validate_strings=True,
        length=32,
    )


__all__ = ["Base", "TimestampMixin", "enum_column"]
