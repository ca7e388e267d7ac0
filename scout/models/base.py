from datetime import datetime
from typing import Any

from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from scout.core.datetime_utils import utc_now


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    type_annotation_map: dict[type, Any] = {}


class TimestampMixin:
    """Mixin that adds created_at timestamp to models.

    The timestamp is assigned client-side so ordering by creation time keeps
    sub-second precision on SQLite.
    """

    created_at: Mapped[datetime] = mapped_column(default=utc_now, index=True)


def enum_values(enum_cls: type) -> list[str]:
    """Column values for a str enum (stored by value, not by member name)."""
    return [member.value for member in enum_cls]
