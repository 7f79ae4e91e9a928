"""
Base configurations and mixins for database models.

Every model derives from ``Base`` and picks up the integer surrogate key and
the create/update timestamps from the mixins below.
"""

from datetime import datetime, timezone

from sqlalchemy import BigInteger, Column, DateTime, Integer
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql.functions import now as db_now
from sqlalchemy.types import TypeDecorator

# Create the base class for all models
Base = declarative_base()


def ensure_utc(value: datetime | None) -> datetime | None:
    """Return ``value`` as an aware UTC datetime; naive values are taken as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class UTCDateTime(TypeDecorator):
    """
    Timestamp stored in UTC and always read back timezone-aware.

    SQLite keeps no offset, so values are converted to UTC on the way in and
    tagged as UTC on the way out.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        return ensure_utc(value)

    def process_result_value(self, value, dialect):
        return ensure_utc(value)


class TimestampMixin:
    """
    Adds ``created_at`` and ``updated_at`` columns managed by the database.
    """

    created_at = Column(
        DateTime(timezone=True),
        server_default=db_now(),
        nullable=False,
        comment="Timestamp when the record was created",
    )
    updated_at = Column(
        DateTime(timezone=True),
        server_default=db_now(),
        onupdate=db_now(),
        nullable=False,
        comment="Timestamp when the record was last updated",
    )


class IntegerIDMixin:
    """
    Integer surrogate primary key assigned by the database.

    SQLite only autoincrements plain INTEGER keys, hence the variant.
    """

    id = Column(
        BigInteger().with_variant(Integer, "sqlite"),
        primary_key=True,
        autoincrement=True,
        index=True,
        comment="Storage-assigned surrogate key",
    )


# Largest id any backend can hold (signed 64-bit).
MAX_ID = 2**63 - 1

__all__ = [
    "Base",
    "TimestampMixin",
    "IntegerIDMixin",
    "UTCDateTime",
    "ensure_utc",
    "MAX_ID",
]
