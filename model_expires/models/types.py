"""Custom column types."""

from datetime import datetime

from sqlalchemy import DateTime
from sqlalchemy.types import TypeDecorator

from model_expires.core.clock import as_utc


class UTCDateTime(TypeDecorator):
    """DateTime column that always hands back aware UTC datetimes.

    SQLite has no timezone support, so values are stored there as naive UTC
    and get their tzinfo back on load.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if not isinstance(value, datetime):
            raise TypeError(f"Expected a datetime, got {type(value).__name__}; use set_ttl() for TTLs")
        value = as_utc(value)
        if dialect.name == "sqlite":
            return value.replace(tzinfo=None)
        return value

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return as_utc(value)
