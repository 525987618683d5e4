"""Expiration support for SQLModel tables.

A record expires when its "expires at" column holds a timestamp in the past.
``None`` means the record never expires.

Usage::

    class Invite(ExpirableModel, table=True):
        id: Optional[int] = Field(default=None, primary_key=True)

    invite = Invite()
    invite.set_ttl(timedelta(days=7))
    stmt = Invite.filter_excluding_expired()

Tables that store the timestamp under another name mix in
``ExpirableMixin`` directly, declare the column themselves and point
``EXPIRES_AT`` at it.
"""

from datetime import datetime
from typing import Any, ClassVar, Optional

from sqlalchemy import Column, Select, or_
from sqlmodel import SQLModel, Field, select

from model_expires.core.clock import as_utc, utcnow
from model_expires.core.ttl import TTL, expires_at_from_ttl
from model_expires.models.types import UTCDateTime


class ExpirableMixin:
    """TTL assignment, expiration checks and query filters."""

    EXPIRES_AT: ClassVar[str] = "expires_at"

    @classmethod
    def current_time(cls) -> datetime:
        return utcnow()

    @classmethod
    def get_expires_at_column(cls) -> str:
        """Get the name of the "expires at" column."""
        return cls.EXPIRES_AT

    @classmethod
    def get_qualified_expires_at_column(cls) -> Column:
        """Get the table-bound "expires at" column.

        Renders as ``table.column``, so it stays unambiguous in joins.
        """
        return cls.__table__.c[cls.get_expires_at_column()]

    @classmethod
    def create_with_ttl(cls, ttl: TTL = None, *, now: Optional[datetime] = None, **values: Any):
        """Build a record from ``values`` and apply ``ttl`` to it.

        Pass the TTL here rather than as the column value: the column only
        accepts datetimes.
        """
        record = cls(**values)
        record.set_ttl(ttl, now=now)
        return record

    def get_expires_at(self) -> Optional[datetime]:
        value = getattr(self, self.get_expires_at_column())
        return as_utc(value) if value is not None else None

    def set_ttl(self, ttl: TTL, now: Optional[datetime] = None) -> Optional[datetime]:
        """Set the "expires at" column from a TTL and return the new value."""
        expires_at = expires_at_from_ttl(ttl, now or self.current_time())
        setattr(self, self.get_expires_at_column(), expires_at)
        return expires_at

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        """Determine if the record has expired."""
        expires_at = self.get_expires_at()
        return expires_at is not None and expires_at < as_utc(now or self.current_time())

    def will_expire(self, now: Optional[datetime] = None) -> bool:
        """Determine if the record is set to expire in the future."""
        expires_at = self.get_expires_at()
        return expires_at is not None and expires_at > as_utc(now or self.current_time())

    # ------------------------------------------------------------------
    # Query filters. Each takes one "now" snapshot and returns a new
    # statement; ``stmt`` defaults to ``select(cls)``.
    # ------------------------------------------------------------------

    @classmethod
    def _filter_args(cls, stmt: Optional[Select], now: Optional[datetime]):
        if stmt is None:
            stmt = select(cls)
        return stmt, cls.get_qualified_expires_at_column(), as_utc(now or cls.current_time())

    @classmethod
    def filter_expired(cls, stmt: Optional[Select] = None, *, now: Optional[datetime] = None) -> Select:
        """Only records whose expiration time has been reached."""
        stmt, column, now = cls._filter_args(stmt, now)
        return stmt.where(column.isnot(None), column <= now)

    @classmethod
    def filter_expiring(cls, stmt: Optional[Select] = None, *, now: Optional[datetime] = None) -> Select:
        """Only records that will expire in the future."""
        stmt, column, now = cls._filter_args(stmt, now)
        return stmt.where(column.isnot(None), column > now)

    @classmethod
    def filter_not_expiring(cls, stmt: Optional[Select] = None) -> Select:
        """Only records that never expire."""
        if stmt is None:
            stmt = select(cls)
        return stmt.where(cls.get_qualified_expires_at_column().is_(None))

    @classmethod
    def filter_excluding_expired(cls, stmt: Optional[Select] = None, *, now: Optional[datetime] = None) -> Select:
        """Records that never expire or have not expired yet."""
        stmt, column, now = cls._filter_args(stmt, now)
        # or_() is wrapped in parentheses when ANDed with earlier conditions
        return stmt.where(or_(column > now, column.is_(None)))


class ExpirableModel(ExpirableMixin, SQLModel):
    """Base for tables using the default ``expires_at`` column."""

    expires_at: Optional[datetime] = Field(default=None, sa_type=UTCDateTime, nullable=True, index=True)
