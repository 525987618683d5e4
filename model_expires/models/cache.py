"""SQLite-backed key-value cache with expiring entries."""

from datetime import datetime
from sqlmodel import Field

from model_expires.core.clock import utcnow
from model_expires.core.ttl import TTL
from model_expires.models.expirable import ExpirableModel
from model_expires.models.types import UTCDateTime


class CacheEntry(ExpirableModel, table=True):
    """Generic key-value cache with optional expiration."""

    __tablename__ = "cache_entries"

    key: str = Field(primary_key=True, max_length=512)
    value: str = Field(max_length=1000000)  # JSON serialized, up to 1MB
    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)

    @classmethod
    def create(cls, key: str, value: str, ttl: TTL = None) -> "CacheEntry":
        """Factory method; the TTL counts from ``created_at``."""
        now = cls.current_time()
        return cls.create_with_ttl(ttl, now=now, key=key, value=value, created_at=now)
