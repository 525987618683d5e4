"""Expiring records for SQLModel."""

from model_expires.core.ttl import TTL, expires_at_from_ttl, seconds_from_ttl
from model_expires.models.expirable import ExpirableMixin, ExpirableModel
from model_expires.models.types import UTCDateTime

__all__ = [
    "TTL",
    "ExpirableMixin",
    "ExpirableModel",
    "UTCDateTime",
    "expires_at_from_ttl",
    "seconds_from_ttl",
]
