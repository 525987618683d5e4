"""TTL conversion.

A TTL is ``None``, a number of seconds, a ``timedelta`` or an absolute
``datetime``. Anything that does not resolve to a positive number of whole
seconds means "never expires".
"""

import math
from datetime import datetime, timedelta
from typing import Optional, Union

from model_expires.core.clock import as_utc
from model_expires.core.logging import get_logger

logger = get_logger(__name__)

TTL = Union[None, int, float, timedelta, datetime]


def seconds_from_ttl(ttl: TTL, now: datetime) -> int:
    """Whole seconds (truncated toward zero) until ``ttl``, or 0."""
    if ttl is None:
        return 0

    if isinstance(ttl, datetime):
        seconds = int((as_utc(ttl) - as_utc(now)).total_seconds())
    elif isinstance(ttl, timedelta):
        seconds = int(ttl.total_seconds())
    elif isinstance(ttl, (int, float)) and not isinstance(ttl, bool):
        if not math.isfinite(ttl):
            logger.warning("Ignoring non-finite TTL", ttl=ttl)
            return 0
        seconds = int(ttl)
    else:
        logger.warning("Ignoring unsupported TTL", ttl_type=type(ttl).__name__)
        return 0

    return seconds if seconds > 0 else 0


def expires_at_from_ttl(ttl: TTL, now: datetime) -> Optional[datetime]:
    """Expiration timestamp for ``ttl`` measured from ``now``, or None."""
    seconds = seconds_from_ttl(ttl, now)
    if not seconds:
        return None
    try:
        return as_utc(now) + timedelta(seconds=seconds)
    except OverflowError:
        logger.warning("Ignoring TTL beyond the datetime range", seconds=seconds)
        return None
