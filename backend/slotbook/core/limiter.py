"""Rate limiting configuration."""

from __future__ import annotations

import logging

from slowapi import Limiter
from slowapi.util import get_remote_address

from slotbook.core.config import settings

logger = logging.getLogger(__name__)

# memory:// by default, a redis:// URI shares counters between instances
limiter = Limiter(
    key_func=get_remote_address,
    storage_uri=settings.RATE_LIMIT_STORAGE_URI,
)
logger.info(f"Rate limiter configured with storage: {settings.RATE_LIMIT_STORAGE_URI}")


def get_limiter() -> Limiter:
    """Get limiter instance."""
    return limiter
