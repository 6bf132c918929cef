"""Conflict detection for slot claims.

Two bookings of the same provider conflict when they start at the identical
instant. Durations are not compared, so a booking that starts inside another
one's window is not reported.
"""

from __future__ import annotations

import logging
from datetime import datetime

from slotbook.core.errors import InvalidInput
from slotbook.core.timeutils import to_storage
from slotbook.services.slot_store import SlotStore

logger = logging.getLogger(__name__)


def has_conflict(store: SlotStore, provider_uid: str, candidate_instant: datetime) -> bool:
    """Return True if the provider already has a booking at ``candidate_instant``.

    Store failures propagate as LookupFailed; an inconclusive check is never
    reported as "no conflict".
    """
    if not provider_uid:
        raise InvalidInput("provider_uid is required")
    instant = to_storage(candidate_instant, "candidate_instant")

    existing = store.find_committed_at(provider_uid, instant)
    if existing is not None:
        logger.info(
            f"Conflict for provider {provider_uid} at {instant.isoformat()}: slot {existing.id}"
        )
        return True
    return False
