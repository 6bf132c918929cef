from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from slotbook.core.errors import InvalidInput
from slotbook.core.timeutils import from_storage, to_storage
from slotbook.models import BookingSlot, SlotStatus
from slotbook.schemas.identity import CallerIdentity
from slotbook.services.permissions import has_access
from slotbook.services.slot_store import SlotStore


def list_available_slots(
    store: SlotStore,
    provider_uid: str,
    caller: Optional[CallerIdentity],
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
) -> List[BookingSlot]:
    """Available slots of a provider that ``caller`` is entitled to book.

    The optional ``[start, end]`` window is inclusive on both ends. Results
    are ordered by ``scheduled_at`` and reflect the store at call time.
    """
    if not provider_uid:
        raise InvalidInput("provider_uid is required")
    window_start = to_storage(start, "start") if start is not None else None
    window_end = to_storage(end, "end") if end is not None else None
    if window_start is not None and window_end is not None and window_start > window_end:
        raise InvalidInput("start must not be after end")

    slots = store.query_slots(provider_uid, SlotStatus.AVAILABLE, window_start, window_end)
    visible = [
        slot
        for slot in slots
        if slot.status == SlotStatus.AVAILABLE.value and has_access(slot, caller)
    ]
    return sorted(visible, key=lambda slot: from_storage(slot.scheduled_at))


def list_all_provider_slots(store: SlotStore, provider_uid: str) -> List[BookingSlot]:
    """Every slot of a provider regardless of status or invite gating.

    Management view for the provider; kept separate from
    :func:`list_available_slots` so the unfiltered path is never reached
    through a flag.
    """
    if not provider_uid:
        raise InvalidInput("provider_uid is required")
    return store.list_provider_slots(provider_uid)
