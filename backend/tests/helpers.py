"""Shared fakes and builders for the slot tests."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

from slotbook.core.errors import LookupFailed
from slotbook.models import BookingSlot, SlotStatus
from slotbook.schemas.identity import CallerIdentity
from slotbook.services import booking
from slotbook.services.slot_store import SqlSlotStore

PROVIDER = "provider-1"


def at(hour: int, minute: int = 0, day: int = 1) -> datetime:
    """Aware UTC instant on July ``day`` 2025."""
    return datetime(2025, 7, day, hour, minute, tzinfo=timezone.utc)


def caller(uid: Optional[str] = "caller-1", **claims: Any) -> CallerIdentity:
    return CallerIdentity(uid=uid, **claims)


def make_slot(**overrides: Any) -> BookingSlot:
    """Unsaved slot for the pure access checks."""
    fields: dict[str, Any] = {
        "provider_uid": PROVIDER,
        "scheduled_at": datetime(2025, 7, 1, 10, 0, tzinfo=timezone.utc),
        "duration_minutes": 60,
        "invite_only": False,
        "allowed_uids": [],
        "min_rank": None,
        "status": SlotStatus.AVAILABLE.value,
    }
    fields.update(overrides)
    return BookingSlot(**fields)


def seed_slot(
    store: SqlSlotStore,
    when: datetime,
    provider_uid: str = PROVIDER,
    status: SlotStatus = SlotStatus.AVAILABLE,
    booker_uid: str = "booker-1",
    **fields: Any,
) -> BookingSlot:
    """Persist a slot through the booking service and move it to ``status``."""
    data = {"scheduled_at": when, "duration_minutes": 60}
    data.update(fields)
    slot = booking.create_slot(store, provider_uid, data)
    if status is SlotStatus.BOOKED:
        slot = store.claim(slot.id, booker_uid)
    elif status is SlotStatus.CANCELLED:
        slot.status = SlotStatus.CANCELLED.value
        slot = store.save(slot)
    return slot


class FailingStore:
    """Slot store whose backend is unreachable."""

    def __init__(self) -> None:
        self.calls: list[str] = []

    def _fail(self, operation: str):
        self.calls.append(operation)
        raise LookupFailed(f"Slot store {operation} failed")

    def ping(self):
        return self._fail("ping")

    def query_slots(self, provider_uid, status, start=None, end=None):
        return self._fail("query")

    def list_provider_slots(self, provider_uid):
        return self._fail("query")

    def get(self, slot_id):
        return self._fail("lookup")

    def find_committed_at(self, provider_uid, instant):
        return self._fail("conflict lookup")

    def add(self, slot):
        return self._fail("insert")

    def save(self, slot):
        return self._fail("update")

    def claim(self, slot_id, booker_uid):
        return self._fail("claim")
