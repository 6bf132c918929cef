from __future__ import annotations

import logging
import math
from typing import Any, Mapping, Optional
from uuid import UUID

from slotbook.core.errors import (
    AccessDenied,
    ConflictDetected,
    InvalidInput,
    SlotNotFound,
    SlotUnavailable,
)
from slotbook.core.timeutils import from_storage, to_storage
from slotbook.models import BookingSlot, SlotStatus
from slotbook.schemas.identity import CallerIdentity
from slotbook.services.conflicts import has_conflict
from slotbook.services.permissions import has_access, is_slot_owner
from slotbook.services.ranks import RANK_NAMES
from slotbook.services.slot_store import SlotStore

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = (
    "scheduled_at",
    "duration_minutes",
    "invite_only",
    "allowed_uids",
    "min_rank",
    "title",
    "description",
    "price",
    "location",
    "max_participants",
)


def _normalize_fields(data: Mapping[str, Any]) -> dict[str, Any]:
    """Validate slot fields, returning them ready for storage."""
    fields: dict[str, Any] = {}
    for name in EDITABLE_FIELDS:
        if name in data:
            fields[name] = data[name]

    if "scheduled_at" in fields:
        fields["scheduled_at"] = to_storage(fields["scheduled_at"], "scheduled_at")

    if "duration_minutes" in fields:
        duration = fields["duration_minutes"]
        if isinstance(duration, bool) or not isinstance(duration, int) or duration <= 0:
            raise InvalidInput("duration_minutes must be a positive integer")

    if "invite_only" in fields:
        fields["invite_only"] = bool(fields["invite_only"])

    if "allowed_uids" in fields:
        uids = fields["allowed_uids"] or []
        if isinstance(uids, str) or any(not isinstance(uid, str) or not uid.strip() for uid in uids):
            raise InvalidInput("allowed_uids must be a list of non-empty identifiers")
        # dict.fromkeys keeps the first occurrence order
        fields["allowed_uids"] = list(dict.fromkeys(uid.strip() for uid in uids))

    if fields.get("min_rank") is not None and fields["min_rank"] not in RANK_NAMES:
        raise InvalidInput(f"min_rank must be one of: {', '.join(RANK_NAMES)}")

    price = fields.get("price")
    if price is not None and (not math.isfinite(price) or price < 0):
        raise InvalidInput("price must be a finite, non-negative amount")

    if fields.get("max_participants") is not None and fields["max_participants"] < 1:
        raise InvalidInput("max_participants must be at least 1")

    return fields


def create_slot(store: SlotStore, provider_uid: str, data: Mapping[str, Any]) -> BookingSlot:
    """Create an available slot owned by ``provider_uid``."""
    if not provider_uid:
        raise InvalidInput("provider_uid is required")
    for required in ("scheduled_at", "duration_minutes"):
        if data.get(required) is None:
            raise InvalidInput(f"{required} is required")

    fields = _normalize_fields(data)
    slot = BookingSlot(
        provider_uid=provider_uid,
        status=SlotStatus.AVAILABLE.value,
        **fields,
    )
    slot = store.add(slot)
    logger.info(
        f"Slot {slot.id} created by {provider_uid} at {slot.scheduled_at.isoformat()} "
        f"(invite_only={slot.invite_only})"
    )
    return slot


def get_slot(store: SlotStore, slot_id: UUID, caller: Optional[CallerIdentity]) -> BookingSlot:
    """Fetch a slot the caller owns, booked, or may still book.

    Booked and cancelled slots are visible only to their provider and their
    booker; everyone else gets :class:`SlotNotFound`.
    """
    slot = store.get(slot_id)
    if slot is None:
        raise SlotNotFound("Booking slot not found")
    if is_slot_owner(slot, caller):
        return slot
    if slot.booked_by and caller is not None and caller.uid == slot.booked_by:
        return slot
    if slot.status != SlotStatus.AVAILABLE.value:
        raise SlotNotFound("Booking slot not found")
    if not has_access(slot, caller):
        raise AccessDenied("You do not have access to this slot")
    return slot


def _owned_slot(store: SlotStore, slot_id: UUID, caller: Optional[CallerIdentity]) -> BookingSlot:
    slot = store.get(slot_id)
    if slot is None:
        raise SlotNotFound("Booking slot not found")
    if not is_slot_owner(slot, caller):
        raise AccessDenied("You can only manage your own booking slots")
    return slot


def update_slot(
    store: SlotStore,
    slot_id: UUID,
    caller: Optional[CallerIdentity],
    changes: Mapping[str, Any],
) -> BookingSlot:
    """Edit an available slot. Booked and cancelled slots are frozen."""
    slot = _owned_slot(store, slot_id, caller)
    if slot.status != SlotStatus.AVAILABLE.value:
        raise SlotUnavailable(f"Cannot update a {slot.status} slot")

    for name in ("scheduled_at", "duration_minutes", "invite_only"):
        if name in changes and changes[name] is None:
            raise InvalidInput(f"{name} cannot be cleared")

    fields = _normalize_fields(changes)
    for name, value in fields.items():
        setattr(slot, name, value)
    return store.save(slot)


def cancel_slot(store: SlotStore, slot_id: UUID, caller: Optional[CallerIdentity]) -> BookingSlot:
    """Cancel a slot. Cancelling a booked slot frees its start instant."""
    slot = _owned_slot(store, slot_id, caller)
    if slot.status == SlotStatus.CANCELLED.value:
        raise SlotUnavailable("Slot is already cancelled")

    slot.status = SlotStatus.CANCELLED.value
    slot = store.save(slot)
    logger.info(f"Slot {slot.id} cancelled by {slot.provider_uid}")
    return slot


def claim_slot(store: SlotStore, slot_id: UUID, caller: Optional[CallerIdentity]) -> BookingSlot:
    """Book ``slot_id`` for ``caller``.

    The conflict check rejects the common case up front; the store's
    conditional write and unique index settle concurrent claims.
    """
    if caller is None or not caller.uid:
        raise InvalidInput("An authenticated caller is required to book a slot")

    slot = store.get(slot_id)
    if slot is None:
        raise SlotNotFound("Booking slot not found")
    if slot.provider_uid == caller.uid:
        raise InvalidInput("You cannot book your own booking slot")
    if slot.status != SlotStatus.AVAILABLE.value:
        raise SlotUnavailable("Slot is not available for booking")
    if not has_access(slot, caller):
        raise AccessDenied("You do not have access to this slot")

    if has_conflict(store, slot.provider_uid, from_storage(slot.scheduled_at)):
        raise ConflictDetected("Provider already has a booking at this time")

    claimed = store.claim(slot.id, caller.uid)
    if claimed is None:
        raise SlotUnavailable("Slot is not available for booking")

    logger.info(f"Slot {claimed.id} booked by {caller.uid}")
    return claimed
