from __future__ import annotations

from typing import Any, Optional

from slotbook.models import BookingSlot
from slotbook.schemas.identity import CallerIdentity
from slotbook.services.ranks import Rank, resolve_rank


def has_access(slot: BookingSlot, caller: Optional[CallerIdentity]) -> bool:
    """Decide whether ``caller`` may see and book ``slot``.

    Public slots are open to everyone, anonymous callers included. An
    invite-only slot admits allow-listed uids and callers whose resolved rank
    reaches ``min_rank``; with neither configured it admits nobody.

    Invite-only slots always require a caller uid. A caller without one is
    denied even when its rank claims would meet ``min_rank``.
    """
    if not slot.invite_only:
        return True

    uid = _caller_uid(caller)
    if caller is None or not uid:
        return False

    if uid in (slot.allowed_uids or ()):
        return True

    if slot.min_rank:
        required_level = Rank.parse(slot.min_rank)
        # An unrecognised minimum admits nobody
        if required_level is Rank.NONE:
            return False
        return resolve_rank(caller) >= required_level

    return False


def is_slot_owner(slot: BookingSlot, caller: Optional[CallerIdentity]) -> bool:
    uid = _caller_uid(caller)
    return bool(uid) and slot.provider_uid == uid


def _caller_uid(caller: Any) -> Optional[str]:
    if caller is None:
        return None
    return getattr(caller, "uid", None)
