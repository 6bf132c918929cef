from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from slotbook.api.deps import StoreDep, get_current_caller, get_optional_caller
from slotbook.schemas.booking_slot import BookingSlotRead
from slotbook.schemas.identity import CallerIdentity
from slotbook.services.listing import list_all_provider_slots, list_available_slots

router = APIRouter()


@router.get(
    "/{provider_uid}/slots",
    response_model=List[BookingSlotRead],
    summary="List bookable slots of a provider",
)
def list_provider_available_slots(
    provider_uid: str,
    store: StoreDep,
    caller: Optional[CallerIdentity] = Depends(get_optional_caller),
    from_date: Optional[datetime] = Query(default=None, alias="from", description="Slots starting at or after this instant"),
    to_date: Optional[datetime] = Query(default=None, alias="to", description="Slots starting at or before this instant"),
) -> List[BookingSlotRead]:
    """List available slots the caller may book, ordered by start."""
    slots = list_available_slots(store, provider_uid, caller, from_date, to_date)
    return [BookingSlotRead.model_validate(slot) for slot in slots]


@router.get(
    "/{provider_uid}/slots/all",
    response_model=List[BookingSlotRead],
    summary="List all slots of a provider",
)
def list_provider_all_slots(
    provider_uid: str,
    store: StoreDep,
    current_caller: CallerIdentity = Depends(get_current_caller),
) -> List[BookingSlotRead]:
    """Management view: every slot regardless of status or invite gating."""
    if current_caller.uid != provider_uid:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You can only manage your own booking slots",
        )
    return [BookingSlotRead.model_validate(slot) for slot in list_all_provider_slots(store, provider_uid)]
