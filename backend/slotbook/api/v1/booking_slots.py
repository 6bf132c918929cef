from datetime import datetime
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, status

from slotbook.api.deps import StoreDep, get_current_caller, get_optional_caller
from slotbook.core.config import settings
from slotbook.core.errors import SlotNotFound
from slotbook.core.limiter import limiter
from slotbook.schemas.booking_slot import (
    BookingSlotCreate,
    BookingSlotRead,
    BookingSlotUpdate,
    ConflictCheckRead,
    SlotAccessRead,
)
from slotbook.schemas.identity import CallerIdentity
from slotbook.services import booking
from slotbook.services.conflicts import has_conflict
from slotbook.services.permissions import has_access
from slotbook.services.ranks import resolve_rank

router = APIRouter()


@router.post(
    "/",
    response_model=BookingSlotRead,
    summary="Create booking slot",
    status_code=status.HTTP_201_CREATED,
)
def create_booking_slot(
    payload: BookingSlotCreate,
    store: StoreDep,
    current_caller: CallerIdentity = Depends(get_current_caller),
) -> BookingSlotRead:
    """Create a new available slot owned by the caller."""
    slot = booking.create_slot(store, current_caller.uid, payload.model_dump())
    return BookingSlotRead.model_validate(slot)


@router.get(
    "/conflicts",
    response_model=ConflictCheckRead,
    summary="Check provider booking conflict",
)
def check_conflict(
    store: StoreDep,
    provider_uid: str = Query(..., min_length=1, description="Provider to check"),
    at: datetime = Query(..., description="Candidate start instant, timezone-aware"),
) -> ConflictCheckRead:
    """Report whether the provider already has a booking starting at ``at``."""
    return ConflictCheckRead(
        provider_uid=provider_uid,
        at=at,
        has_conflict=has_conflict(store, provider_uid, at),
    )


@router.get(
    "/{slot_id}",
    response_model=BookingSlotRead,
    summary="Get booking slot by ID",
)
def get_booking_slot(
    slot_id: UUID,
    store: StoreDep,
    caller: Optional[CallerIdentity] = Depends(get_optional_caller),
) -> BookingSlotRead:
    """Get a slot the caller owns or may book."""
    return BookingSlotRead.model_validate(booking.get_slot(store, slot_id, caller))


@router.get(
    "/{slot_id}/access",
    response_model=SlotAccessRead,
    summary="Check access to booking slot",
)
def get_booking_slot_access(
    slot_id: UUID,
    store: StoreDep,
    caller: Optional[CallerIdentity] = Depends(get_optional_caller),
) -> SlotAccessRead:
    """Return the access decision for the (possibly anonymous) caller."""
    slot = store.get(slot_id)
    if slot is None:
        raise SlotNotFound("Booking slot not found")

    return SlotAccessRead(
        slot_id=slot.id,
        has_access=has_access(slot, caller),
        resolved_rank=resolve_rank(caller).label,
    )


@router.put(
    "/{slot_id}",
    response_model=BookingSlotRead,
    summary="Update booking slot",
)
def update_booking_slot(
    slot_id: UUID,
    payload: BookingSlotUpdate,
    store: StoreDep,
    current_caller: CallerIdentity = Depends(get_current_caller),
) -> BookingSlotRead:
    """Update an available slot. Only the provider may edit it."""
    slot = booking.update_slot(
        store, slot_id, current_caller, payload.model_dump(exclude_unset=True)
    )
    return BookingSlotRead.model_validate(slot)


@router.post(
    "/{slot_id}/cancel",
    response_model=BookingSlotRead,
    summary="Cancel booking slot",
)
def cancel_booking_slot(
    slot_id: UUID,
    store: StoreDep,
    current_caller: CallerIdentity = Depends(get_current_caller),
) -> BookingSlotRead:
    """Cancel a slot. Only the provider may cancel it."""
    return BookingSlotRead.model_validate(booking.cancel_slot(store, slot_id, current_caller))


@router.post(
    "/{slot_id}/book",
    response_model=BookingSlotRead,
    summary="Book booking slot",
)
@limiter.limit(settings.BOOKING_RATE_LIMIT)
def book_booking_slot(
    request: Request,
    slot_id: UUID,
    store: StoreDep,
    current_caller: CallerIdentity = Depends(get_current_caller),
) -> BookingSlotRead:
    """Claim an available slot for the caller."""
    return BookingSlotRead.model_validate(booking.claim_slot(store, slot_id, current_caller))
