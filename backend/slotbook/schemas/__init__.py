from .booking_slot import (
    BookingSlotCreate,
    BookingSlotRead,
    BookingSlotUpdate,
    ConflictCheckRead,
    SlotAccessRead,
)
from .identity import CallerIdentity

__all__ = [
    "BookingSlotCreate",
    "BookingSlotRead",
    "BookingSlotUpdate",
    "CallerIdentity",
    "ConflictCheckRead",
    "SlotAccessRead",
]
