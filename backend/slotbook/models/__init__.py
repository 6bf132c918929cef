from .booking_slot import BookingSlot, SlotStatus

__all__ = [
    "BookingSlot",
    "SlotStatus",
]
