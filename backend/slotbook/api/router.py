from fastapi import APIRouter

from slotbook.api.v1 import booking_slots, health, providers


api_router = APIRouter()
api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(booking_slots.router, prefix="/booking-slots", tags=["booking-slots"])
api_router.include_router(providers.router, prefix="/providers", tags=["providers"])
