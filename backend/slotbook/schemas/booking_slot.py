from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from slotbook.core.timeutils import from_storage

RankName = Literal["verified", "signature", "top5"]


class BookingSlotBase(BaseModel):
    """Base schema for booking slot."""
    scheduled_at: datetime = Field(..., description="Slot start, timezone-aware")
    duration_minutes: int = Field(..., description="Slot length in minutes")
    invite_only: bool = Field(default=False, description="Restrict the slot to invitees")
    allowed_uids: List[str] = Field(default_factory=list, description="Callers admitted regardless of rank")
    min_rank: Optional[RankName] = Field(default=None, description="Minimum rank admitted to an invite-only slot")
    title: Optional[str] = Field(default=None, max_length=255)
    description: Optional[str] = Field(default=None, max_length=2000)
    price: Optional[float] = Field(default=None, description="Price in USD")
    location: Optional[str] = Field(default=None, max_length=255)
    max_participants: Optional[int] = None


class BookingSlotCreate(BookingSlotBase):
    """Schema for creating booking slot."""
    pass


class BookingSlotUpdate(BaseModel):
    """Schema for updating booking slot. Unset fields are left untouched."""
    scheduled_at: Optional[datetime] = None
    duration_minutes: Optional[int] = None
    invite_only: Optional[bool] = None
    allowed_uids: Optional[List[str]] = None
    min_rank: Optional[RankName] = None
    title: Optional[str] = Field(default=None, max_length=255)
    description: Optional[str] = Field(default=None, max_length=2000)
    price: Optional[float] = None
    location: Optional[str] = Field(default=None, max_length=255)
    max_participants: Optional[int] = None


class BookingSlotRead(BookingSlotBase):
    """Schema for reading booking slot."""
    id: UUID
    provider_uid: str
    status: str
    booked_by: Optional[str] = None
    booked_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_validator("scheduled_at", "booked_at", "created_at", "updated_at", mode="after")
    @classmethod
    def attach_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return from_storage(value)


class SlotAccessRead(BaseModel):
    """Access decision for the calling user."""
    slot_id: UUID
    has_access: bool
    resolved_rank: Optional[RankName] = None


class ConflictCheckRead(BaseModel):
    provider_uid: str
    at: datetime
    has_conflict: bool
