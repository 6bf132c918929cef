from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import JSON, Column, DateTime, Index, text
from sqlmodel import Field, SQLModel

from slotbook.core.timeutils import utcnow


class SlotStatus(str, Enum):
    AVAILABLE = "available"
    BOOKED = "booked"
    CANCELLED = "cancelled"


class BookingSlot(SQLModel, table=True):
    """Time slot offered by a provider, optionally gated to invitees."""

    __tablename__ = "booking_slots"
    __table_args__ = (
        Index("ix_booking_slots_provider_status_time", "provider_uid", "status", "scheduled_at"),
        # One committed booking per provider and start instant
        Index(
            "uq_booking_slots_committed_start",
            "provider_uid",
            "scheduled_at",
            unique=True,
            sqlite_where=text("status = 'booked'"),
            postgresql_where=text("status = 'booked'"),
        ),
    )

    id: UUID = Field(default_factory=uuid4, primary_key=True, index=True)
    provider_uid: str = Field(max_length=128, nullable=False, index=True)

    # Aware UTC
    scheduled_at: datetime = Field(
        sa_column=Column(DateTime(timezone=True), nullable=False, index=True)
    )
    duration_minutes: int = Field(nullable=False)

    invite_only: bool = Field(default=False, nullable=False)
    allowed_uids: list[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    # verified, signature, top5
    min_rank: Optional[str] = Field(default=None, max_length=20)

    status: str = Field(default=SlotStatus.AVAILABLE.value, max_length=20, index=True)

    title: Optional[str] = Field(default=None, max_length=255)
    description: Optional[str] = Field(default=None, max_length=2000)
    price: Optional[float] = Field(default=None)
    location: Optional[str] = Field(default=None, max_length=255)
    max_participants: Optional[int] = Field(default=None)

    booked_by: Optional[str] = Field(default=None, max_length=128, index=True)
    booked_at: Optional[datetime] = Field(
        default=None, sa_column=Column(DateTime(timezone=True), nullable=True)
    )

    created_at: datetime = Field(
        default_factory=utcnow, sa_column=Column(DateTime(timezone=True), nullable=False)
    )
    updated_at: datetime = Field(
        default_factory=utcnow, sa_column=Column(DateTime(timezone=True), nullable=False)
    )

    def touch(self) -> None:
        """Update timestamp."""
        self.updated_at = utcnow()
