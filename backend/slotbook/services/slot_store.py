"""Persistence contract for booking slots and its SQL implementation.

Every datetime crossing this boundary is aware UTC. Backend failures are
raised as :class:`LookupFailed`, never folded into empty results.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Iterator, List, Optional, Protocol
from uuid import UUID

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, select

from slotbook.core.errors import ConflictDetected, LookupFailed
from slotbook.core.timeutils import utcnow
from slotbook.models import BookingSlot, SlotStatus

logger = logging.getLogger(__name__)


class SlotStore(Protocol):
    def ping(self) -> None:
        """Raise :class:`LookupFailed` when the backend cannot answer."""
        ...

    def query_slots(
        self,
        provider_uid: str,
        status: SlotStatus,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> List[BookingSlot]:
        """Slots of a provider in one status, inclusive range, ascending."""
        ...

    def list_provider_slots(self, provider_uid: str) -> List[BookingSlot]:
        ...

    def get(self, slot_id: UUID) -> Optional[BookingSlot]:
        ...

    def find_committed_at(self, provider_uid: str, instant: datetime) -> Optional[BookingSlot]:
        """The booked slot of a provider starting exactly at ``instant``."""
        ...

    def add(self, slot: BookingSlot) -> BookingSlot:
        ...

    def save(self, slot: BookingSlot) -> BookingSlot:
        ...

    def claim(self, slot_id: UUID, booker_uid: str) -> Optional[BookingSlot]:
        """Atomically move an available slot to booked.

        Returns ``None`` when the slot was no longer available and raises
        :class:`ConflictDetected` when another slot of the provider is
        already booked at the same instant.
        """
        ...


class SqlSlotStore:
    """Slot store backed by a SQLModel session."""

    def __init__(self, session: Session) -> None:
        self.session = session

    @contextmanager
    def _guard(self, operation: str) -> Iterator[None]:
        try:
            yield
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.error(f"Slot store {operation} failed: {exc}")
            raise LookupFailed(f"Slot store {operation} failed") from exc

    def query_slots(
        self,
        provider_uid: str,
        status: SlotStatus,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> List[BookingSlot]:
        stmt = select(BookingSlot).where(
            BookingSlot.provider_uid == provider_uid,
            BookingSlot.status == SlotStatus(status).value,
        )
        if start is not None:
            stmt = stmt.where(BookingSlot.scheduled_at >= start)
        if end is not None:
            stmt = stmt.where(BookingSlot.scheduled_at <= end)
        stmt = stmt.order_by(BookingSlot.scheduled_at)

        with self._guard("query"):
            return list(self.session.exec(stmt).all())

    def list_provider_slots(self, provider_uid: str) -> List[BookingSlot]:
        stmt = (
            select(BookingSlot)
            .where(BookingSlot.provider_uid == provider_uid)
            .order_by(BookingSlot.scheduled_at)
        )
        with self._guard("query"):
            return list(self.session.exec(stmt).all())

    def ping(self) -> None:
        """Run a trivial query so readiness reflects the slot table itself."""
        with self._guard("ping"):
            self.session.exec(select(BookingSlot.id).limit(1)).first()

    def get(self, slot_id: UUID) -> Optional[BookingSlot]:
        with self._guard("lookup"):
            return self.session.get(BookingSlot, slot_id)

    def find_committed_at(self, provider_uid: str, instant: datetime) -> Optional[BookingSlot]:
        stmt = select(BookingSlot).where(
            BookingSlot.provider_uid == provider_uid,
            BookingSlot.status == SlotStatus.BOOKED.value,
            BookingSlot.scheduled_at == instant,
        )
        with self._guard("conflict lookup"):
            return self.session.exec(stmt).first()

    def add(self, slot: BookingSlot) -> BookingSlot:
        now = utcnow()
        slot.created_at = now
        slot.updated_at = now
        with self._guard("insert"):
            self.session.add(slot)
            self.session.commit()
            self.session.refresh(slot)
        return slot

    def save(self, slot: BookingSlot) -> BookingSlot:
        slot.touch()
        try:
            self.session.add(slot)
            self.session.commit()
        except IntegrityError as exc:
            self.session.rollback()
            raise ConflictDetected("Provider already has a booking at this time") from exc
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.error(f"Slot store update failed: {exc}")
            raise LookupFailed("Slot store update failed") from exc
        with self._guard("refresh"):
            self.session.refresh(slot)
        return slot

    def claim(self, slot_id: UUID, booker_uid: str) -> Optional[BookingSlot]:
        now = utcnow()
        stmt = (
            update(BookingSlot)
            .where(
                BookingSlot.id == slot_id,
                BookingSlot.status == SlotStatus.AVAILABLE.value,
            )
            .values(
                status=SlotStatus.BOOKED.value,
                booked_by=booker_uid,
                booked_at=now,
                updated_at=now,
            )
            .execution_options(synchronize_session=False)
        )
        try:
            result = self.session.exec(stmt)
            if result.rowcount != 1:
                self.session.rollback()
                return None
            self.session.commit()
        except IntegrityError as exc:
            # Another slot of this provider was booked at the same instant
            self.session.rollback()
            raise ConflictDetected("Provider already has a booking at this time") from exc
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.error(f"Slot store claim failed: {exc}")
            raise LookupFailed("Slot store claim failed") from exc

        return self.get(slot_id)
