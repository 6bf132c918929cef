"""Typed failures raised by the slot services.

Each failure is distinguishable by type so that callers never confuse
"the store could not answer" with "there is nothing to return".
"""

from __future__ import annotations


class SlotError(Exception):
    """Base class for user-visible slot errors."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidInput(SlotError):
    """Malformed request rejected before touching the store."""


class LookupFailed(SlotError):
    """The slot store itself failed to answer."""


class ConflictDetected(SlotError):
    """The provider already has a committed booking at that instant."""


class AccessDenied(SlotError):
    """The caller is not entitled to the slot."""


class SlotNotFound(SlotError):
    pass


class SlotUnavailable(SlotError):
    """The slot is no longer in a state that allows the operation."""
