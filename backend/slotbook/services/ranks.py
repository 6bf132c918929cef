"""Canonical rank derived from the redundant profile rank fields.

Profiles carry the same concept several ways: an explicit ``rank``, a
``proTier`` string and the legacy ``isVerified``/``verified``/``signature``
flags. Everything downstream works with a single :class:`Rank`.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Any, Mapping, Optional

from slotbook.schemas.identity import CallerIdentity


class Rank(IntEnum):
    NONE = 0
    VERIFIED = 1
    SIGNATURE = 2
    TOP5 = 3

    @property
    def label(self) -> Optional[str]:
        """Wire name of the rank, ``None`` for :attr:`NONE`."""
        return None if self is Rank.NONE else self.name.lower()

    @classmethod
    def parse(cls, value: Any) -> "Rank":
        """Map a rank name to a :class:`Rank`; unknown names map to NONE."""
        if isinstance(value, Rank):
            return value
        if isinstance(value, str):
            return _RANKS_BY_NAME.get(value.strip().lower(), cls.NONE)
        return cls.NONE


_RANKS_BY_NAME = {
    "verified": Rank.VERIFIED,
    "signature": Rank.SIGNATURE,
    "top5": Rank.TOP5,
}

RANK_NAMES = tuple(_RANKS_BY_NAME)


def _field(identity: Any, attribute: str, claim: str) -> Any:
    if isinstance(identity, Mapping):
        return identity.get(claim, identity.get(attribute))
    return getattr(identity, attribute, None)


def resolve_rank(identity: CallerIdentity | Mapping[str, Any] | None) -> Rank:
    """Resolve the effective rank of a caller.

    Precedence, first match wins:

    1. an explicit ``rank`` is authoritative, even over higher legacy flags;
    2. ``signature`` flag or ``proTier == "signature"``;
    3. ``isVerified``/``verified`` flags or ``proTier == "verified"``;
    4. otherwise :attr:`Rank.NONE`.

    Never raises; missing fields count as unset.
    """
    if identity is None:
        return Rank.NONE

    explicit = _field(identity, "rank", "rank")
    if explicit:
        return Rank.parse(explicit)

    pro_tier = _field(identity, "pro_tier", "proTier")
    if _field(identity, "signature", "signature") is True or pro_tier == "signature":
        return Rank.SIGNATURE

    if (
        _field(identity, "is_verified", "isVerified") is True
        or _field(identity, "verified", "verified") is True
        or pro_tier == "verified"
    ):
        return Rank.VERIFIED

    return Rank.NONE
