from __future__ import annotations

from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

# Claim names as issued by the external auth layer
RANK_CLAIMS = ("rank", "proTier", "isVerified", "verified", "signature")


class CallerIdentity(BaseModel):
    """Already-authenticated caller with its legacy rank claims."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    uid: Optional[str] = None
    rank: Optional[str] = None
    pro_tier: Optional[str] = Field(default=None, alias="proTier")
    is_verified: Optional[bool] = Field(default=None, alias="isVerified")
    verified: Optional[bool] = None
    signature: Optional[bool] = None

    @classmethod
    def from_claims(cls, claims: Mapping[str, Any]) -> "CallerIdentity":
        """Build an identity from token claims; ``sub`` carries the uid."""
        data = {name: claims[name] for name in RANK_CLAIMS if name in claims}
        data["uid"] = claims.get("sub") or claims.get("uid")
        return cls.model_validate(data)
