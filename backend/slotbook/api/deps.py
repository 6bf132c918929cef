from __future__ import annotations

from typing import Annotated, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from pydantic import ValidationError

from slotbook.core.config import settings
from slotbook.core.security import verify_token
from slotbook.db import SessionDep
from slotbook.schemas.identity import CallerIdentity
from slotbook.services.slot_store import SqlSlotStore

# Tokens are issued by the external auth layer; anonymous requests are allowed
oauth2_scheme = OAuth2PasswordBearer(
    tokenUrl=f"{settings.API_V1_STR}/auth/login", auto_error=False
)


def get_slot_store(session: SessionDep) -> SqlSlotStore:
    return SqlSlotStore(session)


StoreDep = Annotated[SqlSlotStore, Depends(get_slot_store)]


def get_optional_caller(
    token: Optional[str] = Depends(oauth2_scheme),
) -> Optional[CallerIdentity]:
    if not token:
        return None

    try:
        payload = verify_token(token, token_type="access")
        caller = CallerIdentity.from_claims(payload)
    except (ValueError, ValidationError):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        ) from None

    if not caller.uid:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication payload",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return caller


def get_current_caller(
    caller: Optional[CallerIdentity] = Depends(get_optional_caller),
) -> CallerIdentity:
    if caller is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return caller
