from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from slotbook.api.deps import StoreDep
from slotbook.core.config import settings
from slotbook.core.errors import LookupFailed

router = APIRouter()


@router.get("/", summary="Health check", tags=["health"])
def read_health() -> dict[str, str]:
    return {"status": "ok", "service": settings.PROJECT_NAME}


@router.get("/ready", summary="Readiness check", tags=["health"])
def read_ready(store: StoreDep):
    """Ready once the booking slot table answers a query."""
    try:
        store.ping()
    except LookupFailed as exc:
        detail = str(exc.__cause__ or exc)
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "not_ready",
                "database": "disconnected",
                "error": detail if settings.ENVIRONMENT != "production" else exc.message,
            },
        )
    return {"status": "ready", "database": "connected"}
