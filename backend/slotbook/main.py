import logging

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from slotbook.api.router import api_router
from slotbook.core.config import settings
from slotbook.core.errors import (
    AccessDenied,
    ConflictDetected,
    InvalidInput,
    LookupFailed,
    SlotError,
    SlotNotFound,
    SlotUnavailable,
)
from slotbook.core.limiter import limiter
from slotbook.db import init_db

logger = logging.getLogger(__name__)

ERROR_STATUS = {
    InvalidInput: status.HTTP_400_BAD_REQUEST,
    AccessDenied: status.HTTP_403_FORBIDDEN,
    SlotNotFound: status.HTTP_404_NOT_FOUND,
    ConflictDetected: status.HTTP_409_CONFLICT,
    SlotUnavailable: status.HTTP_409_CONFLICT,
    LookupFailed: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def configure_logging() -> None:
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def create_application() -> FastAPI:
    configure_logging()
    app = FastAPI(title=settings.PROJECT_NAME, version="0.1.0")

    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.BACKEND_CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        logger.debug(f"{request.method} {request.url.path}")
        response = await call_next(request)
        logger.info(f"{response.status_code} for {request.method} {request.url.path}")
        return response

    @app.exception_handler(SlotError)
    async def slot_error_handler(request: Request, exc: SlotError):
        status_code = ERROR_STATUS.get(type(exc), status.HTTP_400_BAD_REQUEST)
        if isinstance(exc, LookupFailed):
            logger.error(f"Slot lookup failed for {request.method} {request.url.path}: {exc.message}")
        return JSONResponse(
            status_code=status_code,
            content={"detail": exc.message, "error": type(exc).__name__},
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={"detail": jsonable_encoder(exc.errors())},
        )

    app.include_router(api_router, prefix=settings.API_V1_STR)

    @app.on_event("startup")
    def _startup() -> None:
        init_db()

    return app


app = create_application()
