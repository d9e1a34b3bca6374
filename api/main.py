"""
api/main.py -- FastAPI application factory for the User Auth API.

Run with:  uvicorn asgi:app --reload
           python main.py serve

create_app(settings, database) builds a fresh application. Nothing here is a
module-level singleton: the storage handle is either passed in (tests pass a
per-test database) or created by the lifespan from settings.database_url, and
every store and service is constructed around it and parked on app.state.

Middleware stack (outermost to innermost):
  1. TrustedHostMiddleware -- rejects requests with unexpected Host headers
  2. CORSMiddleware        -- adds CORS headers for allowed browser origins
  3. log_requests          -- one access-log line per request

Lifespan handles startup (database, optional seed, services, purge task) and
shutdown (cancel purge task, close the database if this app opened it)
symmetrically.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager, suppress
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from api.dependencies import get_app_settings, get_database
from api.models import ErrorDetail, ErrorResponse, HealthResponse, MessageResponse
from api.routes.auth import router as auth_router
from api.routes.users import router as users_router
from auth.service import AuthService
from auth.store import SessionStore
from core.config import Settings, get_settings
from core.errors import AppError
from db.database import Database, create_database
from db.seed import seed_database
from users.service import UserService
from users.store import UserStore

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("userauth.api")

# ---------------------------------------------------------------------------
# Background purge task
# ---------------------------------------------------------------------------


async def _purge_loop(app: FastAPI, interval_seconds: int) -> None:
    """Delete expired sessions every interval_seconds.

    Expiry is already enforced on every validation; this only keeps rows that
    nobody asks about from piling up. CancelledError from task.cancel() during
    shutdown propagates out of asyncio.sleep and unwinds the coroutine.
    """
    while True:
        await asyncio.sleep(interval_seconds)
        try:
            await asyncio.to_thread(app.state.auth_service.purge_expired)
        except Exception:
            logger.exception("Session purge failed")


# ---------------------------------------------------------------------------
# Exception handlers
#
# All handlers return the same ErrorResponse envelope so API clients can parse
# errors uniformly without inspecting status codes to choose a schema.
# ---------------------------------------------------------------------------


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Map domain errors (401/404/409/422) onto the error envelope."""
    return JSONResponse(
        status_code=int(exc.status),
        content=ErrorResponse(error=ErrorDetail(code=exc.code, message=exc.message, detail=exc.detail)).model_dump(),
    )


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Return 422 with structured error when request body or params fail validation."""
    return JSONResponse(
        status_code=422,
        content=ErrorResponse(
            error=ErrorDetail(
                code="validation_error",
                message="Request validation failed.",
                detail=str(exc.errors()),
            )
        ).model_dump(),
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Structured error for framework-raised HTTP exceptions (unknown route, bad method)."""
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(
            error=ErrorDetail(
                code=f"http_{exc.status_code}",
                message=str(exc.detail),
            )
        ).model_dump(),
        headers=getattr(exc, "headers", None),
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all handler for unexpected server errors.

    The raw exception is written to the log only, never to the response body.
    """
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(
            error=ErrorDetail(
                code="internal_error",
                message="An unexpected error occurred.",
            )
        ).model_dump(),
    )


# ---------------------------------------------------------------------------
# Request logging middleware
# ---------------------------------------------------------------------------


async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    ms = (time.perf_counter() - start) * 1000
    logger.info(
        "%s %s %d %.1fms %s",
        request.method,
        request.url.path,
        response.status_code,
        ms,
        request.client.host if request.client else "unknown",
    )
    return response


# ---------------------------------------------------------------------------
# Application factory
# ---------------------------------------------------------------------------


def create_app(settings: Optional[Settings] = None, database: Optional[Database] = None) -> FastAPI:
    """Build a FastAPI application.

    Args:
        settings: Configuration. Defaults to get_settings().
        database: An already-provisioned storage handle. When given, the app
                  uses it as-is and leaves closing it to the caller (tests
                  own their per-test database). When omitted, the lifespan
                  opens settings.database_url and closes it on shutdown.
    """
    settings = settings or get_settings()
    logging.getLogger("userauth").setLevel(settings.log_level.upper())

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info("%s %s starting up", settings.app_name, settings.app_version)
        owns_database = database is None
        db = create_database(settings.database_url) if owns_database else database
        if settings.seed_demo_data:
            seed_database(db, bcrypt_rounds=settings.bcrypt_rounds)

        user_store = UserStore(db)
        session_store = SessionStore(db)
        app.state.settings = settings
        app.state.database = db
        app.state.user_service = UserService(user_store, session_store, bcrypt_rounds=settings.bcrypt_rounds)
        app.state.auth_service = AuthService(
            user_store,
            session_store,
            session_ttl=timedelta(seconds=settings.session_ttl_seconds),
            bcrypt_rounds=settings.bcrypt_rounds,
        )
        purge_task: Optional[asyncio.Task] = None
        if settings.session_purge_interval_seconds > 0:
            purge_task = asyncio.create_task(_purge_loop(app, settings.session_purge_interval_seconds))
        app.state.purge_task = purge_task

        yield

        if purge_task is not None:
            purge_task.cancel()
            with suppress(asyncio.CancelledError):
                await purge_task
        if owns_database:
            db.close()
        logger.info("%s shutdown complete", settings.app_name)

    app = FastAPI(
        title=settings.app_name,
        description="User management and session-based authentication.",
        version=settings.app_version,
        lifespan=lifespan,
    )

    # add_middleware() wraps the existing stack, so the last one added is
    # outermost: request logging is innermost, TrustedHost sees requests first.
    app.middleware("http")(log_requests)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["Content-Type", "Authorization"],
        max_age=3600,
    )
    app.add_middleware(TrustedHostMiddleware, allowed_hosts=settings.allowed_hosts)

    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    app.include_router(auth_router, tags=["Auth"])
    app.include_router(users_router, tags=["Users"])

    @app.get("/", response_model=MessageResponse, tags=["Health"])
    async def root() -> MessageResponse:
        return MessageResponse(message=f"Welcome to the {settings.app_name}")

    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    def health(
        db: Database = Depends(get_database),
        app_settings: Settings = Depends(get_app_settings),
    ) -> HealthResponse:
        """Return liveness, version and server time. status is "degraded" if the database is unreachable."""
        return HealthResponse(
            status="ok" if db.ping() else "degraded",
            version=app_settings.app_version,
            timestamp=datetime.now(timezone.utc).isoformat(),
        )

    return app
