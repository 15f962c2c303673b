"""FastAPI application factory."""

from __future__ import annotations

import asyncio
import contextlib
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from onsite_auth.auth.deps import get_password_hasher, get_token_service
from onsite_auth.auth.schemas import describe_errors
from onsite_auth.auth.service import AuthService
from onsite_auth.db.engine import close_db, create_schema, get_session_factory, init_db
from onsite_auth.db.repositories.sessions import SqlSessionStore
from onsite_auth.db.repositories.users import SqlCredentialStore
from onsite_auth.errors import AuthError, InternalError, Unauthorized, ValidationError
from onsite_auth.rest.routes.auth import router as auth_router
from onsite_auth.rest.routes.health import router as health_router
from onsite_auth.settings import get_settings

log = structlog.get_logger(__name__)

_HTTP_ERROR_KINDS = {
    401: "unauthorized",
    403: "forbidden",
    404: "not_found",
    405: "method_not_allowed",
}


async def purge_expired_sessions() -> int:
    """Delete expired and revoked session rows using a dedicated DB session."""
    factory = get_session_factory()
    async with factory() as session:
        service = AuthService(
            SqlCredentialStore(session),
            SqlSessionStore(session),
            get_token_service(),
            get_password_hasher(),
        )
        return await service.purge_expired_sessions()


async def _purge_loop(interval_seconds: int) -> None:
    while True:
        await asyncio.sleep(interval_seconds)
        try:
            await purge_expired_sessions()
        except InternalError:
            log.warning("session_purge_failed", retry_in_seconds=interval_seconds)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    settings = get_settings()
    await init_db()
    if settings.auto_create_schema:
        await create_schema()

    purge_task = None
    if settings.session_purge_interval_seconds > 0:
        purge_task = asyncio.create_task(_purge_loop(settings.session_purge_interval_seconds))
    log.info("service_started")

    yield

    if purge_task is not None:
        purge_task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await purge_task
    await close_db()
    log.info("service_stopped")


def _error_response(exc: AuthError) -> JSONResponse:
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, Unauthorized) else None
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)


def register_exception_handlers(app: FastAPI, debug: bool = False) -> None:
    """Render every failure as ``{"error": kind, "message": ...}``."""

    @app.exception_handler(AuthError)
    async def _auth_error(request: Request, exc: AuthError) -> JSONResponse:
        return _error_response(exc)

    @app.exception_handler(StarletteHTTPException)
    async def _http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        kind = _HTTP_ERROR_KINDS.get(exc.status_code, "http_error")
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": kind, "message": str(exc.detail)},
            headers=exc.headers,
        )

    @app.exception_handler(RequestValidationError)
    async def _request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        return _error_response(ValidationError(describe_errors(list(exc.errors()))))

    @app.exception_handler(Exception)
    async def _unhandled_error(request: Request, exc: Exception) -> JSONResponse:
        log.exception("unhandled_error", path=request.url.path)
        message = f"{type(exc).__name__}: {exc}" if debug else None
        return _error_response(InternalError(message))


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(
        title="OnSite Auth API",
        description="Registration, login and bearer-session verification",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def request_context(request: Request, call_next):
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(method=request.method, path=request.url.path)
        return await call_next(request)

    register_exception_handlers(app, debug=settings.debug)

    # Public routes
    app.include_router(health_router, tags=["health"])

    # register/login are public; /me and the logout routes require a bearer token
    app.include_router(auth_router)

    return app
