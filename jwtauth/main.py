"""FastAPI application entrypoint for the auth service."""

from __future__ import annotations

from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from jwtauth.api.routers import auth as auth_routes
from jwtauth.api.routers import secured as secured_routes
from jwtauth.api.routers import users as users_routes
from jwtauth.auth.http import handle_http_exception
from jwtauth.auth.http import handle_request_validation_error
from jwtauth.auth.http import handle_unexpected_exception
from jwtauth.auth.repository import CredentialStore
from jwtauth.core.clock import Clock
from jwtauth.core.clock import utc_now
from jwtauth.core.config import Settings
from jwtauth.core.config import load_settings
from jwtauth.core.logging import REQUEST_ID_HEADER
from jwtauth.core.logging import bind_request_id
from jwtauth.core.logging import clear_request_id
from jwtauth.core.logging import configure_logging
from jwtauth.core.logging import get_logger
from jwtauth.runtime import build_runtime

CORS_MAX_AGE_SECONDS = 3600
CORS_METHODS = ["GET", "POST", "PUT", "DELETE", "OPTIONS"]

log = get_logger(__name__)


def create_app(
    settings: Settings | None = None,
    *,
    clock: Clock = utc_now,
    store: CredentialStore | None = None,
) -> FastAPI:
    """Build the application; settings are read from the environment when omitted."""
    settings = settings or load_settings()
    configure_logging(settings.jwtauth_log_level, json_output=settings.jwtauth_log_json)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.runtime = build_runtime(settings, clock=clock, store=store)
        log.info("startup", env=settings.jwtauth_app_env)
        yield

    app = FastAPI(lifespan=lifespan)

    @app.middleware("http")
    async def authentication_gate(request: Request, call_next):
        await request.app.state.runtime.gate.attach_identity(request)
        return await call_next(request)

    @app.middleware("http")
    async def request_context(request: Request, call_next):
        request_id = bind_request_id(request.headers.get(REQUEST_ID_HEADER))
        try:
            response = await call_next(request)
        except Exception as exc:
            # 500 responses carry the request id too.
            response = await handle_unexpected_exception(request, exc)
        finally:
            clear_request_id()
        response.headers[REQUEST_ID_HEADER] = request_id
        return response

    origins = settings.cors_origins()
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials="*" not in origins,
        allow_methods=CORS_METHODS,
        allow_headers=["*"],
        max_age=CORS_MAX_AGE_SECONDS,
    )

    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_exception)

    app.include_router(auth_routes.router)
    app.include_router(users_routes.router)
    app.include_router(secured_routes.router)
    return app


def serve() -> None:
    """Console entrypoint: run uvicorn with the configured host/port."""
    settings = load_settings()
    uvicorn.run(
        create_app(settings),
        host=settings.jwtauth_app_host,
        port=settings.jwtauth_app_port,
    )


__all__ = ["create_app", "serve"]
