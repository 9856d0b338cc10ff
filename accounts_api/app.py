"""FastAPI application wiring for the accounts API."""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from accounts_api.core.config import get_settings
from accounts_api.core.errors import (
    AuthenticationError,
    DuplicateUsernameError,
    NotFoundError,
    RateLimitedError,
    ServiceError,
    TokenExpiredError,
    TokenInvalidError,
    WeakInputError,
)
from accounts_api.db.create_tables import create_all
from accounts_api.routers import users as users_router

logger = logging.getLogger(__name__)

STATUS_BY_ERROR = {
    WeakInputError: 400,
    DuplicateUsernameError: 400,
    AuthenticationError: 401,
    TokenExpiredError: 401,
    TokenInvalidError: 401,
    NotFoundError: 404,
    RateLimitedError: 429,
}


def status_for(exc: ServiceError) -> int:
    for error_type, status_code in STATUS_BY_ERROR.items():
        if isinstance(exc, error_type):
            return status_code
    return 500


async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    status_code = status_for(exc)
    if status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.code)
    headers = None
    if status_code == 401:
        headers = {"WWW-Authenticate": "Bearer"}
    elif isinstance(exc, RateLimitedError):
        headers = {"Retry-After": str(exc.retry_after)}
    return JSONResponse(exc.as_dict(), status_code=status_code, headers=headers)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    create_all()
    yield


def create_app() -> FastAPI:
    settings = get_settings()
    logging.basicConfig(level=settings.log_level, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")
    application = FastAPI(title="Accounts API", lifespan=lifespan)
    application.add_exception_handler(ServiceError, service_error_handler)
    application.include_router(users_router.router)
    return application


app = create_app()
