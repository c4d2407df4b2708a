"""API assembly helpers."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError

from ..core.errors import NotFoundError, ValidationError
from .routers import ALL_ROUTERS

logger = logging.getLogger(__name__)


def register_routes(app: FastAPI) -> None:
    """Attach all application routers to the given app."""

    for router in ALL_ROUTERS:
        app.include_router(router)


async def _not_found(request: Request, exc: NotFoundError) -> JSONResponse:
    logger.warning("Not found on %s %s: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=404, content={"detail": exc.message})


async def _invalid(request: Request, exc: ValidationError) -> JSONResponse:
    logger.warning("Rejected %s %s: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=400, content={"detail": exc.message})


async def _conflict(request: Request, exc: IntegrityError) -> JSONResponse:
    logger.warning("Integrity violation on %s %s: %s", request.method, request.url.path, exc.orig)
    return JSONResponse(status_code=409, content={"detail": "Conflicting data"})


def register_error_handlers(app: FastAPI) -> None:
    """Map service-layer errors to HTTP status codes."""

    app.add_exception_handler(NotFoundError, _not_found)
    app.add_exception_handler(ValidationError, _invalid)
    app.add_exception_handler(IntegrityError, _conflict)


__all__ = ["register_error_handlers", "register_routes"]
