"""Aggregate API routers."""

from fastapi import APIRouter

from .catalog import router as catalog_router
from .members import router as members_router
from .rallies import router as rallies_router
from .scoring import router as scoring_router
from .system import router as system_router

ALL_ROUTERS: tuple[APIRouter, ...] = (
    system_router,
    members_router,
    rallies_router,
    catalog_router,
    scoring_router,
)

__all__ = ["ALL_ROUTERS"]
