"""System-level API endpoints."""

from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter

from ...core import DEFAULT_PAGE_SIZE, DEFAULT_SEARCH_RADIUS_MILES, MAX_PAGE_SIZE

router = APIRouter(tags=["system"])


@router.get("/health")
def health() -> Dict[str, bool]:
    """Simple readiness probe."""

    return {"ok": True}


@router.get("/config")
def get_config() -> Dict[str, Any]:
    """Expose search defaults to the frontend."""

    return {
        "default_search_radius_miles": DEFAULT_SEARCH_RADIUS_MILES,
        "default_page_size": DEFAULT_PAGE_SIZE,
        "max_page_size": MAX_PAGE_SIZE,
    }


__all__ = ["router"]
