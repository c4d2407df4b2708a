"""Core configuration and infrastructure helpers."""

from .config import (
    ALLOWED_CORS_ORIGINS,
    COOKIE_DOMAIN,
    COOKIE_SAMESITE,
    COOKIE_SECURE,
    DATABASE_URL,
    DB_RESET,
    DEFAULT_PAGE_SIZE,
    DEFAULT_SEARCH_RADIUS_MILES,
    LOG_LEVEL,
    MAX_PAGE_SIZE,
    RALLY_DATE_WINDOW_YEARS,
    SECRET_KEY,
)
from .database import engine, get_session
from .errors import NotFoundError, RallyError, ValidationError
from .time import today, utcnow

__all__ = [
    "ALLOWED_CORS_ORIGINS",
    "COOKIE_DOMAIN",
    "COOKIE_SAMESITE",
    "COOKIE_SECURE",
    "DATABASE_URL",
    "DB_RESET",
    "DEFAULT_PAGE_SIZE",
    "DEFAULT_SEARCH_RADIUS_MILES",
    "LOG_LEVEL",
    "MAX_PAGE_SIZE",
    "NotFoundError",
    "RALLY_DATE_WINDOW_YEARS",
    "RallyError",
    "SECRET_KEY",
    "ValidationError",
    "engine",
    "get_session",
    "today",
    "utcnow",
]
