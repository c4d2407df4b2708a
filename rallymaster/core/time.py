"""Time helpers."""

from __future__ import annotations

from datetime import date, datetime, timezone


def utcnow() -> datetime:
    """Return the current UTC datetime."""
    return datetime.now(timezone.utc)


def today() -> date:
    return utcnow().date()


__all__ = ["today", "utcnow"]
