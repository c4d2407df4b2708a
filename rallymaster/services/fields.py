"""Parsing helpers for loosely typed request bodies."""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Mapping, Optional

from ..core.errors import ValidationError


def text(body: Mapping[str, Any], key: str) -> Optional[str]:
    """Stripped string or ``None`` when missing or blank."""

    value = body.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"{key} must be a string")
    value = value.strip()
    return value or None


def required_text(body: Mapping[str, Any], key: str, label: str) -> str:
    value = text(body, key)
    if value is None:
        raise ValidationError(f"{label} may not be null/empty")
    return value


def integer(body: Mapping[str, Any], key: str) -> Optional[int]:
    value = body.get(key)
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise ValidationError(f"{key} must be an integer")
    if isinstance(value, float) and not value.is_integer():
        raise ValidationError(f"{key} must be an integer")
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"{key} must be an integer") from exc


def number(body: Mapping[str, Any], key: str) -> Optional[float]:
    value = body.get(key)
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise ValidationError(f"{key} must be a number")
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"{key} must be a number") from exc


def boolean(body: Mapping[str, Any], key: str) -> Optional[bool]:
    value = body.get(key)
    if value is None:
        return None
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in {"true", "false"}:
        return value.strip().lower() == "true"
    raise ValidationError(f"{key} must be true or false")


def iso_date(body: Mapping[str, Any], key: str) -> Optional[date]:
    value = body.get(key)
    if value is None or value == "":
        return None
    if isinstance(value, date) and not isinstance(value, datetime):
        return value
    try:
        return date.fromisoformat(str(value))
    except ValueError as exc:
        raise ValidationError(f"{key} must be an ISO date (YYYY-MM-DD)") from exc


def iso_datetime(body: Mapping[str, Any], key: str) -> Optional[datetime]:
    value = body.get(key)
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError as exc:
        raise ValidationError(f"{key} must be an ISO timestamp") from exc


def isoformat(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value is not None else None


__all__ = [
    "boolean",
    "integer",
    "iso_date",
    "iso_datetime",
    "isoformat",
    "number",
    "required_text",
    "text",
]
