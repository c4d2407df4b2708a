"""Database model for rally events."""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from sqlmodel import Field as ORMField, SQLModel

from ..core.time import utcnow


class Rally(SQLModel, table=True):
    """A multi-day rally with its headquarters location and visibility flags."""

    id: Optional[int] = ORMField(default=None, primary_key=True)
    name: str = ORMField(index=True)
    description: Optional[str] = None

    start_date: Optional[date] = ORMField(default=None, index=True)
    end_date: Optional[date] = ORMField(default=None, index=True)

    latitude: Optional[float] = ORMField(default=None, index=True)
    longitude: Optional[float] = ORMField(default=None, index=True)
    location_city: Optional[str] = None
    location_state: Optional[str] = None
    location_country: Optional[str] = None
    country_code: Optional[str] = ORMField(default=None, index=True)

    is_public: bool = False
    points_public: bool = False
    riders_public: bool = False
    organizers_public: bool = False

    created_at: datetime = ORMField(default_factory=utcnow)


__all__ = ["Rally"]
