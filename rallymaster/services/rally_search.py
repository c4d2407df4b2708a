"""Rally discovery query.

Each filter has its own builder that returns ``None`` when its input is
absent; ``search_rallies`` ANDs whatever the builders produce.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import date
from typing import Any, List, Optional

from sqlalchemy import and_, func, or_
from sqlmodel import Session, col, select

from ..core import DEFAULT_PAGE_SIZE, DEFAULT_SEARCH_RADIUS_MILES, MAX_PAGE_SIZE
from ..core.errors import ValidationError
from ..models import Member, Rally, RallyParticipant
from .countries import normalize_country
from .geo import BoundingBox, bounding_box, distance_miles, proximity_requested

logger = logging.getLogger(__name__)


@dataclass
class RallyPage:
    items: List[Rally]
    page: int
    size: int
    total: int

    @property
    def total_pages(self) -> int:
        if self.size <= 0:
            return 1
        return max(1, math.ceil(self.total / self.size))


@dataclass
class ProximityFilter:
    """Coarse SQL box plus the precise distance check done in Python."""

    lat: float
    lng: float
    radius_miles: float
    box: BoundingBox = field(init=False)

    def __post_init__(self) -> None:
        self.box = bounding_box(self.lat, self.lng, self.radius_miles)

    def clause(self):
        lng_ranges = [
            col(Rally.longitude).between(low, high)
            for low, high in self.box.longitude_ranges()
        ]
        return and_(
            col(Rally.latitude).between(self.box.min_lat, self.box.max_lat),
            or_(*lng_ranges),
        )

    def matches(self, rally: Rally) -> bool:
        if rally.latitude is None or rally.longitude is None:
            return False
        if not self.box.contains(rally.latitude, rally.longitude):
            return False
        return distance_miles(self.lat, self.lng, rally.latitude, rally.longitude) <= self.radius_miles


def _clean(text: Optional[str]) -> Optional[str]:
    if text is None:
        return None
    text = text.strip()
    return text or None


def name_predicate(name: Optional[str]):
    needle = _clean(name)
    if needle is None:
        return None
    return func.lower(Rally.name).contains(needle.lower(), autoescape=True)


def date_overlap_predicate(date_from: Optional[date], date_to: Optional[date]):
    """Inclusive overlap of ``[date_from, date_to]`` with the rally's dates."""

    if date_from is None and date_to is None:
        return None
    if date_from is not None and date_to is not None:
        return and_(col(Rally.start_date) <= date_to, col(Rally.end_date) >= date_from)
    if date_from is not None:
        return col(Rally.end_date) >= date_from
    return col(Rally.start_date) <= date_to


def country_predicate(country: Optional[str]):
    """Exact code match, or the code / raw text inside the free-text country."""

    code = normalize_country(country)
    if code is None:
        return None
    raw = country.strip().upper()
    country_text = func.upper(Rally.location_country)
    alternatives = [
        col(Rally.country_code) == code,
        country_text.contains(code, autoescape=True),
    ]
    if raw != code:
        alternatives.append(country_text.contains(raw, autoescape=True))
    return or_(*alternatives)


def region_predicate(region: Optional[str]):
    needle = _clean(region)
    if needle is None:
        return None
    return func.lower(Rally.location_state).contains(needle.lower(), autoescape=True)


def proximity_predicate(
    near_lat: Optional[float],
    near_lng: Optional[float],
    radius_miles: Optional[float],
) -> Optional[ProximityFilter]:
    if near_lat is not None and near_lng is not None and radius_miles is None:
        radius_miles = DEFAULT_SEARCH_RADIUS_MILES
    if not proximity_requested(near_lat, near_lng, radius_miles):
        return None
    return ProximityFilter(near_lat, near_lng, radius_miles)


def visibility_predicate(member: Optional[Member]):
    """Public rallies, plus private ones the member is on the roster of."""

    public = col(Rally.is_public) == True  # noqa: E712
    if member is None or member.id is None:
        return public
    rostered = select(RallyParticipant.rally_id).where(
        RallyParticipant.member_id == member.id
    )
    return or_(public, col(Rally.id).in_(rostered))


def _page_bounds(page: int, size: Optional[int]) -> tuple[int, int]:
    if page is None or page < 0:
        raise ValidationError("page must be zero or greater")
    if size is None:
        size = DEFAULT_PAGE_SIZE
    if size < 1:
        raise ValidationError("size must be at least 1")
    return page, min(size, MAX_PAGE_SIZE)


def search_rallies(
    session: Session,
    member: Optional[Member] = None,
    *,
    name: Optional[str] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    country: Optional[str] = None,
    region: Optional[str] = None,
    near_lat: Optional[float] = None,
    near_lng: Optional[float] = None,
    radius_miles: Optional[float] = None,
    page: int = 0,
    size: Optional[int] = None,
    unpaged: bool = False,
) -> RallyPage:
    """Find rallies matching every supplied filter, ordered by start date.

    A ``date_from`` later than ``date_to`` is rejected with ValidationError
    rather than being run through the overlap predicate, so a long rally
    spanning both dates is not returned for an inverted window.
    """

    if date_from is not None and date_to is not None and date_from > date_to:
        raise ValidationError("'from' date must not be after 'to' date")
    page, size = _page_bounds(page, size)

    proximity = proximity_predicate(near_lat, near_lng, radius_miles)
    clauses: List[Any] = [
        clause
        for clause in (
            visibility_predicate(member),
            name_predicate(name),
            date_overlap_predicate(date_from, date_to),
            country_predicate(country),
            region_predicate(region),
            proximity.clause() if proximity else None,
        )
        if clause is not None
    ]

    statement = select(Rally)
    if clauses:
        statement = statement.where(and_(*clauses))
    statement = statement.order_by(col(Rally.start_date).asc(), col(Rally.id).asc())

    if proximity is not None:
        candidates = session.exec(statement).all()
        matches = [rally for rally in candidates if proximity.matches(rally)]
        logger.debug(
            "Proximity search kept %d of %d box candidates", len(matches), len(candidates)
        )
        if unpaged:
            return RallyPage(items=matches, page=0, size=len(matches), total=len(matches))
        start = page * size
        return RallyPage(items=matches[start:start + size], page=page, size=size, total=len(matches))

    if unpaged:
        items = list(session.exec(statement).all())
        return RallyPage(items=items, page=0, size=len(items), total=len(items))

    total = session.exec(select(func.count()).select_from(statement.subquery())).one()
    items = list(session.exec(statement.offset(page * size).limit(size)).all())
    return RallyPage(items=items, page=page, size=size, total=total)


__all__ = [
    "ProximityFilter",
    "RallyPage",
    "country_predicate",
    "date_overlap_predicate",
    "name_predicate",
    "proximity_predicate",
    "region_predicate",
    "search_rallies",
    "visibility_predicate",
]
