"""Service layer helpers."""

from .access import (
    AccessDecision,
    can_view,
    check_rally_access,
    require_master_access,
    require_scorer_role,
    require_scoring_access,
    require_view,
)
from .countries import normalize_country
from .geo import bounding_box, distance_miles, within_radius
from .rally_search import RallyPage, search_rallies

__all__ = [
    "AccessDecision",
    "RallyPage",
    "bounding_box",
    "can_view",
    "check_rally_access",
    "distance_miles",
    "normalize_country",
    "require_master_access",
    "require_scorer_role",
    "require_scoring_access",
    "require_view",
    "search_rallies",
    "within_radius",
]
