"""Distance and bounding-box helpers for proximity search.

Distances are great-circle miles on a sphere, which is close enough for
finding rallies "near" a point.
"""

from __future__ import annotations

import math
from typing import List, NamedTuple, Optional, Tuple

EARTH_RADIUS_MILES = 3958.7613
MILES_PER_DEGREE_LAT = 69.0
MILES_PER_DEGREE_LNG_AT_EQUATOR = 69.172
MIN_LNG_DIVISOR = 0.000001


class BoundingBox(NamedTuple):
    """Degree ranges enclosing a search circle.

    Longitudes may run past +/-180 when the circle crosses the antimeridian.
    """

    min_lat: float
    max_lat: float
    min_lng: float
    max_lng: float

    @property
    def spans_all_longitudes(self) -> bool:
        return self.max_lng - self.min_lng >= 360.0

    def longitude_ranges(self) -> List[Tuple[float, float]]:
        """Split the longitude span into ranges inside [-180, 180]."""

        if self.spans_all_longitudes:
            return [(-180.0, 180.0)]
        if self.min_lng < -180.0:
            return [(self.min_lng + 360.0, 180.0), (-180.0, self.max_lng)]
        if self.max_lng > 180.0:
            return [(self.min_lng, 180.0), (-180.0, self.max_lng - 360.0)]
        return [(self.min_lng, self.max_lng)]

    def contains(self, lat: float, lng: float) -> bool:
        if not self.min_lat <= lat <= self.max_lat:
            return False
        return any(low <= lng <= high for low, high in self.longitude_ranges())


def bounding_box(lat: float, lng: float, radius_miles: float) -> BoundingBox:
    """Return a box that contains every point within ``radius_miles``.

    The nominal longitude half-width uses 69.172 miles per degree scaled by
    the cosine of the center latitude. Away from the equator a circle bulges
    past that width on its poleward side, so the half-width is widened to
    the exact tangent longitude of the spherical cap when that is larger.
    """

    d_lat = radius_miles / MILES_PER_DEGREE_LAT

    miles_per_deg_lng = MILES_PER_DEGREE_LNG_AT_EQUATOR * math.cos(math.radians(lat))
    d_lng = radius_miles / max(MIN_LNG_DIVISOR, miles_per_deg_lng)

    angular = radius_miles / EARTH_RADIUS_MILES
    if abs(lat) + math.degrees(angular) >= 90.0:
        # The cap covers a pole, so every meridian passes through it.
        d_lng = 180.0
    else:
        tangent = math.asin(math.sin(angular) / math.cos(math.radians(lat)))
        d_lng = min(180.0, max(d_lng, math.degrees(tangent)))

    return BoundingBox(
        min_lat=max(-90.0, lat - d_lat),
        max_lat=min(90.0, lat + d_lat),
        min_lng=lng - d_lng,
        max_lng=lng + d_lng,
    )


def distance_miles(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle distance in miles using the spherical law of cosines."""

    lat1_r = math.radians(lat1)
    lat2_r = math.radians(lat2)
    d_lng_r = math.radians(lng2) - math.radians(lng1)
    cos_angle = (
        math.sin(lat1_r) * math.sin(lat2_r)
        + math.cos(lat1_r) * math.cos(lat2_r) * math.cos(d_lng_r)
    )
    # Rounding can push the cosine just outside [-1, 1].
    cos_angle = max(-1.0, min(1.0, cos_angle))
    return EARTH_RADIUS_MILES * math.acos(cos_angle)


def proximity_requested(
    lat: Optional[float], lng: Optional[float], radius_miles: Optional[float]
) -> bool:
    """A proximity filter applies only with both coordinates and a positive radius."""

    return lat is not None and lng is not None and radius_miles is not None and radius_miles > 0


def within_radius(
    center_lat: float,
    center_lng: float,
    lat: Optional[float],
    lng: Optional[float],
    radius_miles: float,
    box: Optional[BoundingBox] = None,
) -> bool:
    """Box prefilter, then the precise great-circle test."""

    if lat is None or lng is None:
        return False
    if box is None:
        box = bounding_box(center_lat, center_lng, radius_miles)
    if not box.contains(lat, lng):
        return False
    return distance_miles(center_lat, center_lng, lat, lng) <= radius_miles


__all__ = [
    "BoundingBox",
    "EARTH_RADIUS_MILES",
    "bounding_box",
    "distance_miles",
    "proximity_requested",
    "within_radius",
]
