"""
Geographic distance helpers.

Distances use a flat-earth (planar) approximation rather than great-circle
math: one degree of latitude is 69.1 miles, and a degree of longitude shrinks
by cos(latitude). Accurate enough for radii under ~100 miles, which is all
partner and gym search needs.
"""

import math
from typing import Optional, Tuple

from sparmatch.utils.constants import DEGREES_PER_RADIAN, MILES_PER_DEGREE

Point = Tuple[Optional[float], Optional[float]]


def planar_distance_miles(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    Approximate distance in miles between two coordinates.

    The longitude term is scaled by the cosine of the second point's latitude
    (the candidate being measured).

    Args:
        lat1: Query point latitude
        lon1: Query point longitude
        lat2: Candidate latitude
        lon2: Candidate longitude

    Returns:
        Distance in miles
    """
    d_lat = MILES_PER_DEGREE * (lat2 - lat1)
    d_lon = MILES_PER_DEGREE * (lon1 - lon2) * math.cos(lat2 / DEGREES_PER_RADIAN)
    return math.sqrt(d_lat ** 2 + d_lon ** 2)


def has_coordinates(point: Point) -> bool:
    """True when both components are present and finite."""
    lat, lon = point
    if lat is None or lon is None:
        return False
    return math.isfinite(lat) and math.isfinite(lon)


def coordinates_in_range(latitude: float, longitude: float) -> bool:
    """True for finite coordinates inside [-90, 90] x [-180, 180]."""
    if not (math.isfinite(latitude) and math.isfinite(longitude)):
        return False
    return -90.0 <= latitude <= 90.0 and -180.0 <= longitude <= 180.0


def distance_between(point: Point, candidate: Point) -> Optional[float]:
    """Planar distance from point to candidate, or None if either lacks coordinates."""
    if not has_coordinates(point) or not has_coordinates(candidate):
        return None
    return planar_distance_miles(point[0], point[1], candidate[0], candidate[1])


def within_radius(point: Point, candidate: Point, radius_miles: float) -> bool:
    """
    Check whether candidate lies within radius_miles of point.

    The boundary is inclusive, so a candidate at the query point matches any
    radius >= 0. Candidates without coordinates never match.

    Args:
        point: (latitude, longitude) of the query
        candidate: (latitude, longitude) of the candidate, components may be None
        radius_miles: Maximum distance in miles

    Returns:
        True if the candidate is inside the radius
    """
    distance = distance_between(point, candidate)
    if distance is None:
        return False
    return distance <= radius_miles


def latitude_band(latitude: float, radius_miles: float) -> Tuple[float, float]:
    """
    Latitude bounds that contain every point within radius_miles of latitude.

    The planar distance is never smaller than its latitude component, so this
    band can be used as a SQL prefilter without dropping true matches.
    """
    delta = radius_miles / MILES_PER_DEGREE
    return latitude - delta, latitude + delta
