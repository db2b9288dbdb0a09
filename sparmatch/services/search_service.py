"""
Partner search service.

Combines attribute filters (discipline, experience, location text) with an
optional geo-radius filter and sorts the matches by rating.
"""

import math
from dataclasses import dataclass
from typing import Dict, List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sparmatch.database.models import Discipline, ExperienceLevel, FighterProfile, User
from sparmatch.services.errors import InvalidFilterError
from sparmatch.services.profile_service import format_profile
from sparmatch.services.user_service import format_user
from sparmatch.utils.constants import DEFAULT_SEARCH_RADIUS_MILES
from sparmatch.utils.geo_utils import (
    coordinates_in_range,
    distance_between,
    latitude_band,
    within_radius,
)
import logging

logger = logging.getLogger(__name__)


def _escape_like(value: str) -> str:
    """Escape LIKE-special characters (%, _) so they match literally."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


@dataclass(frozen=True)
class GeoFilter:
    """Query point and radius for a location-bounded search."""

    latitude: float
    longitude: float
    radius_miles: float = DEFAULT_SEARCH_RADIUS_MILES


@dataclass(frozen=True)
class SearchFilters:
    """Validated partner search filters. Build with build_search_filters()."""

    discipline: Optional[Discipline] = None
    experience_level: Optional[ExperienceLevel] = None
    location: Optional[str] = None
    geo: Optional[GeoFilter] = None


def build_geo_filter(
    latitude: Optional[float],
    longitude: Optional[float],
    radius: Optional[float] = None,
) -> Optional[GeoFilter]:
    """
    Validate raw geo parameters.

    A radius without coordinates is ignored; coordinates without a radius
    use the default radius.

    Args:
        latitude: Query latitude or None
        longitude: Query longitude or None
        radius: Radius in miles or None

    Returns:
        GeoFilter, or None when no coordinates were given

    Raises:
        InvalidFilterError: For half-specified, non-finite or out-of-range values
    """
    if latitude is None and longitude is None:
        return None
    if latitude is None or longitude is None:
        raise InvalidFilterError("Latitude and longitude must be provided together")
    if not coordinates_in_range(latitude, longitude):
        raise InvalidFilterError("Coordinates must be finite and within valid ranges")

    if radius is None:
        radius = DEFAULT_SEARCH_RADIUS_MILES
    elif not math.isfinite(radius) or radius < 0:
        raise InvalidFilterError("Radius must be a non-negative number of miles")

    return GeoFilter(latitude=latitude, longitude=longitude, radius_miles=radius)


def build_search_filters(
    discipline: Optional[str] = None,
    experience_level: Optional[str] = None,
    location: Optional[str] = None,
    latitude: Optional[float] = None,
    longitude: Optional[float] = None,
    radius: Optional[float] = None,
) -> SearchFilters:
    """
    Validate raw search parameters into a SearchFilters struct.

    Empty strings count as "not provided".

    Raises:
        InvalidFilterError: If an enum value or the geo parameters are invalid
    """
    parsed_discipline = None
    if discipline:
        try:
            parsed_discipline = Discipline(discipline)
        except ValueError:
            raise InvalidFilterError(f"Invalid discipline: {discipline}")

    parsed_level = None
    if experience_level:
        try:
            parsed_level = ExperienceLevel(experience_level)
        except ValueError:
            raise InvalidFilterError(f"Invalid experience level: {experience_level}")

    location_text = location.strip() if location else None

    return SearchFilters(
        discipline=parsed_discipline,
        experience_level=parsed_level,
        location=location_text or None,
        geo=build_geo_filter(latitude, longitude, radius),
    )


async def search_profiles(
    session: AsyncSession,
    filters: SearchFilters,
    limit: Optional[int] = None,
    offset: int = 0,
) -> List[Dict]:
    """
    Search active fighter profiles.

    All provided filters are ANDed. With a geo filter, a latitude band is
    applied in SQL first, then each candidate is checked with the planar
    distance; profiles without coordinates never match a geo search.
    Results are ordered by rating (highest first), ties by creation order.

    Args:
        session: Database session
        filters: Validated filters from build_search_filters()
        limit: Optional max results (applied after filtering)
        offset: Number of matching results to skip

    Returns:
        List of profile dicts, each with a nested "user" dict and, for geo
        searches, "distance_miles"
    """
    query = (
        select(FighterProfile, User)
        .join(User, FighterProfile.user_id == User.id)
        .where(FighterProfile.is_active == True)  # noqa: E712
    )

    if filters.discipline:
        query = query.where(FighterProfile.discipline == filters.discipline.value)
    if filters.experience_level:
        query = query.where(FighterProfile.experience_level == filters.experience_level.value)
    if filters.location:
        pattern = f"%{_escape_like(filters.location)}%"
        query = query.where(FighterProfile.location.ilike(pattern, escape="\\"))

    geo = filters.geo
    if geo is not None:
        low, high = latitude_band(geo.latitude, geo.radius_miles)
        query = query.where(
            FighterProfile.latitude.isnot(None),
            FighterProfile.longitude.isnot(None),
            FighterProfile.latitude.between(low, high),
        )

    query = query.order_by(FighterProfile.rating.desc(), FighterProfile.id.asc())
    result = await session.execute(query)

    matches = []
    for profile, user in result.all():
        item = format_profile(profile, user=format_user(user))
        if geo is not None:
            point = (geo.latitude, geo.longitude)
            candidate = (profile.latitude, profile.longitude)
            if not within_radius(point, candidate, geo.radius_miles):
                continue
            item["distance_miles"] = round(distance_between(point, candidate), 1)
        matches.append(item)

    if offset:
        matches = matches[offset:]
    if limit is not None:
        matches = matches[:limit]

    logger.debug("Partner search %s returned %d profiles", filters, len(matches))
    return matches
