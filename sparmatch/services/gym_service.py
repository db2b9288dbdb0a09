"""
Gym directory service: listing (optionally by distance) and creation.
"""

import json
from typing import Dict, List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sparmatch.database.models import Gym
from sparmatch.services import geocoding_service
from sparmatch.services.errors import ValidationError
from sparmatch.services.search_service import build_geo_filter
from sparmatch.utils.datetime_utils import isoformat_or_none
from sparmatch.utils.geo_utils import (
    coordinates_in_range,
    distance_between,
    latitude_band,
    within_radius,
)
import logging

logger = logging.getLogger(__name__)


def _load_json_list(raw: Optional[str]) -> List[str]:
    if not raw:
        return []
    try:
        value = json.loads(raw)
    except (TypeError, ValueError):
        logger.warning("Ignoring malformed JSON list: %r", raw)
        return []
    return value if isinstance(value, list) else []


def format_gym(gym: Gym) -> Dict:
    """Convert a Gym ORM object into a response dict."""
    return {
        "id": gym.id,
        "name": gym.name,
        "address": gym.address,
        "city": gym.city,
        "state": gym.state,
        "zip_code": gym.zip_code,
        "latitude": gym.latitude,
        "longitude": gym.longitude,
        "phone": gym.phone,
        "website": gym.website,
        "description": gym.description,
        "disciplines": _load_json_list(gym.disciplines),
        "amenities": _load_json_list(gym.amenities),
        "rating": gym.rating,
        "total_ratings": gym.total_ratings,
        "verified": gym.verified,
        "created_at": isoformat_or_none(gym.created_at),
    }


async def list_gyms(
    session: AsyncSession,
    latitude: Optional[float] = None,
    longitude: Optional[float] = None,
    radius: Optional[float] = None,
) -> List[Dict]:
    """
    List gyms, highest rated first.

    With coordinates, only gyms within the radius (default 25 miles) are
    returned, each with "distance_miles". Gyms without coordinates are left
    out of radius searches.

    Args:
        session: Database session
        latitude: Optional query latitude
        longitude: Optional query longitude
        radius: Optional radius in miles

    Returns:
        List of gym dicts

    Raises:
        InvalidFilterError: If the coordinates or radius are invalid
    """
    geo = build_geo_filter(latitude, longitude, radius)

    query = select(Gym)
    if geo is not None:
        low, high = latitude_band(geo.latitude, geo.radius_miles)
        query = query.where(
            Gym.latitude.isnot(None),
            Gym.longitude.isnot(None),
            Gym.latitude.between(low, high),
        )
    query = query.order_by(Gym.rating.desc(), Gym.id.asc())

    result = await session.execute(query)
    gyms = []
    for gym in result.scalars().all():
        item = format_gym(gym)
        if geo is not None:
            point = (geo.latitude, geo.longitude)
            candidate = (gym.latitude, gym.longitude)
            if not within_radius(point, candidate, geo.radius_miles):
                continue
            item["distance_miles"] = round(distance_between(point, candidate), 1)
        gyms.append(item)
    return gyms


async def create_gym(session: AsyncSession, data: Dict) -> Dict:
    """
    Create a gym.

    When no coordinates are given, the full address is geocoded (best
    effort; the gym is saved without coordinates on failure).

    Args:
        session: Database session
        data: Gym fields (name, address, city, state required)

    Returns:
        Gym dict

    Raises:
        ValidationError: For missing required fields or bad coordinates
    """
    for field in ("name", "address", "city", "state"):
        if not (data.get(field) or "").strip():
            raise ValidationError(f"{field} is required")

    # Gyms may list styles beyond the partner-search disciplines (e.g. "kickboxing")
    disciplines = [d.strip().lower() for d in data.get("disciplines") or [] if d and d.strip()]

    latitude = data.get("latitude")
    longitude = data.get("longitude")
    if (latitude is None) != (longitude is None):
        raise ValidationError("Latitude and longitude must be provided together")
    if latitude is not None and not coordinates_in_range(latitude, longitude):
        raise ValidationError("Coordinates are out of range")
    if latitude is None:
        full_address = ", ".join(
            part for part in (data["address"], data["city"], data["state"], data.get("zip_code")) if part
        )
        latitude, longitude = await geocoding_service.geocode_address(full_address)

    gym = Gym(
        name=data["name"].strip(),
        address=data["address"].strip(),
        city=data["city"].strip(),
        state=data["state"].strip(),
        zip_code=data.get("zip_code"),
        latitude=latitude,
        longitude=longitude,
        phone=data.get("phone"),
        website=data.get("website"),
        description=data.get("description"),
        disciplines=json.dumps(disciplines),
        amenities=json.dumps(data.get("amenities") or []),
    )
    session.add(gym)
    await session.flush()
    await session.refresh(gym)

    logger.info("Created gym %s (%s)", gym.id, gym.name)
    return format_gym(gym)
