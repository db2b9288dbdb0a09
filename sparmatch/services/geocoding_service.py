"""
Mapbox Geocoding API client.

Geocodes free-text locations and street addresses to (latitude, longitude).
Falls back to (None, None) on any failure so profile and gym saves are never
blocked.
"""

import logging
import os
from typing import Optional, Tuple
from urllib.parse import quote

import httpx

logger = logging.getLogger(__name__)

MAPBOX_GEOCODING_URL = "https://api.mapbox.com/geocoding/v5/mapbox.places"


def _get_mapbox_token() -> Optional[str]:
    """Read the Mapbox access token from the environment."""
    return os.environ.get("MAPBOX_ACCESS_TOKEN")


async def geocode_location(
    query: str, types: str = "place,locality,neighborhood,address,poi"
) -> Tuple[Optional[float], Optional[float]]:
    """
    Geocode a location string to (latitude, longitude) using the Mapbox Geocoding API.

    Args:
        query: Free-form location, e.g. "Austin, TX" or "123 Main St, Austin, TX"
        types: Comma-separated Mapbox feature types to accept

    Returns:
        Tuple of (latitude, longitude) or (None, None) if geocoding fails.
    """
    if not query or not query.strip():
        return None, None

    token = _get_mapbox_token()
    if not token:
        logger.warning("MAPBOX_ACCESS_TOKEN not set, skipping geocoding")
        return None, None

    try:
        async with httpx.AsyncClient(timeout=10.0) as client:
            resp = await client.get(
                f"{MAPBOX_GEOCODING_URL}/{quote(query.strip())}.json",
                params={
                    "access_token": token,
                    "limit": 1,
                    "types": types,
                },
            )
            resp.raise_for_status()
            data = resp.json()

        features = data.get("features", [])
        if not features:
            logger.info("Geocoding returned no results for: %s", query)
            return None, None

        # Mapbox returns [longitude, latitude]
        lng, lat = features[0]["center"]
        return float(lat), float(lng)

    except Exception:
        logger.warning("Geocoding failed for: %s", query, exc_info=True)
        return None, None


async def geocode_address(address: str) -> Tuple[Optional[float], Optional[float]]:
    """Geocode a street address (gyms)."""
    return await geocode_location(address, types="address,poi")
