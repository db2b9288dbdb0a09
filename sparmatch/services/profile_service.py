"""
Fighter profile service.

Handles profile lookup, idempotent upsert by user id, and peer ratings.
"""

from typing import Dict, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, and_, or_
from sparmatch.database.models import (
    Connection,
    ConnectionStatus,
    Discipline,
    ExperienceLevel,
    FighterProfile,
)
from sparmatch.services import geocoding_service, user_service
from sparmatch.services.errors import ForbiddenError, NotFoundError, ValidationError
from sparmatch.utils.constants import (
    MAX_RATING,
    MAX_RATING_SCORE,
    MIN_RATING,
    MIN_RATING_SCORE,
)
from sparmatch.utils.datetime_utils import utcnow, isoformat_or_none
from sparmatch.utils.geo_utils import coordinates_in_range
import logging

logger = logging.getLogger(__name__)

# Fields a user may set on their own profile. rating, total_ratings and
# verified are derived or admin-owned.
EDITABLE_FIELDS = (
    "discipline",
    "experience_level",
    "weight_class",
    "weight",
    "location",
    "latitude",
    "longitude",
    "bio",
    "availability",
    "is_active",
)

REQUIRED_FIELDS = ("discipline", "experience_level", "location")


def format_profile(profile: FighterProfile, user: Optional[Dict] = None) -> Dict:
    """
    Convert a FighterProfile ORM object into a response dict.

    Args:
        profile: FighterProfile ORM object
        user: Optional user dict to nest under "user"

    Returns:
        Dict matching FighterProfileResponse schema
    """
    data = {
        "id": profile.id,
        "user_id": profile.user_id,
        "discipline": profile.discipline,
        "experience_level": profile.experience_level,
        "weight_class": profile.weight_class,
        "weight": profile.weight,
        "location": profile.location,
        "latitude": profile.latitude,
        "longitude": profile.longitude,
        "bio": profile.bio,
        "availability": profile.availability,
        "rating": profile.rating,
        "total_ratings": profile.total_ratings,
        "is_active": profile.is_active,
        "verified": profile.verified,
        "created_at": isoformat_or_none(profile.created_at),
        "updated_at": isoformat_or_none(profile.updated_at),
    }
    if user is not None:
        data["user"] = user
    return data


async def _get_profile_row(session: AsyncSession, user_id: int) -> Optional[FighterProfile]:
    result = await session.execute(
        select(FighterProfile).where(FighterProfile.user_id == user_id)
    )
    return result.scalar_one_or_none()


async def get_profile(session: AsyncSession, user_id: int) -> Optional[Dict]:
    """
    Get the fighter profile belonging to a user.

    Args:
        session: Database session
        user_id: Owner user ID

    Returns:
        Profile dict or None if the user has no profile
    """
    profile = await _get_profile_row(session, user_id)
    return format_profile(profile) if profile else None


def _validate_profile_fields(fields: Dict) -> None:
    """Validate enum values and coordinates in a (partial) profile payload."""
    if "discipline" in fields and fields["discipline"] not in [d.value for d in Discipline]:
        raise ValidationError(f"Invalid discipline: {fields['discipline']}")
    if "experience_level" in fields and fields["experience_level"] not in [
        e.value for e in ExperienceLevel
    ]:
        raise ValidationError(f"Invalid experience level: {fields['experience_level']}")
    if "location" in fields and not (fields["location"] or "").strip():
        raise ValidationError("Location is required")
    if fields.get("weight") is not None and fields["weight"] <= 0:
        raise ValidationError("Weight must be positive")

    has_lat = fields.get("latitude") is not None
    has_lng = fields.get("longitude") is not None
    if has_lat != has_lng:
        raise ValidationError("Latitude and longitude must be provided together")
    if has_lat and not coordinates_in_range(fields["latitude"], fields["longitude"]):
        raise ValidationError("Coordinates are out of range")


async def upsert_profile(session: AsyncSession, user_id: int, data: Dict) -> Dict:
    """
    Create or update the fighter profile for a user.

    Only editable fields are applied; anything else in ``data`` is ignored.
    When the location is new and no coordinates are supplied, the location
    is geocoded (best effort).

    Args:
        session: Database session
        user_id: Owner user ID (the authenticated caller)
        data: Profile fields

    Returns:
        Profile dict

    Raises:
        NotFoundError: If the user does not exist
        ValidationError: If a field is invalid or a required field is missing on create
    """
    fields = {key: data[key] for key in EDITABLE_FIELDS if key in data}
    # is_active is non-nullable; an explicit null means "leave as is"
    if fields.get("is_active") is None:
        fields.pop("is_active", None)
    _validate_profile_fields(fields)

    if not await user_service.user_exists(session, user_id):
        raise NotFoundError("User not found")

    profile = await _get_profile_row(session, user_id)
    if profile is None:
        missing = [name for name in REQUIRED_FIELDS if not fields.get(name)]
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    coordinates_given = fields.get("latitude") is not None
    location_changed = "location" in fields and (
        profile is None or fields["location"] != profile.location
    )
    if location_changed and not coordinates_given:
        lat, lng = await geocoding_service.geocode_location(fields["location"])
        fields["latitude"], fields["longitude"] = lat, lng

    if profile is None:
        profile = FighterProfile(user_id=user_id, **fields)
        session.add(profile)
        await session.flush()
        await session.refresh(profile)
        logger.info("Created fighter profile %s for user %s", profile.id, user_id)
    else:
        for key, value in fields.items():
            setattr(profile, key, value)
        profile.updated_at = utcnow()
        await session.flush()
        logger.info("Updated fighter profile %s for user %s", profile.id, user_id)

    return format_profile(profile)


async def _share_accepted_connection(session: AsyncSession, user_a: int, user_b: int) -> bool:
    result = await session.execute(
        select(Connection.id).where(
            and_(
                Connection.status == ConnectionStatus.ACCEPTED.value,
                or_(
                    and_(Connection.requester_id == user_a, Connection.receiver_id == user_b),
                    and_(Connection.requester_id == user_b, Connection.receiver_id == user_a),
                ),
            )
        )
    )
    return result.first() is not None


async def record_rating(
    session: AsyncSession, rater_id: int, subject_user_id: int, score: int
) -> Dict:
    """
    Record a rating for another fighter.

    The stored rating is the running mean of all scores, rounded to two
    decimals and kept inside [0, 5]. total_ratings only ever increases.

    Args:
        session: Database session
        rater_id: User giving the rating
        subject_user_id: User whose profile is rated
        score: Whole-number score from 1 to 5

    Returns:
        Updated profile dict

    Raises:
        ValidationError: If the score is out of range or the rater rates themselves
        ForbiddenError: If the two users have no accepted connection
        NotFoundError: If the subject has no fighter profile
    """
    if not MIN_RATING_SCORE <= score <= MAX_RATING_SCORE:
        raise ValidationError(
            f"Score must be between {MIN_RATING_SCORE} and {MAX_RATING_SCORE}"
        )
    if rater_id == subject_user_id:
        raise ValidationError("Cannot rate yourself")

    profile = await _get_profile_row(session, subject_user_id)
    if profile is None:
        raise NotFoundError("Fighter profile not found")

    if not await _share_accepted_connection(session, rater_id, subject_user_id):
        raise ForbiddenError("You can only rate fighters you are connected with")

    total = profile.total_ratings or 0
    current = profile.rating or 0.0
    new_rating = (current * total + score) / (total + 1)
    profile.rating = round(min(MAX_RATING, max(MIN_RATING, new_rating)), 2)
    profile.total_ratings = total + 1
    profile.updated_at = utcnow()
    await session.flush()

    return format_profile(profile)
