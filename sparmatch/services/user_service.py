"""
User service layer for user lookups and upserts.

Authentication lives upstream; this module only stores the identities the
auth provider hands us.
"""

from typing import Dict, Iterable, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sparmatch.database.models import User
from sparmatch.utils.datetime_utils import utcnow, isoformat_or_none
import logging

logger = logging.getLogger(__name__)


def format_user(user: User) -> Dict:
    """
    Convert a User ORM object into a response dict.

    Args:
        user: User ORM object

    Returns:
        Dict matching UserResponse schema
    """
    return {
        "id": user.id,
        "email": user.email,
        "first_name": user.first_name,
        "last_name": user.last_name,
        "profile_image_url": user.profile_image_url,
        "created_at": isoformat_or_none(user.created_at),
    }


async def get_user_by_id(session: AsyncSession, user_id: int) -> Optional[Dict]:
    """
    Get user by ID.

    Args:
        session: Database session
        user_id: User ID

    Returns:
        User dict or None if not found
    """
    result = await session.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    return format_user(user) if user else None


async def user_exists(session: AsyncSession, user_id: int) -> bool:
    """Check whether a user row exists."""
    result = await session.execute(select(User.id).where(User.id == user_id))
    return result.scalar_one_or_none() is not None


async def get_users_by_ids(session: AsyncSession, user_ids: Iterable[int]) -> Dict[int, Dict]:
    """
    Batch-fetch users, keyed by id.

    Args:
        session: Database session
        user_ids: User IDs to load

    Returns:
        Dict of user_id -> user dict (missing ids are omitted)
    """
    ids = list(set(user_ids))
    if not ids:
        return {}
    result = await session.execute(select(User).where(User.id.in_(ids)))
    return {user.id: format_user(user) for user in result.scalars().all()}


async def upsert_user(
    session: AsyncSession,
    email: str,
    first_name: Optional[str] = None,
    last_name: Optional[str] = None,
    profile_image_url: Optional[str] = None,
) -> Dict:
    """
    Create a user or update the existing one with the same email.

    Called by the auth provider integration when a user signs in, and by
    the seed script.

    Args:
        session: Database session
        email: User email (natural key)
        first_name: Optional first name
        last_name: Optional last name
        profile_image_url: Optional avatar URL

    Returns:
        User dict
    """
    result = await session.execute(select(User).where(User.email == email))
    user = result.scalar_one_or_none()

    if user is None:
        user = User(
            email=email,
            first_name=first_name,
            last_name=last_name,
            profile_image_url=profile_image_url,
        )
        session.add(user)
        await session.flush()
        await session.refresh(user)
        logger.info("Created user %s", user.id)
    else:
        user.first_name = first_name
        user.last_name = last_name
        user.profile_image_url = profile_image_url
        user.updated_at = utcnow()
        await session.flush()

    return format_user(user)
