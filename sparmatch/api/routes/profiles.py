"""Fighter profile route handlers."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from sparmatch.database.db import get_db_session
from sparmatch.services import profile_service
from sparmatch.services.errors import SparMatchError
from sparmatch.api.auth_dependencies import require_user
from sparmatch.api.routes import to_http_exception
from sparmatch.models.schemas import FighterProfileResponse, ProfileUpsert, RatingCreate

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/api/profile", response_model=Optional[FighterProfileResponse])
async def get_my_profile(
    user: dict = Depends(require_user),
    session: AsyncSession = Depends(get_db_session),
):
    """Get the current user's fighter profile (null if none yet)."""
    try:
        return await profile_service.get_profile(session, user["id"])
    except Exception as e:
        logger.error(f"Error fetching profile: {e}")
        raise HTTPException(status_code=500, detail="Error fetching profile")


@router.post("/api/profile", response_model=FighterProfileResponse)
async def upsert_my_profile(
    payload: ProfileUpsert,
    user: dict = Depends(require_user),
    session: AsyncSession = Depends(get_db_session),
):
    """Create or update the current user's fighter profile."""
    try:
        return await profile_service.upsert_profile(
            session, user["id"], payload.model_dump(exclude_unset=True)
        )
    except SparMatchError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Error saving profile: {e}")
        raise HTTPException(status_code=500, detail="Error saving profile")


@router.post("/api/profiles/{user_id}/ratings", response_model=FighterProfileResponse)
async def rate_fighter(
    user_id: int,
    payload: RatingCreate,
    user: dict = Depends(require_user),
    session: AsyncSession = Depends(get_db_session),
):
    """Rate a fighter you are connected with."""
    try:
        return await profile_service.record_rating(session, user["id"], user_id, payload.score)
    except SparMatchError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Error recording rating: {e}")
        raise HTTPException(status_code=500, detail="Error recording rating")
