"""Gym directory route handlers."""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from sparmatch.database.db import get_db_session
from sparmatch.services import gym_service
from sparmatch.services.errors import SparMatchError
from sparmatch.api.auth_dependencies import require_user
from sparmatch.api.routes import to_http_exception
from sparmatch.models.schemas import GymCreate, GymResponse

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/api/gyms", response_model=List[GymResponse])
async def list_gyms(
    latitude: Optional[float] = Query(None),
    longitude: Optional[float] = Query(None),
    radius: Optional[float] = Query(None, description="Radius in miles (default 25)"),
    session: AsyncSession = Depends(get_db_session),
):
    """List gyms by rating, optionally within a radius of a point."""
    try:
        return await gym_service.list_gyms(session, latitude, longitude, radius)
    except SparMatchError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Error fetching gyms: {e}")
        raise HTTPException(status_code=500, detail="Error fetching gyms")


@router.post("/api/gyms", response_model=GymResponse)
async def create_gym(
    payload: GymCreate,
    user: dict = Depends(require_user),
    session: AsyncSession = Depends(get_db_session),
):
    """Add a gym to the directory."""
    try:
        return await gym_service.create_gym(session, payload.model_dump())
    except SparMatchError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Error creating gym: {e}")
        raise HTTPException(status_code=500, detail="Error creating gym")
