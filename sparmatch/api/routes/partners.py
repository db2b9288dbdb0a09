"""Partner search route handlers."""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from sparmatch.database.db import get_db_session
from sparmatch.services import search_service
from sparmatch.services.errors import SparMatchError
from sparmatch.api.routes import to_http_exception
from sparmatch.models.schemas import FighterProfileResponse

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/api/partners", response_model=List[FighterProfileResponse])
async def search_partners(
    discipline: Optional[str] = Query(None),
    experience_level: Optional[str] = Query(None, alias="experienceLevel"),
    location: Optional[str] = Query(None),
    latitude: Optional[float] = Query(None),
    longitude: Optional[float] = Query(None),
    radius: Optional[float] = Query(None, description="Radius in miles (default 25)"),
    limit: Optional[int] = Query(None, ge=1, le=200),
    offset: int = Query(0, ge=0),
    session: AsyncSession = Depends(get_db_session),
):
    """Search active fighter profiles, highest rated first."""
    try:
        filters = search_service.build_search_filters(
            discipline=discipline,
            experience_level=experience_level,
            location=location,
            latitude=latitude,
            longitude=longitude,
            radius=radius,
        )
        return await search_service.search_profiles(session, filters, limit=limit, offset=offset)
    except SparMatchError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Error searching partners: {e}")
        raise HTTPException(status_code=500, detail="Error searching partners")
