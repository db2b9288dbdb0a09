"""Connection request route handlers."""

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from sparmatch.database.db import get_db_session
from sparmatch.services import connection_service
from sparmatch.services.errors import SparMatchError
from sparmatch.api.auth_dependencies import require_user
from sparmatch.api.routes import limiter, to_http_exception
from sparmatch.models.schemas import (
    ConnectionCreate,
    ConnectionResponse,
    ConnectionStatusUpdate,
    ConnectionWithPartiesResponse,
)

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/api/connections", response_model=ConnectionResponse)
@limiter.limit("20/minute")
async def create_connection(
    request: Request,
    payload: ConnectionCreate,
    user: dict = Depends(require_user),
    session: AsyncSession = Depends(get_db_session),
):
    """Send a connection request to another fighter."""
    try:
        return await connection_service.create_connection(
            session, user["id"], payload.receiver_id, message=payload.message
        )
    except SparMatchError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Error creating connection: {e}")
        raise HTTPException(status_code=500, detail="Error creating connection")


@router.get("/api/connections", response_model=List[ConnectionWithPartiesResponse])
async def list_connections(
    user: dict = Depends(require_user),
    session: AsyncSession = Depends(get_db_session),
):
    """Get all of the current user's connections, any status."""
    try:
        return await connection_service.list_connections(session, user["id"])
    except Exception as e:
        logger.error(f"Error fetching connections: {e}")
        raise HTTPException(status_code=500, detail="Error fetching connections")


@router.get("/api/connections/{connection_id}", response_model=ConnectionWithPartiesResponse)
async def get_connection(
    connection_id: int,
    user: dict = Depends(require_user),
    session: AsyncSession = Depends(get_db_session),
):
    """Get a single connection the current user takes part in."""
    try:
        return await connection_service.get_connection(session, connection_id, user["id"])
    except SparMatchError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Error fetching connection: {e}")
        raise HTTPException(status_code=500, detail="Error fetching connection")


@router.patch("/api/connections/{connection_id}", response_model=ConnectionResponse)
async def update_connection_status(
    connection_id: int,
    payload: ConnectionStatusUpdate,
    user: dict = Depends(require_user),
    session: AsyncSession = Depends(get_db_session),
):
    """Accept, decline or block a connection."""
    try:
        return await connection_service.update_status(
            session, connection_id, payload.status, user["id"]
        )
    except SparMatchError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Error updating connection: {e}")
        raise HTTPException(status_code=500, detail="Error updating connection")
