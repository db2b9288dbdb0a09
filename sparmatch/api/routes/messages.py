"""Direct message route handlers."""

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from sparmatch.database.db import get_db_session
from sparmatch.services import message_service
from sparmatch.services.errors import SparMatchError
from sparmatch.api.auth_dependencies import require_user
from sparmatch.api.routes import limiter, to_http_exception
from sparmatch.models.schemas import MarkReadResponse, MessageCreate, MessageResponse

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/api/connections/{connection_id}/messages", response_model=List[MessageResponse])
async def list_messages(
    connection_id: int,
    user: dict = Depends(require_user),
    session: AsyncSession = Depends(get_db_session),
):
    """Get a connection's messages, oldest first."""
    try:
        return await message_service.list_messages(session, connection_id, user["id"])
    except SparMatchError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Error fetching messages: {e}")
        raise HTTPException(status_code=500, detail="Error fetching messages")


@router.post("/api/connections/{connection_id}/messages", response_model=MessageResponse)
@limiter.limit("60/minute")
async def send_message(
    request: Request,
    connection_id: int,
    payload: MessageCreate,
    user: dict = Depends(require_user),
    session: AsyncSession = Depends(get_db_session),
):
    """Send a message on an accepted connection."""
    try:
        return await message_service.send_message(
            session, connection_id, user["id"], payload.content
        )
    except SparMatchError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Error sending message: {e}")
        raise HTTPException(status_code=500, detail="Error sending message")


@router.post("/api/connections/{connection_id}/messages/read", response_model=MarkReadResponse)
async def mark_messages_read(
    connection_id: int,
    user: dict = Depends(require_user),
    session: AsyncSession = Depends(get_db_session),
):
    """Mark the other party's messages on a connection as read."""
    try:
        updated = await message_service.mark_messages_read(session, connection_id, user["id"])
        return {"updated": updated}
    except SparMatchError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Error marking messages read: {e}")
        raise HTTPException(status_code=500, detail="Error marking messages read")
