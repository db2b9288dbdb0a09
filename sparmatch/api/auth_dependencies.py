"""
Authentication dependencies for FastAPI routes.

Sign-in is handled by the upstream auth provider, which forwards the
resolved user id in a trusted header. These dependencies only turn that id
into a user record; every route then passes the id explicitly to the
service layer.
"""

import os
from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession
from sparmatch.services import user_service
from sparmatch.database.db import get_db_session

AUTH_USER_HEADER = os.getenv("AUTH_USER_HEADER", "X-User-Id")


def _read_user_id(request: Request) -> int:
    raw = request.headers.get(AUTH_USER_HEADER)
    if not raw:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
        )
    try:
        return int(raw)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authenticated identity",
        )


async def get_current_user(
    request: Request,
    session: AsyncSession = Depends(get_db_session),
) -> dict:
    """
    Dependency to get the current authenticated user.

    Args:
        request: Incoming request carrying the identity header
        session: Database session

    Returns:
        User dictionary

    Raises:
        HTTPException: If the identity header is missing/invalid or the user does not exist
    """
    user_id = _read_user_id(request)

    user = await user_service.get_user_by_id(session, user_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
        )

    return user


async def require_user(user: dict = Depends(get_current_user)) -> dict:
    """Require any authenticated user."""
    return user
