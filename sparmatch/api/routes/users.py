"""User route handlers."""

from fastapi import APIRouter, Depends

from sparmatch.api.auth_dependencies import require_user
from sparmatch.models.schemas import UserResponse

router = APIRouter()


@router.get("/api/auth/user", response_model=UserResponse)
async def get_authenticated_user(user: dict = Depends(require_user)):
    """Get the current authenticated user."""
    return user


@router.get("/api/health")
async def health_check():
    """Liveness probe."""
    return {"status": "ok"}
