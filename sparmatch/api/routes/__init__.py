"""
API routes - combined router from all domain modules.

Shared infrastructure (limiter, error mapping) lives here; every sub-router
imports what it needs from this package.
"""

import os

from fastapi import APIRouter, HTTPException
from slowapi import Limiter
from slowapi.util import get_remote_address

from sparmatch.services.errors import SparMatchError

# ---------------------------------------------------------------------------
# Shared rate limiter
# ---------------------------------------------------------------------------
IS_TEST_ENV = os.getenv("ENV", "").lower() == "test"
limiter = Limiter(key_func=get_remote_address, enabled=not IS_TEST_ENV)


# ---------------------------------------------------------------------------
# Shared error mapping
# ---------------------------------------------------------------------------
def to_http_exception(error: SparMatchError) -> HTTPException:
    """Translate a service-layer error into an HTTPException with its status code."""
    return HTTPException(status_code=error.status_code, detail=str(error))


# ---------------------------------------------------------------------------
# Import sub-routers and combine
# ---------------------------------------------------------------------------
from sparmatch.api.routes.partners import router as partners_router  # noqa: E402
from sparmatch.api.routes.profiles import router as profiles_router  # noqa: E402
from sparmatch.api.routes.connections import router as connections_router  # noqa: E402
from sparmatch.api.routes.messages import router as messages_router  # noqa: E402
from sparmatch.api.routes.gyms import router as gyms_router  # noqa: E402
from sparmatch.api.routes.users import router as users_router  # noqa: E402

router = APIRouter()
router.include_router(partners_router)
router.include_router(profiles_router)
router.include_router(connections_router)
router.include_router(messages_router)
router.include_router(gyms_router)
router.include_router(users_router)
