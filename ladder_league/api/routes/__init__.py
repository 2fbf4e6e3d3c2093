"""
API routes - combined router from all domain modules.

Shared infrastructure (error mapping) lives here; every sub-router imports
what it needs from this package.
"""

import logging

from fastapi import APIRouter, HTTPException

from ladder_league.services.errors import NotFoundError, PreconditionFailedError

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Shared error mapping
# ---------------------------------------------------------------------------
def to_http_exception(error: Exception, action: str) -> HTTPException:
    """
    Map a service error to an HTTPException.

    NotFoundError -> 404, PreconditionFailedError -> 409, other ValueError -> 400,
    anything else -> 500.
    """
    if isinstance(error, HTTPException):
        return error
    if isinstance(error, NotFoundError):
        return HTTPException(status_code=404, detail=str(error))
    if isinstance(error, PreconditionFailedError):
        if error.incomplete_count:
            return HTTPException(
                status_code=409,
                detail={"message": str(error), "incomplete_count": error.incomplete_count},
            )
        return HTTPException(status_code=409, detail=str(error))
    if isinstance(error, ValueError):
        return HTTPException(status_code=400, detail=str(error))
    logger.error(f"Error {action}: {error}", exc_info=True)
    return HTTPException(status_code=500, detail=f"Error {action}: {str(error)}")


# ---------------------------------------------------------------------------
# Import sub-routers and combine
# ---------------------------------------------------------------------------
from ladder_league.api.routes.game_days import router as game_days_router  # noqa: E402
from ladder_league.api.routes.standings import router as standings_router  # noqa: E402
from ladder_league.api.routes.calc import router as calc_router  # noqa: E402

router = APIRouter()
router.include_router(game_days_router)
router.include_router(standings_router)
router.include_router(calc_router)
