"""Exception handlers that render domain errors consistently.

Usage:
    from libs.common.error_handler import add_exception_handlers

    app = FastAPI()
    add_exception_handlers(app)
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from libs.common.errors import GymDeskError
from libs.common.logging import get_logger

logger = get_logger(__name__)


async def gymdesk_error_handler(request: Request, exc: GymDeskError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s on %s: %s", exc.code, request.url.path, exc.message)
    else:
        logger.info("%s on %s: %s", exc.code, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "code": exc.code},
    )


def add_exception_handlers(app: FastAPI) -> None:
    """Register domain error handlers on ``app``."""
    app.add_exception_handler(GymDeskError, gymdesk_error_handler)
