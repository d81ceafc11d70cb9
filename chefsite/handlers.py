"""Map data layer errors raised by writes to HTTP responses."""

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError

from .errors import ConnectivityError, NothingToUpdateError
from .logs import get_logger

logger = get_logger(__name__)


async def nothing_to_update_handler(request: Request, exc: NothingToUpdateError) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": str(exc)})


async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    """Duplicate slugs and emails are reported as conflicts."""
    logger.info("write_conflict", path=request.url.path, error=str(exc.orig))
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={"detail": "Conflicts with an existing record"},
    )


async def connectivity_error_handler(request: Request, exc: ConnectivityError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": str(exc), "operation": exc.operation},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(NothingToUpdateError, nothing_to_update_handler)
    app.add_exception_handler(IntegrityError, integrity_error_handler)
    app.add_exception_handler(ConnectivityError, connectivity_error_handler)
