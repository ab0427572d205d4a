import logging

from fastapi import Request
from fastapi.responses import JSONResponse

from .custom import ConflictError, GeocodingError, GlobalStayError

logger = logging.getLogger(__name__)


async def globalstay_error_handler(_request: Request, exc: GlobalStayError) -> JSONResponse:
    if isinstance(exc, ConflictError):
        logger.warning("Conflict (%s): %s", exc.code, exc.message)
    else:
        logger.info("Request rejected (%s): %s", exc.code, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "code": exc.code},
    )


async def geocoding_error_handler(_request: Request, exc: GeocodingError) -> JSONResponse:
    logger.warning("Geocoding error: %s", exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": "There was an error verifying the address.", "code": exc.code},
    )
