"""Maps domain errors raised below the routers onto HTTP responses."""
import logging

from fastapi import Request, status
from fastapi.responses import JSONResponse

from ..features.reports.exceptions import InvalidPeriod, QueryFailure
from .policy import WriteNotAllowed

logger = logging.getLogger(__name__)


async def invalid_period_handler(request: Request, exc: InvalidPeriod) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": str(exc)})


async def query_failure_handler(request: Request, exc: QueryFailure) -> JSONResponse:
    logger.error(f"{request.method} {request.url.path} failed: {exc}")
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "Dashboard report could not be generated, please retry", "subQuery": exc.sub_query},
    )


async def write_not_allowed_handler(request: Request, exc: WriteNotAllowed) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_403_FORBIDDEN, content={"detail": exc.message})


def app_exception_handlers() -> dict:
    return {
        InvalidPeriod: invalid_period_handler,
        QueryFailure: query_failure_handler,
        WriteNotAllowed: write_not_allowed_handler,
    }
