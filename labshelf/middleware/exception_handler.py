"""Exception handlers producing structured error responses."""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from ..exceptions import DatabaseError, ShelfException

logger = logging.getLogger(__name__)


async def shelf_exception_handler(request: Request, exc: ShelfException) -> JSONResponse:
    """Log the error with request context and return ``exc.to_dict()``.

    Client errors (4xx) are logged at WARNING, server-side failures at ERROR.
    """
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        f"ShelfException: {exc.error_code.value}",
        extra={
            "error_code": exc.error_code.value,
            "path": request.url.path,
            "method": request.method,
            "details": exc.details,
            "status_code": exc.status_code
        }
    )

    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


async def sqlalchemy_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Database errors that escaped the repositories become DATABASE_ERROR responses."""
    return await shelf_exception_handler(request, DatabaseError("Database operation failed", exc))
