"""Main FastAPI application."""

import logging
import re
import time
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from . import __version__
from .api import blobs_router, documents_router, folders_router
from .core.config import ConfigurationError, Environment, settings
from .core.logging_config import setup_logging
from .database import DATABASE_URL, get_db, init_db, is_postgresql
from .exceptions import ShelfException
from .middleware.exception_handler import shelf_exception_handler, sqlalchemy_exception_handler
from .middleware.request_context import RequestContextMiddleware
from .repositories import FileRepository, FolderRepository

setup_logging(log_level=settings.log_level, log_format=settings.log_format)
logger = logging.getLogger(__name__)


def _mask_url(url: str) -> str:
    """Mask password in database URL for safe logging."""
    return re.sub(r'://([^:]+):([^@]+)@', r'://\1:***@', url)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup / shutdown lifecycle for the LabShelf API."""
    logger.info(f"Environment: {settings.environment.value}")
    try:
        settings.validate_production_config()
    except ConfigurationError as e:
        logger.critical(f"STARTUP BLOCKED: {e}")
        raise SystemExit(1) from e

    if settings.environment == Environment.DEVELOPMENT and not settings.auth_enabled:
        logger.warning(
            "SECURITY: Authentication is disabled (AUTH_ENABLED=false). "
            "Uploads and deletions run as the anonymous user."
        )

    try:
        init_db()
    except SQLAlchemyError as e:
        logger.critical(
            "Database initialisation failed.\n"
            f"  DATABASE_URL: {_mask_url(DATABASE_URL)}\n"
            f"  Error: {e}"
        )
        raise SystemExit(1) from e

    logger.info(
        "LabShelf API started | env=%s | db=%s | storage=%s | auth=%s",
        settings.environment.value,
        "PostgreSQL" if is_postgresql() else "SQLite",
        settings.storage_backend.value,
        "enabled" if settings.auth_enabled else "disabled",
    )

    yield


app = FastAPI(
    title="LabShelf API",
    description=(
        "Project folders and file storage for the research portal. "
        "Each folder holds at most 100 MiB of files (10 MiB per file by default); "
        "deleting a folder deletes its files.\n\n"
        "**Authentication:** When `AUTH_ENABLED=true`, write endpoints require a "
        "`Bearer` token in the `Authorization` header."
    ),
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins(),
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["Content-Type", "Authorization"],
)
app.add_middleware(RequestContextMiddleware)

app.add_exception_handler(ShelfException, shelf_exception_handler)
app.add_exception_handler(SQLAlchemyError, sqlalchemy_exception_handler)

app.include_router(folders_router)
app.include_router(documents_router)
app.include_router(blobs_router)


@app.get("/")
def root():
    """Root endpoint."""
    return {
        "name": "LabShelf API",
        "version": __version__,
        "status": "running"
    }


_startup_time = time.monotonic()


@app.get("/health")
def health_check(db: Session = Depends(get_db)):
    """Database status, uptime and record counts. Never raises."""
    db_status = "ok"
    folder_count = 0
    file_count = 0
    try:
        db.execute(text("SELECT 1"))
        folder_count = FolderRepository(db).count()
        file_count = FileRepository(db).count()
    except SQLAlchemyError:
        db_status = "error"

    return {
        "status": "healthy" if db_status == "ok" else "degraded",
        "db": db_status,
        "uptime_seconds": round(time.monotonic() - _startup_time),
        "version": __version__,
        "folder_count": folder_count,
        "file_count": file_count,
    }
