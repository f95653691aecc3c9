"""API routes."""

from .blobs import router as blobs_router
from .documents import router as documents_router
from .folders import router as folders_router

__all__ = [
    "blobs_router",
    "documents_router",
    "folders_router",
]
