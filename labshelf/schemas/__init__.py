"""Pydantic request/response schemas."""

from .document import DocumentResponse, DownloadResponse
from .folder import CascadeDeleteResponse, FolderCreate, FolderRename, FolderResponse

__all__ = [
    "CascadeDeleteResponse",
    "DocumentResponse",
    "DownloadResponse",
    "FolderCreate",
    "FolderRename",
    "FolderResponse",
]
