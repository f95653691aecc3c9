"""Data access repositories."""

from .base import BaseRepository
from .file_repository import FileRepository
from .folder_repository import FolderRepository

__all__ = [
    "BaseRepository",
    "FileRepository",
    "FolderRepository",
]
