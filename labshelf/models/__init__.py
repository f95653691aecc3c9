"""Database models."""

from .folder import Folder, FolderFile

__all__ = ["Folder", "FolderFile"]
