"""Folder schemas."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, computed_field, field_validator

from ..services.size_utils import format_size
from .document import DocumentResponse


class FolderNameMixin(BaseModel):
    name: str

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Folder name cannot be empty")
        return v


class FolderCreate(FolderNameMixin):
    """Request body for creating a folder."""
    pass


class FolderRename(FolderNameMixin):
    """Request body for renaming a folder."""
    pass


class FolderResponse(BaseModel):
    """A folder with its files and derived size figures."""
    id: str
    name: str
    project_id: str
    files: List[DocumentResponse] = []
    size: int = 0
    remaining_space: int
    max_size: int
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @computed_field
    @property
    def size_label(self) -> str:
        return format_size(self.size)

    @computed_field
    @property
    def remaining_label(self) -> str:
        return format_size(self.remaining_space)


class CascadeDeleteResponse(BaseModel):
    """Result of deleting a folder together with its files."""
    folder_id: str
    project_id: str
    deleted_file_ids: List[str]

    @computed_field
    @property
    def deleted_files(self) -> int:
        return len(self.deleted_file_ids)
