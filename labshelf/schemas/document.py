"""File (document) schemas."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, computed_field

from ..services.size_utils import format_size


class DocumentResponse(BaseModel):
    """One file of a folder, as held in client snapshots.

    ``size`` is always bytes; ``size_label`` is the presentation form.
    """
    id: str
    folder_id: str
    project_id: str
    display_name: str
    original_name: Optional[str] = None
    storage_file_name: str
    size: int
    content_type: Optional[str] = None
    description: Optional[str] = None
    download_url: Optional[str] = None
    uploaded_by: Optional[str] = None
    uploaded_at: Optional[datetime] = None
    last_modified: Optional[datetime] = None

    @computed_field
    @property
    def document_id(self) -> str:
        return self.id

    @computed_field
    @property
    def name(self) -> str:
        return self.display_name

    @computed_field
    @property
    def size_label(self) -> str:
        return format_size(self.size)

    class Config:
        from_attributes = True


class DownloadResponse(BaseModel):
    """Resolved download location of a file."""
    file_id: Optional[str] = None
    url: str
