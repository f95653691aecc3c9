"""Repository for folder-file metadata records."""

from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError

from ..exceptions import DatabaseError, DocumentNotFoundError
from ..models import FolderFile
from .base import BaseRepository


class FileRepository(BaseRepository[FolderFile]):
    """Data access layer for file metadata. Callers commit through ``commit()``."""

    model_class = FolderFile
    not_found_error = DocumentNotFoundError

    def create(
        self,
        folder_id: str,
        project_id: str,
        display_name: str,
        storage_file_name: str,
        size: int,
        original_name: Optional[str] = None,
        content_type: Optional[str] = None,
        description: Optional[str] = None,
        uploaded_by: Optional[str] = None,
    ) -> FolderFile:
        record = FolderFile(
            folder_id=folder_id,
            project_id=project_id,
            display_name=display_name,
            original_name=original_name,
            storage_file_name=storage_file_name,
            size=size,
            content_type=content_type,
            description=description,
            uploaded_by=uploaded_by,
        )
        self.db.add(record)
        self.flush("create file record")
        return record

    def get_in_folder(self, folder_id: str, file_id: str) -> FolderFile:
        record = self.get_by_id_optional(file_id)
        if record is None or record.folder_id != folder_id:
            raise DocumentNotFoundError(file_id)
        return record

    def list_by_folder(self, folder_id: str) -> List[FolderFile]:
        try:
            return (
                self.db.query(FolderFile)
                .filter(FolderFile.folder_id == folder_id)
                .order_by(FolderFile.uploaded_at, FolderFile.id)
                .all()
            )
        except SQLAlchemyError as e:
            raise DatabaseError(f"Failed to list files of folder {folder_id}", e) from e

    def delete(self, record: FolderFile) -> None:
        self.db.delete(record)
        self.flush("delete file record")

    def count(self) -> int:
        return self.db.query(FolderFile).count()
