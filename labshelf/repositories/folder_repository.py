"""Repository for folder records."""

from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError

from ..exceptions import DatabaseError, FolderNotFoundError
from ..models import Folder
from .base import BaseRepository


class FolderRepository(BaseRepository[Folder]):
    """Data access layer for folders. Callers commit through ``commit()``."""

    model_class = Folder
    not_found_error = FolderNotFoundError

    def create(self, project_id: str, name: str, created_by: Optional[str] = None) -> Folder:
        folder = Folder(project_id=project_id, name=name, size=0, created_by=created_by)
        self.db.add(folder)
        self.flush("create folder")
        return folder

    def get_in_project(self, project_id: str, folder_id: str) -> Folder:
        """Folder *folder_id* of *project_id*; a folder of another project is not found."""
        folder = self.get_by_id_optional(folder_id)
        if folder is None or folder.project_id != project_id:
            raise FolderNotFoundError(folder_id)
        return folder

    def list_by_project(self, project_id: str) -> List[Folder]:
        try:
            return (
                self.db.query(Folder)
                .filter(Folder.project_id == project_id)
                .order_by(Folder.created_at, Folder.id)
                .all()
            )
        except SQLAlchemyError as e:
            raise DatabaseError(f"Failed to list folders of project {project_id}", e) from e

    def rename(self, folder: Folder, name: str) -> Folder:
        folder.name = name
        self.flush("rename folder")
        return folder

    def delete(self, folder: Folder) -> None:
        self.db.delete(folder)
        self.flush("delete folder")

    def count(self) -> int:
        return self.db.query(Folder).count()
