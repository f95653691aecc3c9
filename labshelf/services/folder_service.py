"""Deep module for folder operations: create, list, rename and cascade delete.

Callers never touch file records or blobs when removing a folder; the
cascade goes through DocumentService so every file loses both its metadata
record and its binary before the folder record itself is deleted.
"""

import logging
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from ..exceptions import CascadeIncompleteError, ShelfException, ValidationError
from ..models import Folder
from ..schemas.document import DocumentResponse
from ..schemas.folder import FolderResponse
from ..storage import BlobStore
from .capacity import CapacityPolicy
from .document_service import DocumentService
from .size_utils import calculate_folder_size

logger = logging.getLogger(__name__)


def _require_name(name: Optional[str], field: str = "name") -> str:
    if not name or not name.strip():
        raise ValidationError("Folder name is required", field=field)
    return name.strip()


class FolderService:
    """All folder operations behind a simple interface.

    Public methods:
        create_folder  -- empty folder, size 0
        get_folder     -- lookup scoped to a project
        list_folders   -- folders of a project in creation order
        rename_folder  -- name only; files and size untouched
        delete_folder  -- cascade: every file, then the folder record
        snapshot       -- FolderResponse with derived size figures
    """

    def __init__(self, db: Session, blob_store: BlobStore, policy: Optional[CapacityPolicy] = None):
        self.db = db
        self.policy = policy or CapacityPolicy.from_settings()
        self.document_service = DocumentService(db, blob_store, self.policy)
        self.folder_repo = self.document_service.folder_repo
        self.file_repo = self.document_service.file_repo

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def create_folder(self, project_id: str, name: str, created_by: Optional[str] = None) -> Folder:
        if not project_id:
            raise ValidationError("Project ID is required", field="project_id")
        name = _require_name(name)

        folder = self.folder_repo.create(project_id, name, created_by=created_by)
        self.folder_repo.commit("create folder")
        logger.info(f"Created folder '{name}'", extra={"project_id": project_id, "folder_id": folder.id})
        return folder

    def get_folder(self, project_id: str, folder_id: str) -> Folder:
        return self.folder_repo.get_in_project(project_id, folder_id)

    def list_folders(self, project_id: str) -> List[Folder]:
        if not project_id:
            raise ValidationError("Project ID is required", field="project_id")
        return self.folder_repo.list_by_project(project_id)

    def rename_folder(self, project_id: str, folder_id: str, new_name: str) -> Folder:
        new_name = _require_name(new_name)
        folder = self.folder_repo.get_in_project(project_id, folder_id)
        self.folder_repo.rename(folder, new_name)
        self.folder_repo.commit("update folder name")
        return folder

    def delete_folder(self, project_id: str, folder_id: str) -> List[str]:
        """Delete every file of the folder, then the folder. Returns deleted file ids.

        All files are attempted even when some fail. The folder record is only
        removed once none are left; otherwise ``CascadeIncompleteError`` reports
        which files went and which stayed.
        """
        folder = self.folder_repo.get_in_project(project_id, folder_id)
        file_ids = [record.id for record in self.file_repo.list_by_folder(folder.id)]

        deleted: List[str] = []
        failures: Dict[str, str] = {}
        for file_id in file_ids:
            try:
                self.document_service.delete_document(project_id, folder_id, file_id)
                deleted.append(file_id)
            except ShelfException as e:
                failures[file_id] = e.message
                logger.warning(
                    f"Cascade delete could not remove file: {e.message}",
                    extra={"folder_id": folder_id, "file_id": file_id},
                )

        if failures:
            raise CascadeIncompleteError(folder_id, deleted, failures)

        folder = self.folder_repo.get_in_project(project_id, folder_id)
        self.folder_repo.delete(folder)
        self.folder_repo.commit("delete folder")
        logger.info(
            f"Deleted folder with {len(deleted)} files",
            extra={"project_id": project_id, "folder_id": folder_id},
        )
        return deleted

    def snapshot(self, folder: Folder) -> FolderResponse:
        """Client-facing view of *folder*; size is re-summed from its files."""
        files = [DocumentResponse.model_validate(record) for record in self.file_repo.list_by_folder(folder.id)]
        size = int(calculate_folder_size(files))
        return FolderResponse(
            id=folder.id,
            name=folder.name,
            project_id=folder.project_id,
            files=files,
            size=size,
            remaining_space=self.policy.max_folder_size - size,
            max_size=self.policy.max_folder_size,
            created_by=folder.created_by,
            created_at=folder.created_at,
            updated_at=folder.updated_at,
        )

    def list_snapshots(self, project_id: str) -> List[FolderResponse]:
        return [self.snapshot(folder) for folder in self.list_folders(project_id)]
