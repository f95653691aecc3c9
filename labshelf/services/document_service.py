"""Document service -- deep module for the file lifecycle inside a folder.

Owns upload, re-upload, deletion and download resolution. Each public method
keeps the metadata record, the blob and the owning folder's ``size`` in step:
a failed upload leaves neither a record nor a blob behind, and a deleted
record is removed even when its blob is already gone.
"""

import logging
from dataclasses import dataclass
from pathlib import PurePath
from typing import List, Optional

from sqlalchemy.orm import Session

from ..exceptions import DocumentNotFoundError, ShelfException, StorageError, ValidationError
from ..models import Folder, FolderFile
from ..repositories import FileRepository, FolderRepository
from ..storage import (
    BlobNotFoundError,
    BlobStore,
    BlobStoreError,
    generate_storage_file_name,
    object_key,
)
from .capacity import CapacityPolicy
from .size_utils import calculate_folder_size, format_size

DEFAULT_DESCRIPTION = "No description provided"

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IncomingFile:
    """An uploaded binary before it is stored."""
    filename: str
    data: bytes
    content_type: str = "application/octet-stream"

    @property
    def size(self) -> int:
        return len(self.data)


def final_display_name(display_name: str, original_name: str) -> str:
    """Trimmed display name, with the uploaded file's extension appended if missing."""
    name = display_name.strip()
    extension = PurePath(original_name or "").suffix
    if extension and not name.lower().endswith(extension.lower()):
        name = f"{name}{extension}"
    return name


def _strip_extension(display_name: str, original_name: Optional[str]) -> str:
    """*display_name* without the extension it took from *original_name*."""
    extension = PurePath(original_name or "").suffix
    if extension and display_name.lower().endswith(extension.lower()):
        return display_name[: -len(extension)]
    return display_name


class DocumentService:
    """File operations scoped to a project folder.

    Public methods:
        list_documents      -- files of a folder in upload order
        get_document        -- one file, NotFound across folders/projects
        upload_document     -- capacity check, blob + record, URL resolution
        replace_document    -- same id, new binary and metadata
        delete_document     -- record first, then blob (blob failures tolerated)
        resolve_download_url
        refresh_folder_size -- recompute folder.size from its file list
    """

    def __init__(self, db: Session, blob_store: BlobStore, policy: Optional[CapacityPolicy] = None):
        self.db = db
        self.blob_store = blob_store
        self.policy = policy or CapacityPolicy.from_settings()
        self.folder_repo = FolderRepository(db)
        self.file_repo = FileRepository(db)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def list_documents(self, project_id: str, folder_id: str) -> List[FolderFile]:
        folder = self.folder_repo.get_in_project(project_id, folder_id)
        return self.file_repo.list_by_folder(folder.id)

    def get_document(self, project_id: str, folder_id: str, file_id: str) -> FolderFile:
        folder = self.folder_repo.get_in_project(project_id, folder_id)
        return self.file_repo.get_in_folder(folder.id, file_id)

    def resolve_download_url(self, project_id: str, folder_id: str, storage_file_name: str) -> str:
        """Ask the blob store for a fresh URL of the object behind a file."""
        key = object_key(project_id, folder_id, storage_file_name)
        try:
            return self.blob_store.resolve_url(key)
        except BlobNotFoundError as e:
            raise DocumentNotFoundError(storage_file_name) from e
        except BlobStoreError as e:
            raise StorageError("Failed to resolve download URL", e) from e

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def upload_document(
        self,
        project_id: str,
        folder_id: str,
        incoming: IncomingFile,
        display_name: str,
        description: Optional[str] = None,
        uploaded_by: Optional[str] = None,
    ) -> FolderFile:
        """Store *incoming* in the folder and return the persisted record.

        Both capacity limits are checked before the blob store is touched.
        """
        if incoming is None:
            raise ValidationError("No file provided", field="file")
        if not display_name or not display_name.strip():
            raise ValidationError("A display name is required", field="display_name")

        folder = self.folder_repo.get_in_project(project_id, folder_id)
        existing = self.file_repo.list_by_folder(folder.id)
        self.policy.check_upload(existing, incoming.size)

        storage_file_name = generate_storage_file_name(incoming.filename)
        key = object_key(project_id, folder.id, storage_file_name)
        self._put_blob(key, incoming)

        try:
            record = self.file_repo.create(
                folder_id=folder.id,
                project_id=project_id,
                display_name=final_display_name(display_name, incoming.filename),
                original_name=incoming.filename,
                storage_file_name=storage_file_name,
                size=incoming.size,
                content_type=incoming.content_type,
                description=description or DEFAULT_DESCRIPTION,
                uploaded_by=uploaded_by,
            )
            # Reload from the database; its storage name addresses the blob.
            stored = self.file_repo.refresh(record)
            stored.download_url = self.resolve_download_url(
                project_id, folder.id, stored.storage_file_name
            )
            self.refresh_folder_size(folder)
            self.file_repo.commit("upload file")
        except ShelfException:
            self.db.rollback()
            self._discard_blob(key)
            raise

        logger.info(
            f"Uploaded {stored.display_name} ({format_size(stored.size)})",
            extra={"project_id": project_id, "folder_id": folder.id, "file_id": stored.id},
        )
        return stored

    def replace_document(
        self,
        project_id: str,
        folder_id: str,
        file_id: str,
        incoming: IncomingFile,
        display_name: Optional[str] = None,
        description: Optional[str] = None,
        uploaded_by: Optional[str] = None,
    ) -> FolderFile:
        """Re-upload: keep the record id, swap binary and metadata."""
        if incoming is None:
            raise ValidationError("No file provided", field="file")

        folder = self.folder_repo.get_in_project(project_id, folder_id)
        record = self.file_repo.get_in_folder(folder.id, file_id)
        existing = self.file_repo.list_by_folder(folder.id)
        self.policy.check_upload(existing, incoming.size, replacing_size=record.size)

        old_key = object_key(project_id, folder.id, record.storage_file_name)
        storage_file_name = generate_storage_file_name(incoming.filename)
        new_key = object_key(project_id, folder.id, storage_file_name)
        self._put_blob(new_key, incoming)

        if not display_name or not display_name.strip():
            # Keep the current name, with the new upload's extension.
            display_name = _strip_extension(record.display_name, record.original_name)

        try:
            record.display_name = final_display_name(display_name, incoming.filename)
            record.storage_file_name = storage_file_name
            record.original_name = incoming.filename
            record.size = incoming.size
            record.content_type = incoming.content_type
            if description:
                record.description = description
            record.uploaded_by = uploaded_by or record.uploaded_by
            # uploaded_at is kept so the file holds its place in the folder.
            self.file_repo.flush("replace file record")
            record.download_url = self.resolve_download_url(project_id, folder.id, storage_file_name)
            self.refresh_folder_size(folder)
            self.file_repo.commit("re-upload file")
        except ShelfException:
            self.db.rollback()
            self._discard_blob(new_key)
            raise

        self._discard_blob(old_key)
        logger.info(
            f"Replaced {record.display_name}",
            extra={"project_id": project_id, "folder_id": folder.id, "file_id": record.id},
        )
        return record

    def delete_document(self, project_id: str, folder_id: str, file_id: str) -> None:
        """Delete a file. Only the metadata deletion has to succeed."""
        folder = self.folder_repo.get_in_project(project_id, folder_id)
        record = self.file_repo.get_in_folder(folder.id, file_id)
        key = object_key(project_id, folder.id, record.storage_file_name)

        self.file_repo.delete(record)
        self.refresh_folder_size(folder)
        self.file_repo.commit("delete file")

        self._discard_blob(key)
        logger.info(
            "Deleted file",
            extra={"project_id": project_id, "folder_id": folder.id, "file_id": file_id},
        )

    def refresh_folder_size(self, folder: Folder) -> int:
        """Recompute ``folder.size`` from the full file list (no incremental counters)."""
        files = self.file_repo.list_by_folder(folder.id)
        folder.size = int(calculate_folder_size(files))
        return folder.size

    # ------------------------------------------------------------------
    # Blob helpers
    # ------------------------------------------------------------------

    def _put_blob(self, key: str, incoming: IncomingFile) -> None:
        try:
            self.blob_store.put(key, incoming.data, incoming.content_type)
        except BlobStoreError as e:
            raise StorageError("Failed to store file", e) from e

    def _discard_blob(self, key: str) -> None:
        """Best-effort blob removal; the metadata side is already settled."""
        try:
            self.blob_store.delete(key)
        except BlobNotFoundError:
            logger.info("Blob already absent", extra={"key": key})
        except BlobStoreError as e:
            logger.warning(f"Blob delete failed, continuing: {e}", extra={"key": key})
