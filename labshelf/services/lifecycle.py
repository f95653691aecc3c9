"""Document lifecycle operations over a caller-held folder snapshot.

A caller (a UI event handler, a script) keeps a list of ``FolderResponse``
objects. Each operation validates its inputs, applies the capacity policy,
performs the remote mutation through the services, and returns an
``OperationResult`` with the *new* snapshot. The caller's list is never
mutated, and on any failure the result carries the input snapshot unchanged,
so applying a result is always safe.

Folder deletion is two-phase and tracked by ``FolderDeletionFlow``.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, List, Optional, Sequence

from sqlalchemy.orm import Session

from ..exceptions import (
    CapacityExceededError,
    CascadeIncompleteError,
    ErrorCode,
    ShelfException,
)
from ..schemas.document import DocumentResponse
from ..schemas.folder import FolderResponse
from ..storage import BlobStore
from .capacity import CapacityPolicy
from .document_service import IncomingFile
from .folder_service import FolderService
from .size_utils import calculate_folder_size

logger = logging.getLogger(__name__)


class OperationStatus(str, Enum):
    SUCCESS = "success"
    VALIDATION_ERROR = "validation_error"
    CAPACITY_EXCEEDED = "capacity_exceeded"
    NOT_FOUND = "not_found"
    REMOTE_ERROR = "remote_error"


_STATUS_BY_CODE = {
    ErrorCode.VALIDATION_ERROR: OperationStatus.VALIDATION_ERROR,
    ErrorCode.CAPACITY_EXCEEDED: OperationStatus.CAPACITY_EXCEEDED,
    ErrorCode.FOLDER_NOT_FOUND: OperationStatus.NOT_FOUND,
    ErrorCode.DOCUMENT_NOT_FOUND: OperationStatus.NOT_FOUND,
}


@dataclass(frozen=True)
class OperationResult:
    """Outcome of one lifecycle operation.

    ``folders`` is the snapshot to adopt, ``message`` the status line to show,
    ``payload`` the operation-specific value (created folder, uploaded file,
    download URL, ...).
    """
    status: OperationStatus
    folders: List[FolderResponse]
    message: str
    payload: Any = None
    error_code: Optional[str] = None
    details: dict = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status == OperationStatus.SUCCESS

    @property
    def error(self) -> bool:
        return not self.ok


def _success(folders: List[FolderResponse], message: str, payload: Any = None) -> OperationResult:
    return OperationResult(OperationStatus.SUCCESS, folders, message, payload)


def _invalid(folders: Sequence[FolderResponse], message: str) -> OperationResult:
    return OperationResult(
        OperationStatus.VALIDATION_ERROR, list(folders), message,
        error_code=ErrorCode.VALIDATION_ERROR.value,
    )


def _failure(folders: Sequence[FolderResponse], action: str, exc: ShelfException) -> OperationResult:
    status = _STATUS_BY_CODE.get(exc.error_code, OperationStatus.REMOTE_ERROR)
    # Capacity and validation messages are shown as-is; remote failures get the prefix.
    if status in (OperationStatus.CAPACITY_EXCEEDED, OperationStatus.VALIDATION_ERROR):
        message = exc.message
    else:
        message = f"Failed to {action}: {exc.message}"
    return OperationResult(
        status, list(folders), message,
        error_code=exc.error_code.value, details=exc.details,
    )


def with_files(folder: FolderResponse, files: List[DocumentResponse]) -> FolderResponse:
    """Copy of *folder* holding *files*, with size and remaining space re-summed."""
    size = int(calculate_folder_size(files))
    return folder.model_copy(update={
        "files": files,
        "size": size,
        "remaining_space": folder.max_size - size,
    })


def _replace_folder(
    folders: Sequence[FolderResponse],
    folder_id: str,
    change: Callable[[FolderResponse], FolderResponse],
) -> List[FolderResponse]:
    return [change(f) if f.id == folder_id else f for f in folders]


class DocumentLifecycle:
    """Folder and file operations returning snapshot-based results.

    Public methods:
        load_folders, create_folder, rename_folder, delete_folder,
        upload_file, reupload_file, delete_file, resolve_download
    """

    def __init__(self, db: Session, blob_store: BlobStore, policy: Optional[CapacityPolicy] = None):
        self.folder_service = FolderService(db, blob_store, policy)
        self.document_service = self.folder_service.document_service
        self.policy = self.folder_service.policy

    # -- Folders ----------------------------------------------------------

    def load_folders(self, project_id: str) -> OperationResult:
        if not project_id:
            return _invalid([], "Please select a project")
        try:
            folders = self.folder_service.list_snapshots(project_id)
        except ShelfException as e:
            return _failure([], "fetch folders", e)
        return _success(folders, f"Loaded {len(folders)} folders")

    def create_folder(
        self,
        folders: Sequence[FolderResponse],
        name: str,
        project_id: str,
        created_by: Optional[str] = None,
    ) -> OperationResult:
        if not name or not name.strip():
            return _invalid(folders, "Folder name is required")
        if not project_id:
            return _invalid(folders, "Please select a project")

        try:
            record = self.folder_service.create_folder(project_id, name, created_by=created_by)
            new_folder = self.folder_service.snapshot(record)
        except ShelfException as e:
            return _failure(folders, "create folder", e)
        return _success([*folders, new_folder], "Folder created successfully", new_folder)

    def rename_folder(
        self, folders: Sequence[FolderResponse], folder: FolderResponse, new_name: str
    ) -> OperationResult:
        if not new_name or not new_name.strip():
            return _invalid(folders, "Folder name is required")
        if folder is None or not folder.id or not folder.project_id:
            return _invalid(folders, "Invalid folder data")

        name = new_name.strip()
        try:
            self.folder_service.rename_folder(folder.project_id, folder.id, name)
        except ShelfException as e:
            return _failure(folders, "rename folder", e)
        updated = _replace_folder(folders, folder.id, lambda f: f.model_copy(update={"name": name}))
        return _success(updated, "Folder renamed successfully")

    def delete_folder(self, folders: Sequence[FolderResponse], folder: FolderResponse) -> OperationResult:
        """Cascade delete. Prefer ``FolderDeletionFlow`` which adds the confirmation step."""
        if folder is None or not folder.id or not folder.project_id:
            return _invalid(folders, "Invalid folder data")

        try:
            deleted = self.folder_service.delete_folder(folder.project_id, folder.id)
        except CascadeIncompleteError as e:
            # The folder stays, minus the files that did go.
            gone = set(e.deleted_file_ids)
            kept = _replace_folder(
                folders, folder.id,
                lambda f: with_files(f, [d for d in f.files if d.id not in gone]),
            )
            result = _failure(folders, "delete folder", e)
            return OperationResult(
                result.status, kept, result.message,
                error_code=result.error_code, details=result.details,
            )
        except ShelfException as e:
            return _failure(folders, "delete folder", e)

        remaining = [f for f in folders if f.id != folder.id]
        return _success(remaining, "Folder deleted successfully", deleted)

    # -- Files ------------------------------------------------------------

    def upload_file(
        self,
        folders: Sequence[FolderResponse],
        incoming: Optional[IncomingFile],
        folder: Optional[FolderResponse],
        display_name: str,
        description: Optional[str] = None,
        project_id: Optional[str] = None,
        uploaded_by: Optional[str] = None,
    ) -> OperationResult:
        if incoming is None or folder is None or not display_name or not display_name.strip():
            return _invalid(folders, "Please select a file, folder and provide a name")
        project_id = project_id or folder.project_id
        if not project_id:
            return _invalid(folders, "Please select a project")

        # Checked against the snapshot before any remote call.
        try:
            self.policy.check_upload(folder.files, incoming.size)
        except CapacityExceededError as e:
            return _failure(folders, "upload file", e)

        try:
            record = self.document_service.upload_document(
                project_id, folder.id, incoming, display_name,
                description=description, uploaded_by=uploaded_by,
            )
            new_file = DocumentResponse.model_validate(record)
        except ShelfException as e:
            return _failure(folders, "upload file", e)

        updated = _replace_folder(folders, folder.id, lambda f: with_files(f, [*f.files, new_file]))
        return _success(updated, "File uploaded successfully", new_file)

    def reupload_file(
        self,
        folders: Sequence[FolderResponse],
        incoming: Optional[IncomingFile],
        folder: Optional[FolderResponse],
        file_id: str,
        display_name: Optional[str] = None,
        description: Optional[str] = None,
        uploaded_by: Optional[str] = None,
    ) -> OperationResult:
        if incoming is None or folder is None or not file_id:
            return _invalid(folders, "Please select a file to replace")

        current = next((d for d in folder.files if d.id == file_id), None)
        try:
            self.policy.check_upload(
                folder.files, incoming.size,
                replacing_size=current.size if current is not None else 0,
            )
        except CapacityExceededError as e:
            return _failure(folders, "re-upload file", e)

        try:
            record = self.document_service.replace_document(
                folder.project_id, folder.id, file_id, incoming,
                display_name=display_name, description=description, uploaded_by=uploaded_by,
            )
            new_file = DocumentResponse.model_validate(record)
        except ShelfException as e:
            return _failure(folders, "re-upload file", e)

        def swap(f: FolderResponse) -> FolderResponse:
            files = [new_file if d.id == file_id else d for d in f.files]
            if current is None:
                files.append(new_file)
            return with_files(f, files)

        return _success(_replace_folder(folders, folder.id, swap), "File re-uploaded successfully", new_file)

    def delete_file(
        self,
        folders: Sequence[FolderResponse],
        file_id: str,
        folder_id: str,
        project_id: str,
    ) -> OperationResult:
        if not file_id or not folder_id or not project_id:
            return _invalid(folders, "Invalid file data")

        try:
            self.document_service.delete_document(project_id, folder_id, file_id)
        except ShelfException as e:
            return _failure(folders, "delete file", e)

        updated = _replace_folder(
            folders, folder_id,
            lambda f: with_files(f, [d for d in f.files if d.id != file_id]),
        )
        return _success(updated, "File deleted successfully", file_id)

    def resolve_download(
        self,
        folders: Sequence[FolderResponse],
        file: Optional[DocumentResponse] = None,
        download_url: Optional[str] = None,
    ) -> OperationResult:
        """Known URL first; otherwise ask the blob store for a fresh one."""
        url = download_url or (file.download_url if file is not None else None)
        if url:
            return _success(list(folders), "Download ready", url)
        if file is None:
            return _invalid(folders, "Download URL not found")

        try:
            url = self.document_service.resolve_download_url(
                file.project_id, file.folder_id, file.storage_file_name
            )
        except ShelfException as e:
            return _failure(folders, "download file", e)
        return _success(list(folders), "Download ready", url)


class DeletionState(str, Enum):
    IDLE = "idle"
    PENDING_CONFIRMATION = "pending_confirmation"
    DELETING = "deleting"


class FolderDeletionFlow:
    """Two-phase folder deletion: ``request`` stages, ``confirm`` cascades.

    IDLE -> PENDING_CONFIRMATION -> DELETING -> IDLE. The folder is removed
    from the snapshot only when the cascade succeeds.
    """

    def __init__(self, lifecycle: DocumentLifecycle):
        self.lifecycle = lifecycle
        self.state = DeletionState.IDLE
        self.folder: Optional[FolderResponse] = None

    def request(self, folders: Sequence[FolderResponse], folder: Optional[FolderResponse]) -> OperationResult:
        """Stage *folder* for deletion. No remote effect."""
        if folder is None or not folder.id or not folder.project_id:
            return _invalid(folders, "Invalid folder data")
        self.folder = folder
        self.state = DeletionState.PENDING_CONFIRMATION
        return _success(list(folders), f"Delete folder '{folder.name}' and all of its files?", folder)

    def cancel(self) -> None:
        self.folder = None
        self.state = DeletionState.IDLE

    def confirm(self, folders: Sequence[FolderResponse]) -> OperationResult:
        if self.state != DeletionState.PENDING_CONFIRMATION or self.folder is None:
            return _invalid(folders, "No folder is pending deletion")

        self.state = DeletionState.DELETING
        try:
            result = self.lifecycle.delete_folder(folders, self.folder)
        finally:
            self.folder = None
            self.state = DeletionState.IDLE
        if result.error:
            logger.warning(f"Folder deletion failed: {result.message}")
        return result
