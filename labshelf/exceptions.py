"""Custom exception hierarchy for LabShelf."""

from enum import Enum
from typing import Optional, Dict, Any, List


class ErrorCode(str, Enum):
    """Standardized error codes for API responses."""

    # Folder errors
    FOLDER_NOT_FOUND = "FOLDER_NOT_FOUND"
    CASCADE_INCOMPLETE = "CASCADE_INCOMPLETE"

    # Document (file) errors
    DOCUMENT_NOT_FOUND = "DOCUMENT_NOT_FOUND"
    CAPACITY_EXCEEDED = "CAPACITY_EXCEEDED"

    # Validation errors
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # Backend errors
    DATABASE_ERROR = "DATABASE_ERROR"
    STORAGE_ERROR = "STORAGE_ERROR"

    # Auth
    UNAUTHORIZED = "UNAUTHORIZED"

    # Generic errors
    INTERNAL_ERROR = "INTERNAL_ERROR"


class ShelfException(Exception):
    """
    Base exception for all LabShelf errors.

    Provides structured error responses with:
    - Human-readable message
    - Machine-readable error code
    - HTTP status code
    - Optional additional details
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for JSON response."""
        return {
            "error": self.error_code.value,
            "message": self.message,
            "details": self.details
        }


class FolderNotFoundError(ShelfException):
    """Folder not found in the given project."""

    def __init__(self, folder_id: str):
        super().__init__(
            f"Folder not found: {folder_id}",
            ErrorCode.FOLDER_NOT_FOUND,
            status_code=404,
            details={"folder_id": folder_id}
        )


class DocumentNotFoundError(ShelfException):
    """File record not found in the given folder."""

    def __init__(self, file_id: str):
        super().__init__(
            f"Document not found: {file_id}",
            ErrorCode.DOCUMENT_NOT_FOUND,
            status_code=404,
            details={"file_id": file_id}
        )


class ValidationError(ShelfException):
    """Validation failed for user input."""

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(
            message,
            ErrorCode.VALIDATION_ERROR,
            status_code=400,
            details=details
        )


class CapacityExceededError(ShelfException):
    """An upload would break the per-file or per-folder size ceiling.

    ``limit_kind`` is ``"folder"`` or ``"file"``; the formatted limit is
    carried in both the message and the details.
    """

    def __init__(self, message: str, limit_kind: str, limit: int, formatted_limit: str, projected: float):
        super().__init__(
            message,
            ErrorCode.CAPACITY_EXCEEDED,
            status_code=413,
            details={
                "limit_kind": limit_kind,
                "limit": limit,
                "formatted_limit": formatted_limit,
                "projected": projected,
            }
        )
        self.limit_kind = limit_kind
        self.limit = limit


class CascadeIncompleteError(ShelfException):
    """Some files of a folder could not be deleted, so the folder was kept."""

    def __init__(self, folder_id: str, deleted_file_ids: List[str], failures: Dict[str, str]):
        super().__init__(
            f"Could not delete {len(failures)} of {len(failures) + len(deleted_file_ids)} files; "
            f"folder {folder_id} was kept",
            ErrorCode.CASCADE_INCOMPLETE,
            status_code=409,
            details={
                "folder_id": folder_id,
                "deleted_file_ids": list(deleted_file_ids),
                "failures": dict(failures),
            }
        )
        self.folder_id = folder_id
        self.deleted_file_ids = list(deleted_file_ids)
        self.failures = dict(failures)


class AuthenticationError(ShelfException):
    """Request lacks valid authentication credentials."""

    def __init__(self, message: str = "Invalid or missing authentication token"):
        super().__init__(
            message,
            ErrorCode.UNAUTHORIZED,
            status_code=401,
        )


class DatabaseError(ShelfException):
    """Database operation failed."""

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        details = {}
        if original_error:
            details["original_error"] = str(original_error)

        super().__init__(
            f"{message}: {original_error}" if original_error else message,
            ErrorCode.DATABASE_ERROR,
            status_code=500,
            details=details
        )


class StorageError(ShelfException):
    """Blob store operation failed."""

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        details = {}
        if original_error:
            details["original_error"] = str(original_error)

        super().__init__(
            f"{message}: {original_error}" if original_error else message,
            ErrorCode.STORAGE_ERROR,
            status_code=502,
            details=details
        )
