"""Blob store protocol and shared helpers.

Object keys are forward-slash paths:
``projects/{project_id}/folders/{folder_id}/{storage_file_name}``.
"""

import re
import time
import uuid
from typing import Protocol, runtime_checkable

# Characters allowed in the name segment of a generated storage key.
_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")
_MAX_NAME_LENGTH = 120


class BlobStoreError(Exception):
    """A blob store call failed."""


class BlobNotFoundError(BlobStoreError):
    """The object does not exist."""

    def __init__(self, key: str):
        super().__init__(f"Blob not found: {key}")
        self.key = key


@runtime_checkable
class BlobStore(Protocol):
    """Binary object storage used for uploaded files."""

    def put(self, key: str, data: bytes, content_type: str = "application/octet-stream") -> None:
        ...

    def resolve_url(self, key: str) -> str:
        """Return a URL the client can fetch. Raises ``BlobNotFoundError``."""
        ...

    def delete(self, key: str) -> None:
        """Remove the object. A missing object is not an error."""
        ...

    def read(self, key: str) -> bytes:
        """Return the object's bytes. Raises ``BlobNotFoundError``."""
        ...


def object_key(project_id: str, folder_id: str, storage_file_name: str) -> str:
    return f"projects/{project_id}/folders/{folder_id}/{storage_file_name}"


def generate_storage_file_name(original_name: str) -> str:
    """Collision-free key segment: ``<epoch millis>-<random>-<sanitized name>``."""
    safe = _UNSAFE_CHARS.sub("_", original_name or "").strip("._") or "file"
    return f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}-{safe[-_MAX_NAME_LENGTH:]}"
