"""Filesystem blob store.

Objects live under a root directory; download URLs point at the API's
``/api/blobs/{key}`` route, which streams them back.
"""

import logging
from pathlib import Path
from urllib.parse import quote

from .base import BlobNotFoundError, BlobStoreError

logger = logging.getLogger(__name__)


class LocalBlobStore:
    """Blob store backed by a directory tree."""

    def __init__(self, root: str, public_base_url: str):
        self.root = Path(root).expanduser().resolve()
        self.public_base_url = public_base_url.rstrip("/")
        self.root.mkdir(parents=True, exist_ok=True)

    def path_for(self, key: str) -> Path:
        """Map *key* to a path under the root. Keys escaping the root are refused."""
        path = (self.root / key).resolve()
        if path == self.root or self.root not in path.parents:
            raise BlobStoreError(f"Invalid object key: {key}")
        return path

    def put(self, key: str, data: bytes, content_type: str = "application/octet-stream") -> None:
        path = self.path_for(key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as e:
            raise BlobStoreError(f"Could not write {key}: {e}") from e
        logger.debug("Stored blob", extra={"key": key, "bytes": len(data)})

    def resolve_url(self, key: str) -> str:
        if not self.path_for(key).is_file():
            raise BlobNotFoundError(key)
        return f"{self.public_base_url}/api/blobs/{quote(key)}"

    def read(self, key: str) -> bytes:
        path = self.path_for(key)
        try:
            return path.read_bytes()
        except FileNotFoundError as e:
            raise BlobNotFoundError(key) from e
        except OSError as e:
            raise BlobStoreError(f"Could not read {key}: {e}") from e

    def delete(self, key: str) -> None:
        path = self.path_for(key)
        try:
            path.unlink()
        except FileNotFoundError:
            logger.debug("Blob already absent", extra={"key": key})
            return
        except OSError as e:
            raise BlobStoreError(f"Could not delete {key}: {e}") from e
        self._prune_empty_dirs(path.parent)

    def _prune_empty_dirs(self, directory: Path) -> None:
        """Remove now-empty folder directories up to (not including) the root."""
        while directory != self.root and self.root in directory.parents:
            try:
                next(directory.iterdir())
                return
            except StopIteration:
                directory.rmdir()
                directory = directory.parent
            except OSError:
                return
