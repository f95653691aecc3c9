"""Blob storage backends and the FastAPI dependency that selects one."""

from functools import lru_cache

from ..core.config import StorageBackend, settings
from .base import (
    BlobNotFoundError,
    BlobStore,
    BlobStoreError,
    generate_storage_file_name,
    object_key,
)
from .local import LocalBlobStore


@lru_cache(maxsize=1)
def get_blob_store() -> BlobStore:
    """Return the configured blob store (one instance per process)."""
    if settings.storage_backend == StorageBackend.MINIO:
        from .minio_store import MinioBlobStore

        return MinioBlobStore(
            endpoint=settings.minio_endpoint,
            access_key=settings.minio_access_key,
            secret_key=settings.minio_secret_key,
            bucket_name=settings.minio_bucket,
            secure=settings.minio_secure,
            url_ttl_seconds=settings.download_url_ttl_seconds,
        )
    return LocalBlobStore(settings.storage_root, settings.public_base_url)


__all__ = [
    "BlobNotFoundError",
    "BlobStore",
    "BlobStoreError",
    "LocalBlobStore",
    "generate_storage_file_name",
    "get_blob_store",
    "object_key",
]
