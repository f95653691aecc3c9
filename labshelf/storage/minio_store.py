"""MinIO / S3-compatible blob store with presigned download URLs."""

import io
import logging
from datetime import timedelta

from minio import Minio
from minio.error import MinioException, S3Error
from urllib3.exceptions import HTTPError

from .base import BlobNotFoundError, BlobStoreError

logger = logging.getLogger(__name__)

_MISSING_CODES = frozenset({"NoSuchKey", "NoSuchObject", "NotFound"})

# Everything the client raises: S3 error responses without a special meaning,
# connection failures and exhausted retries (urllib3).
_CLIENT_ERRORS = (MinioException, HTTPError)


class MinioBlobStore:
    """Wrapper around the MinIO client scoped to one bucket."""

    def __init__(
        self,
        endpoint: str,
        access_key: str,
        secret_key: str,
        bucket_name: str,
        secure: bool = False,
        url_ttl_seconds: int = 3600,
        client: Minio | None = None,
    ):
        self.client = client or Minio(
            endpoint=endpoint,
            access_key=access_key,
            secret_key=secret_key,
            secure=secure,
        )
        self.bucket_name = bucket_name
        self.url_ttl = timedelta(seconds=url_ttl_seconds)
        self._bucket_checked = False
        logger.debug(f"MinIO blob store initialized. Endpoint: {endpoint}, Bucket: {bucket_name}")

    def ensure_bucket_exists(self) -> None:
        if self._bucket_checked:
            return
        try:
            if not self.client.bucket_exists(self.bucket_name):
                self.client.make_bucket(self.bucket_name)
        except S3Error as e:
            raise BlobStoreError(f"Failed to check/create bucket: {e}") from e
        except _CLIENT_ERRORS as e:
            raise BlobStoreError(f"Object store unreachable: {e}") from e
        self._bucket_checked = True

    def put(self, key: str, data: bytes, content_type: str = "application/octet-stream") -> None:
        self.ensure_bucket_exists()
        try:
            self.client.put_object(
                bucket_name=self.bucket_name,
                object_name=key,
                data=io.BytesIO(data),
                length=len(data),
                content_type=content_type,
            )
        except _CLIENT_ERRORS as e:
            raise BlobStoreError(f"Could not upload {key}: {e}") from e

    def resolve_url(self, key: str) -> str:
        try:
            self.client.stat_object(self.bucket_name, key)
            return self.client.presigned_get_object(self.bucket_name, key, expires=self.url_ttl)
        except S3Error as e:
            if e.code in _MISSING_CODES:
                raise BlobNotFoundError(key) from e
            raise BlobStoreError(f"Could not resolve {key}: {e}") from e
        except _CLIENT_ERRORS as e:
            raise BlobStoreError(f"Could not resolve {key}: {e}") from e

    def read(self, key: str) -> bytes:
        response = None
        try:
            response = self.client.get_object(self.bucket_name, key)
            return response.read()
        except S3Error as e:
            if e.code in _MISSING_CODES:
                raise BlobNotFoundError(key) from e
            raise BlobStoreError(f"Could not read {key}: {e}") from e
        except _CLIENT_ERRORS as e:
            raise BlobStoreError(f"Could not read {key}: {e}") from e
        finally:
            if response is not None:
                response.close()
                response.release_conn()

    def delete(self, key: str) -> None:
        # S3 deletes are idempotent; a missing key succeeds.
        try:
            self.client.remove_object(self.bucket_name, key)
        except S3Error as e:
            if e.code in _MISSING_CODES:
                return
            raise BlobStoreError(f"Could not delete {key}: {e}") from e
        except _CLIENT_ERRORS as e:
            raise BlobStoreError(f"Could not delete {key}: {e}") from e
