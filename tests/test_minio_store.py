"""Tests for MinioBlobStore against a mocked MinIO client."""

from datetime import timedelta
from unittest.mock import MagicMock

import pytest
from minio.error import S3Error
from urllib3.exceptions import MaxRetryError

from conftest import make_incoming
from labshelf.models import Folder, FolderFile
from labshelf.services.capacity import CapacityPolicy
from labshelf.services.lifecycle import DocumentLifecycle, OperationStatus
from labshelf.storage import BlobNotFoundError, BlobStore, BlobStoreError
from labshelf.storage.minio_store import MinioBlobStore


class _S3Error(S3Error):
    """S3Error carrying only a code."""

    def __init__(self, code):
        Exception.__init__(self, code)
        self._fake_code = code

    @property
    def code(self):
        return self._fake_code

    def __str__(self):
        return self._fake_code


@pytest.fixture()
def client():
    mock = MagicMock()
    mock.bucket_exists.return_value = True
    mock.presigned_get_object.return_value = "https://minio.local/labshelf/k?X-Amz-Signature=abc"
    return mock


@pytest.fixture()
def store(client):
    return MinioBlobStore("minio.local:9000", "ak", "sk", "labshelf", url_ttl_seconds=600, client=client)


class TestMinioBlobStore:

    def test_satisfies_protocol(self, store):
        assert isinstance(store, BlobStore)

    def test_put_creates_missing_bucket_once(self, store, client):
        client.bucket_exists.return_value = False
        store.put("projects/p/folders/f/a.txt", b"abc", "text/plain")
        store.put("projects/p/folders/f/b.txt", b"def", "text/plain")

        client.make_bucket.assert_called_once_with("labshelf")
        kwargs = client.put_object.call_args.kwargs
        assert kwargs["object_name"] == "projects/p/folders/f/b.txt"
        assert kwargs["length"] == 3
        assert kwargs["content_type"] == "text/plain"

    def test_put_failure(self, store, client):
        client.put_object.side_effect = _S3Error("AccessDenied")
        with pytest.raises(BlobStoreError):
            store.put("k", b"x")

    def test_resolve_url_is_presigned(self, store, client):
        url = store.resolve_url("k")
        assert url.startswith("https://minio.local/")
        client.presigned_get_object.assert_called_once_with("labshelf", "k", expires=timedelta(seconds=600))

    def test_resolve_missing_object(self, store, client):
        client.stat_object.side_effect = _S3Error("NoSuchKey")
        with pytest.raises(BlobNotFoundError):
            store.resolve_url("k")

    def test_delete_missing_is_silent(self, store, client):
        client.remove_object.side_effect = _S3Error("NoSuchKey")
        store.delete("k")

    def test_delete_failure(self, store, client):
        client.remove_object.side_effect = _S3Error("InternalError")
        with pytest.raises(BlobStoreError):
            store.delete("k")

    def test_read_releases_connection(self, store, client):
        response = MagicMock()
        response.read.return_value = b"payload"
        client.get_object.return_value = response

        assert store.read("k") == b"payload"
        response.close.assert_called_once()
        response.release_conn.assert_called_once()


class TestUnreachableObjectStore:
    """Connection failures surface from urllib3, not as S3 error responses."""

    @staticmethod
    def _unreachable():
        return MaxRetryError(None, "/labshelf/k", reason=ConnectionRefusedError("refused"))

    def test_put(self, store, client):
        client.put_object.side_effect = self._unreachable()
        with pytest.raises(BlobStoreError):
            store.put("k", b"x")

    def test_bucket_check(self, store, client):
        client.bucket_exists.side_effect = self._unreachable()
        with pytest.raises(BlobStoreError):
            store.put("k", b"x")
        client.put_object.assert_not_called()

    def test_resolve_url(self, store, client):
        client.stat_object.side_effect = self._unreachable()
        with pytest.raises(BlobStoreError):
            store.resolve_url("k")

    def test_read(self, store, client):
        client.get_object.side_effect = self._unreachable()
        with pytest.raises(BlobStoreError):
            store.read("k")

    def test_delete(self, store, client):
        client.remove_object.side_effect = self._unreachable()
        with pytest.raises(BlobStoreError):
            store.delete("k")


class TestLifecycleOverMinio:

    @pytest.fixture()
    def lifecycle(self, db, store):
        return DocumentLifecycle(db, store, CapacityPolicy())

    @pytest.fixture()
    def folders(self, lifecycle):
        return lifecycle.create_folder([], "Data", "proj-1").folders

    def test_delete_file_tolerates_unreachable_store(self, lifecycle, folders, client, db):
        uploaded = lifecycle.upload_file(folders, make_incoming("a.bin", 10), folders[0], "A")
        assert uploaded.ok
        file_id = uploaded.folders[0].files[0].id
        client.remove_object.side_effect = MaxRetryError(None, "/labshelf/k")

        result = lifecycle.delete_file(uploaded.folders, file_id, folders[0].id, "proj-1")

        assert result.ok
        assert result.folders[0].files == []
        assert result.folders[0].size == 0
        assert db.query(FolderFile).count() == 0

    def test_upload_reports_remote_error(self, lifecycle, folders, client, db):
        client.put_object.side_effect = MaxRetryError(None, "/labshelf/k")

        result = lifecycle.upload_file(folders, make_incoming("a.bin", 10), folders[0], "A")

        assert result.status == OperationStatus.REMOTE_ERROR
        assert result.folders == folders
        assert db.query(FolderFile).count() == 0

    def test_cascade_completes_when_store_is_down(self, lifecycle, folders, client, db):
        current = folders
        for name in ("a", "b"):
            current = lifecycle.upload_file(current, make_incoming(f"{name}.bin", 10), current[0], name).folders
        client.remove_object.side_effect = MaxRetryError(None, "/labshelf/k")

        result = lifecycle.delete_folder(current, current[0])

        assert result.ok
        assert result.folders == []
        assert db.query(Folder).count() == 0
