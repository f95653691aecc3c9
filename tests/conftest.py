"""Shared test fixtures for the LabShelf test suite.

Tests run against a throwaway SQLite file and a local blob store under
pytest's tmp_path. Tables are dropped and recreated before every test.
"""

import os
import tempfile

# Point the app at the test database before any app imports.
_TEST_DIR = tempfile.mkdtemp(prefix="labshelf-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TEST_DIR, 'test.db')}"
os.environ["AUTH_ENABLED"] = "false"
os.environ["LOG_FORMAT"] = "text"
os.environ["STORAGE_BACKEND"] = "local"
os.environ["STORAGE_ROOT"] = os.path.join(_TEST_DIR, "blobs")

import pytest
from fastapi.testclient import TestClient

from labshelf import models  # noqa: F401
from labshelf.api.deps import get_capacity_policy
from labshelf.database import Base, SessionLocal, engine, get_db
from labshelf.main import app
from labshelf.schemas.document import DocumentResponse
from labshelf.schemas.folder import FolderResponse
from labshelf.services.capacity import CapacityPolicy
from labshelf.services.document_service import IncomingFile
from labshelf.storage import LocalBlobStore, get_blob_store

MIB = 1024 * 1024


@pytest.fixture(autouse=True)
def _clean_tables():
    """Recreate all tables before each test for isolation."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture()
def db():
    """Per-test database session."""
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture()
def blob_store(tmp_path):
    return LocalBlobStore(str(tmp_path / "blobs"), "http://testserver")


@pytest.fixture()
def policy():
    return CapacityPolicy()


@pytest.fixture()
def client(db, blob_store, policy):
    """TestClient sharing the test session, blob store and capacity policy."""

    def _override_get_db():
        yield db

    app.dependency_overrides[get_db] = _override_get_db
    app.dependency_overrides[get_blob_store] = lambda: blob_store
    app.dependency_overrides[get_capacity_policy] = lambda: policy
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def make_incoming(name: str = "report.pdf", size: int = 1024, content_type: str = "application/pdf") -> IncomingFile:
    """Factory for an upload of *size* bytes."""
    return IncomingFile(filename=name, data=b"x" * size, content_type=content_type)


def make_file_view(file_id: str, size, folder_id: str = "folder-1", project_id: str = "proj-1") -> DocumentResponse:
    """Snapshot entry for a file that exists only client-side."""
    return DocumentResponse(
        id=file_id,
        folder_id=folder_id,
        project_id=project_id,
        display_name=f"{file_id}.bin",
        storage_file_name=f"0-{file_id}.bin",
        size=size,
    )


def make_folder_view(
    folder_id: str = "folder-1",
    project_id: str = "proj-1",
    files=None,
    max_size: int = 100 * MIB,
) -> FolderResponse:
    files = list(files or [])
    size = sum(f.size for f in files)
    return FolderResponse(
        id=folder_id,
        name="Data",
        project_id=project_id,
        files=files,
        size=size,
        remaining_space=max_size - size,
        max_size=max_size,
    )
