"""Shared FastAPI dependencies: services bound to the request's session."""

from fastapi import Depends
from sqlalchemy.orm import Session

from ..database import get_db
from ..services.capacity import CapacityPolicy
from ..services.document_service import DocumentService
from ..services.folder_service import FolderService
from ..storage import BlobStore, get_blob_store


def get_capacity_policy() -> CapacityPolicy:
    return CapacityPolicy.from_settings()


def get_folder_service(
    db: Session = Depends(get_db),
    blob_store: BlobStore = Depends(get_blob_store),
    policy: CapacityPolicy = Depends(get_capacity_policy),
) -> FolderService:
    return FolderService(db, blob_store, policy)


def get_document_service(
    service: FolderService = Depends(get_folder_service),
) -> DocumentService:
    return service.document_service
