"""Folder API: list, create, rename and cascade delete within a project.

Endpoints are thin; FolderService owns validation, size accounting and the
cascade.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends

from ..core.auth import AuthContext, optional_auth, require_auth
from ..schemas.folder import CascadeDeleteResponse, FolderCreate, FolderRename, FolderResponse
from ..services.folder_service import FolderService
from .deps import get_folder_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/projects/{project_id}/folders", tags=["folders"])


@router.get("", response_model=List[FolderResponse])
def list_folders(
    project_id: str,
    service: FolderService = Depends(get_folder_service),
    auth: AuthContext = Depends(optional_auth),
):
    """Folders of a project with their files, sizes and remaining space."""
    return service.list_snapshots(project_id)


@router.post("", response_model=FolderResponse, status_code=201)
def create_folder(
    project_id: str,
    data: FolderCreate,
    service: FolderService = Depends(get_folder_service),
    auth: AuthContext = Depends(require_auth),
):
    folder = service.create_folder(project_id, data.name, created_by=auth.user_id)
    return service.snapshot(folder)


@router.get("/{folder_id}", response_model=FolderResponse)
def get_folder(
    project_id: str,
    folder_id: str,
    service: FolderService = Depends(get_folder_service),
    auth: AuthContext = Depends(optional_auth),
):
    return service.snapshot(service.get_folder(project_id, folder_id))


@router.put("/{folder_id}", response_model=FolderResponse)
def rename_folder(
    project_id: str,
    folder_id: str,
    data: FolderRename,
    service: FolderService = Depends(get_folder_service),
    auth: AuthContext = Depends(require_auth),
):
    """Rename a folder. Files and size are unchanged."""
    folder = service.rename_folder(project_id, folder_id, data.name)
    return service.snapshot(folder)


@router.delete("/{folder_id}", response_model=CascadeDeleteResponse)
def delete_folder(
    project_id: str,
    folder_id: str,
    service: FolderService = Depends(get_folder_service),
    auth: AuthContext = Depends(require_auth),
):
    """Delete a folder and every file in it (records and binaries)."""
    deleted = service.delete_folder(project_id, folder_id)
    logger.info(
        "Folder deleted via API",
        extra={"project_id": project_id, "folder_id": folder_id, "user_id": auth.user_id},
    )
    return CascadeDeleteResponse(folder_id=folder_id, project_id=project_id, deleted_file_ids=deleted)
