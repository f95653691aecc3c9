"""File API: upload, re-upload, delete and download links inside a folder.

Uploads are multipart forms. Size limits are enforced by DocumentService
before anything is written; violations come back as 413.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from fastapi.responses import RedirectResponse

from ..core.auth import AuthContext, optional_auth, require_auth
from ..schemas.document import DocumentResponse, DownloadResponse
from ..services.capacity import CapacityPolicy
from ..services.document_service import DocumentService, IncomingFile
from .deps import get_document_service

router = APIRouter(
    prefix="/api/projects/{project_id}/folders/{folder_id}/files",
    tags=["documents"],
)


def _incoming(upload: UploadFile, policy: CapacityPolicy) -> IncomingFile:
    """Read the upload, never more than one byte past the per-file ceiling."""
    if upload.size is not None:
        policy.check_file_size(upload.size)
    data = upload.file.read(policy.max_file_size + 1)
    policy.check_file_size(len(data))
    return IncomingFile(
        filename=upload.filename or "file",
        data=data,
        content_type=upload.content_type or "application/octet-stream",
    )


@router.get("", response_model=List[DocumentResponse])
def list_documents(
    project_id: str,
    folder_id: str,
    service: DocumentService = Depends(get_document_service),
    auth: AuthContext = Depends(optional_auth),
):
    return service.list_documents(project_id, folder_id)


@router.post("", response_model=DocumentResponse, status_code=201)
def upload_document(
    project_id: str,
    folder_id: str,
    file: UploadFile = File(...),
    display_name: str = Form(...),
    description: Optional[str] = Form(None),
    service: DocumentService = Depends(get_document_service),
    auth: AuthContext = Depends(require_auth),
):
    """Upload a file into a folder (10 MiB per file, 100 MiB per folder by default)."""
    return service.upload_document(
        project_id, folder_id, _incoming(file, service.policy), display_name,
        description=description, uploaded_by=auth.user_id,
    )


@router.get("/{file_id}", response_model=DocumentResponse)
def get_document(
    project_id: str,
    folder_id: str,
    file_id: str,
    service: DocumentService = Depends(get_document_service),
    auth: AuthContext = Depends(optional_auth),
):
    return service.get_document(project_id, folder_id, file_id)


@router.put("/{file_id}", response_model=DocumentResponse)
def replace_document(
    project_id: str,
    folder_id: str,
    file_id: str,
    file: UploadFile = File(...),
    display_name: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    service: DocumentService = Depends(get_document_service),
    auth: AuthContext = Depends(require_auth),
):
    """Re-upload: same file id, new binary and metadata."""
    return service.replace_document(
        project_id, folder_id, file_id, _incoming(file, service.policy),
        display_name=display_name, description=description, uploaded_by=auth.user_id,
    )


@router.delete("/{file_id}", status_code=204)
def delete_document(
    project_id: str,
    folder_id: str,
    file_id: str,
    service: DocumentService = Depends(get_document_service),
    auth: AuthContext = Depends(require_auth),
):
    service.delete_document(project_id, folder_id, file_id)


@router.get("/{file_id}/download", response_model=DownloadResponse)
def download_document(
    project_id: str,
    folder_id: str,
    file_id: str,
    redirect: bool = False,
    service: DocumentService = Depends(get_document_service),
    auth: AuthContext = Depends(optional_auth),
):
    """Fresh download URL for a file; ``?redirect=true`` answers with a 307."""
    record = service.get_document(project_id, folder_id, file_id)
    url = service.resolve_download_url(project_id, folder_id, record.storage_file_name)
    if redirect:
        return RedirectResponse(url, status_code=307)
    return DownloadResponse(file_id=record.id, url=url)
