"""Serves objects of the local blob store at the URLs it hands out."""

import mimetypes

from fastapi import APIRouter, Depends
from fastapi.responses import FileResponse

from ..exceptions import DocumentNotFoundError
from ..storage import BlobStore, BlobStoreError, LocalBlobStore, get_blob_store

router = APIRouter(prefix="/api/blobs", tags=["blobs"])


@router.get("/{key:path}")
def get_blob(key: str, blob_store: BlobStore = Depends(get_blob_store)):
    # Remote backends hand out their own (presigned) URLs.
    if not isinstance(blob_store, LocalBlobStore):
        raise DocumentNotFoundError(key)
    try:
        path = blob_store.path_for(key)
    except BlobStoreError as e:
        raise DocumentNotFoundError(key) from e
    if not path.is_file():
        raise DocumentNotFoundError(key)

    media_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
    return FileResponse(path, media_type=media_type, filename=path.name.split("-", 2)[-1])
