"""
Uploaded File Routes

Upload, list, download and delete files stored in the blob store.
"""

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from fastapi.responses import FileResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth import get_current_user
from app.database import get_db
from app.models.user import User
from app.schemas.binary_file import BinaryFileListResponse, BinaryFileResponse
from app.services.upload_service import UploadService
from app.storage import BlobStore, get_blob_store

router = APIRouter(tags=["Files"])


@router.post("/upload", response_model=BinaryFileResponse, status_code=status.HTTP_201_CREATED)
async def upload_file(
    file: UploadFile = File(...),
    parent_id: int | None = Form(None),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    blob_store: BlobStore = Depends(get_blob_store),
):
    return await UploadService(db, blob_store).upload_file(current_user.id, file, parent_id)


@router.get("", response_model=BinaryFileListResponse)
async def list_files(
    parent_id: int | None = Query(None),
    all_files: bool = Query(False, alias="all", description="Every upload of the caller, any folder"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    blob_store: BlobStore = Depends(get_blob_store),
):
    service = UploadService(db, blob_store)
    if all_files:
        files = await service.list_all_files(current_user.id)
    else:
        files = await service.list_files(current_user.id, parent_id)
    return {"files": files}


@router.get("/{file_id}/download")
async def download_file(
    file_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    blob_store: BlobStore = Depends(get_blob_store),
):
    path, binary_file = await UploadService(db, blob_store).open_file(current_user.id, file_id)
    return FileResponse(path, filename=binary_file.original_name, media_type="application/octet-stream")


@router.delete("/{file_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_file(
    file_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    blob_store: BlobStore = Depends(get_blob_store),
):
    await UploadService(db, blob_store).delete_file(current_user.id, file_id)
    return None
