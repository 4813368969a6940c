"""Upload router - admin file uploads to object storage"""

import logging

from fastapi import APIRouter, Depends, File, Query, UploadFile
from pydantic import BaseModel, Field

from ... import storage
from ...errors import ValidationFailed
from ...models import User
from ...policy import require
from ...shared.responses import success

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/upload", tags=["Upload"])

require_admin = require("upload", "manage")

MAX_FILES_PER_REQUEST = 10


class BulkDeleteRequest(BaseModel):
    publicIds: list[str] = Field(..., min_length=1, max_length=50)


def _folder_for(upload_type: str) -> str:
    folder = storage.UPLOAD_FOLDERS.get(upload_type)
    if not folder:
        raise ValidationFailed("Invalid upload type")
    return folder


@router.post("/single/{upload_type}")
async def upload_single(
    upload_type: str,
    file: UploadFile = File(...),
    _: User = Depends(require_admin),
):
    stored = await storage.store_upload(file, _folder_for(upload_type))
    return success({"file": stored.to_dict()})


@router.post("/multiple/{upload_type}")
async def upload_multiple(
    upload_type: str,
    files: list[UploadFile] = File(...),
    max_count: int = Query(MAX_FILES_PER_REQUEST, alias="maxCount", ge=1, le=MAX_FILES_PER_REQUEST),
    _: User = Depends(require_admin),
):
    folder = _folder_for(upload_type)
    if not files:
        raise ValidationFailed("No files uploaded")
    if len(files) > max_count:
        raise ValidationFailed(f"Too many files - maximum {max_count} per upload")

    stored = [await storage.store_upload(file, folder) for file in files]
    logger.info(f"📤 Stored {len(stored)} files in {folder}")
    return success({"files": [item.to_dict() for item in stored]}, results=len(stored))


@router.delete("/multiple")
async def delete_multiple(data: BulkDeleteRequest, _: User = Depends(require_admin)):
    storage.delete_files(data.publicIds)
    return success(message="Files deleted successfully", results=len(data.publicIds))


@router.delete("/{public_id:path}")
async def delete_upload(public_id: str, _: User = Depends(require_admin)):
    storage.delete_file(public_id)
    return success({"publicId": public_id}, message="File deleted successfully")
