"""
File storage on Cloudflare R2 (S3 API via boto3)

Objects are public-read through the bucket's public domain; the object key is
the ``publicId`` handed back to callers and used again for deletion.
"""

import logging
import os
import uuid
from dataclasses import asdict, dataclass
from typing import Optional

import boto3
from botocore.config import Config
from fastapi import UploadFile

from .config import (
    ALLOWED_FILE_TYPES,
    MAX_FILE_SIZE,
    R2_ACCESS_KEY_ID,
    R2_ACCOUNT_ID,
    R2_BUCKET_NAME,
    R2_PUBLIC_BASE_URL,
    R2_SECRET_ACCESS_KEY,
)
from .errors import AppError, ValidationFailed
from .security import sanitize_filename

logger = logging.getLogger(__name__)

UPLOAD_FOLDERS = {
    "serviceImages": "autologic/services",
    "blogImages": "autologic/blog",
    "projectImages": "autologic/projects",
    "reviewImages": "autologic/reviews",
    "contactAttachments": "autologic/contacts",
}

DANGEROUS_FILENAME_PARTS = ["..", "/", "\\", "<", ">", ":", '"', "|", "?", "*"]


class StorageError(AppError):
    status_code = 502
    default_message = "File storage is unavailable"


@dataclass
class StoredFile:
    url: str
    publicId: str
    size: int
    mimeType: str
    originalName: Optional[str] = None

    def to_dict(self) -> dict:
        return asdict(self)


def get_r2_client():
    """Create and return an R2 client."""
    return boto3.client(
        "s3",
        endpoint_url=f"https://{R2_ACCOUNT_ID}.r2.cloudflarestorage.com",
        aws_access_key_id=R2_ACCESS_KEY_ID,
        aws_secret_access_key=R2_SECRET_ACCESS_KEY,
        config=Config(signature_version="s3v4"),
    )


def public_url(key: str) -> str:
    return f"{R2_PUBLIC_BASE_URL.rstrip('/')}/{key}"


def validate_upload(filename: Optional[str], content_type: Optional[str], size: int) -> None:
    """Reject disallowed types, oversized files and path-like file names"""
    if content_type not in ALLOWED_FILE_TYPES:
        raise ValidationFailed("Invalid file type. Only images are allowed.")

    if filename:
        for part in DANGEROUS_FILENAME_PARTS:
            if part in filename:
                logger.warning(f"❌ Dangerous character '{part}' detected in filename: '{filename}'")
                raise ValidationFailed(f"Invalid filename - contains dangerous character '{part}'")
        if len(filename) > 255:
            raise ValidationFailed("Filename too long - maximum 255 characters")

    if size == 0:
        raise ValidationFailed("No file uploaded")
    if size > MAX_FILE_SIZE:
        raise ValidationFailed(
            f"File size exceeds {MAX_FILE_SIZE / (1024 * 1024):.0f}MB limit. "
            f"Your file is {size / (1024 * 1024):.2f}MB."
        )


def upload_file(content: bytes, filename: Optional[str], content_type: str, folder: str) -> StoredFile:
    validate_upload(filename, content_type, len(content))

    safe_name = sanitize_filename(filename or "upload")
    ext = os.path.splitext(safe_name)[1].lower() or ".bin"
    key = f"{folder}/{uuid.uuid4().hex}{ext}"

    try:
        get_r2_client().put_object(
            Bucket=R2_BUCKET_NAME,
            Key=key,
            Body=content,
            ContentType=content_type,
            CacheControl="public, max-age=31536000",
        )
    except Exception as e:
        logger.error(f"❌ Upload failed for {key}: {e}")
        raise StorageError("File upload failed") from e

    logger.info(f"📤 Uploaded {safe_name} as {key} ({len(content)} bytes)")
    return StoredFile(
        url=public_url(key),
        publicId=key,
        size=len(content),
        mimeType=content_type,
        originalName=filename,
    )


async def store_upload(file: UploadFile, folder: str) -> StoredFile:
    """Read a multipart upload and store it"""
    content = await file.read()
    return upload_file(content, file.filename, file.content_type, folder)


def delete_file(public_id: str) -> None:
    try:
        get_r2_client().delete_object(Bucket=R2_BUCKET_NAME, Key=public_id)
    except Exception as e:
        logger.error(f"❌ Failed to delete {public_id}: {e}")
        raise StorageError("Failed to delete file") from e
    logger.info(f"🗑️ Deleted stored file {public_id}")


def delete_files(public_ids: list[str]) -> None:
    if not public_ids:
        return
    try:
        get_r2_client().delete_objects(
            Bucket=R2_BUCKET_NAME,
            Delete={"Objects": [{"Key": key} for key in public_ids], "Quiet": True},
        )
    except Exception as e:
        logger.error(f"❌ Failed to delete {len(public_ids)} files: {e}")
        raise StorageError("Failed to delete files") from e


def discard_files(public_ids: list[str]) -> None:
    """Best-effort cleanup after the owning record is gone"""
    try:
        delete_files([pid for pid in public_ids if pid])
    except StorageError as e:
        logger.warning(f"⚠️ Stored files left behind: {e.message}")
