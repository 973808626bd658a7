import logging
import os
import random
import time
from typing import List, Optional, Tuple

from fastapi import UploadFile
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import ValidationError
from app.crud import file as crud_file
from app.models.file import File, FileType, StorageProvider

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024

_TYPE_BY_EXTENSION = {
    "jpg": FileType.IMAGE,
    "jpeg": FileType.IMAGE,
    "png": FileType.IMAGE,
    "gif": FileType.IMAGE,
    "bmp": FileType.IMAGE,
    "webp": FileType.IMAGE,
    "pdf": FileType.PDF,
    "doc": FileType.DOC,
    "docx": FileType.DOCX,
    "xls": FileType.EXCEL,
    "xlsx": FileType.EXCEL,
    "mp4": FileType.VIDEO,
    "avi": FileType.VIDEO,
    "mov": FileType.VIDEO,
    "wmv": FileType.VIDEO,
}


def file_type_from_extension(extension: str) -> FileType:
    return _TYPE_BY_EXTENSION.get(extension.lower().lstrip("."), FileType.OTHER)


def unique_file_name(original_name: str) -> str:
    """<basename>-<millis>-<random><ext>"""
    base, ext = os.path.splitext(os.path.basename(original_name or "upload"))
    suffix = f"{int(time.time() * 1000)}-{random.randint(0, 10**9)}"
    return f"{base or 'upload'}-{suffix}{ext}"


def public_path(file_path: Optional[str]) -> Optional[str]:
    """URL path under which the file server exposes a stored file"""
    if not file_path:
        return None
    relative = os.path.relpath(file_path, settings.UPLOAD_DIR).replace(os.sep, "/")
    return f"{settings.PUBLIC_FILES_BASE_URL.rstrip('/')}/{relative}"


def _write_upload(upload: UploadFile) -> Tuple[str, str, int]:
    """Stream an upload into UPLOAD_DIR; returns (stored name, path, size in bytes)"""
    max_bytes = settings.MAX_UPLOAD_SIZE_MB * 1024 * 1024
    os.makedirs(settings.UPLOAD_DIR, exist_ok=True)

    stored_name = unique_file_name(upload.filename)
    destination = os.path.join(settings.UPLOAD_DIR, stored_name)

    size = 0
    with open(destination, "wb") as buffer:
        while True:
            chunk = upload.file.read(CHUNK_SIZE)
            if not chunk:
                break
            size += len(chunk)
            if size > max_bytes:
                break
            buffer.write(chunk)

    if size > max_bytes:
        os.remove(destination)
        logger.warning(f"Rejected upload {upload.filename}: larger than {settings.MAX_UPLOAD_SIZE_MB}MB")
        raise ValidationError(f"File exceeds the maximum upload size of {settings.MAX_UPLOAD_SIZE_MB}MB")

    return stored_name, destination, size


def store_uploads(
    db: Session,
    uploads: List[UploadFile],
    uploaded_by: int,
    reference_id: Optional[int],
    reference_type: str,
) -> List[File]:
    """
    Write a batch of uploads and record them together.

    Either every file is stored or none is: if one upload is rejected the
    files already written for the batch are removed before the error is raised.
    """
    if len(uploads) > settings.MAX_UPLOAD_FILES:
        raise ValidationError(f"You can upload at most {settings.MAX_UPLOAD_FILES} files at once")

    written = []
    try:
        for upload in uploads:
            written.append((upload, *_write_upload(upload)))
    except ValidationError:
        for _, _, destination, _ in written:
            os.remove(destination)
        raise

    values_list = []
    for upload, stored_name, destination, size in written:
        extension = os.path.splitext(upload.filename or "")[1]
        values_list.append({
            "reference_id": reference_id,
            "reference_type": reference_type,
            "file_name": stored_name,
            "original_file_name": upload.filename,
            "file_extension": extension,
            "file_type": file_type_from_extension(extension).value,
            "file_size_mb": round(size / (1024 * 1024), 2),
            "file_path": destination,
            "storage_provider": StorageProvider.LOCAL.value,
            "uploaded_by": uploaded_by,
        })
    return crud_file.create_files(db, values_list)


def store_upload(
    db: Session,
    upload: UploadFile,
    uploaded_by: int,
    reference_id: Optional[int],
    reference_type: str,
) -> File:
    """Write a single upload to UPLOAD_DIR and record it"""
    return store_uploads(db, [upload], uploaded_by, reference_id, reference_type)[0]
