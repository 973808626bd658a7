from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from app.db.session import get_db
from app.api.deps import get_company_user
from app.core.errors import ValidationError, NotFoundError
from app.models.user import User
from app.models.file import FileReferenceType
from app.schemas.common import APIResponse, ErrorResponse
from app.schemas.file import FileOut
from app.crud import file as crud_file
from app.services.file_storage import store_upload, store_uploads, public_path

logger = logging.getLogger(__name__)
router = APIRouter()

ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Validation error"},
    401: {"model": ErrorResponse, "description": "Not authenticated"},
}


def _reference_type(value: Optional[str], default: FileReferenceType) -> str:
    if not value:
        return default.value
    try:
        return FileReferenceType(value).value
    except ValueError:
        allowed = ", ".join(item.value for item in FileReferenceType)
        raise ValidationError(f"Invalid referenceType. Allowed values: {allowed}")


def _file_out(db_file) -> FileOut:
    return FileOut.model_validate(db_file).model_copy(update={"public_path": public_path(db_file.file_path)})


@router.post(
    "/files/upload",
    response_model=APIResponse[FileOut],
    status_code=status.HTTP_201_CREATED,
    tags=["Files"],
    responses=ERROR_RESPONSES,
)
async def upload_file(
    file: UploadFile = File(...),
    reference_id: Optional[int] = Form(None, alias="referenceId"),
    reference_type: Optional[str] = Form(None, alias="referenceType"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_company_user),
):
    """Upload a single file (any type, up to the configured size limit)"""
    ref_type = _reference_type(reference_type, FileReferenceType.GENERAL)
    db_file = store_upload(db, file, current_user.id, reference_id, ref_type)
    logger.info(f"User {current_user.id} uploaded file {db_file.id} ({db_file.file_name})")
    return APIResponse[FileOut](message="File uploaded successfully", data=_file_out(db_file))


@router.post(
    "/files/upload-multiple",
    response_model=APIResponse[List[FileOut]],
    status_code=status.HTTP_201_CREATED,
    tags=["Files"],
    responses=ERROR_RESPONSES,
)
async def upload_multiple_files(
    files: List[UploadFile] = File(...),
    reference_id: Optional[int] = Form(None, alias="referenceId"),
    reference_type: Optional[str] = Form(None, alias="referenceType"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_company_user),
):
    """Upload up to MAX_UPLOAD_FILES files at once; they default to ticket attachments"""
    if not files:
        raise ValidationError("No files uploaded")

    ref_type = _reference_type(reference_type, FileReferenceType.TICKET_ATTACHMENT)
    stored = store_uploads(db, files, current_user.id, reference_id, ref_type)
    logger.info(f"User {current_user.id} uploaded {len(stored)} file(s)")
    return APIResponse[List[FileOut]](message="Files uploaded successfully", data=[_file_out(f) for f in stored])


@router.get(
    "/files",
    response_model=APIResponse[List[FileOut]],
    status_code=status.HTTP_200_OK,
    tags=["Files"],
    responses=ERROR_RESPONSES,
)
async def list_files_by_reference(
    reference_id: Optional[int] = Query(None, alias="referenceId"),
    reference_type: Optional[str] = Query(None, alias="referenceType"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_company_user),
):
    """Company files attached to an entity, e.g. all attachments of a ticket"""
    if not reference_id or not reference_type:
        raise ValidationError("referenceId and referenceType are required")

    files = crud_file.get_files_by_reference(db, reference_id, reference_type, current_user.company_id)
    return APIResponse[List[FileOut]](message="Files retrieved successfully", data=[_file_out(f) for f in files])


@router.delete(
    "/files/{file_id}",
    response_model=APIResponse[None],
    status_code=status.HTTP_200_OK,
    tags=["Files"],
    responses={**ERROR_RESPONSES, 404: {"model": ErrorResponse, "description": "File not found"}},
)
async def delete_file(
    file_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_company_user),
):
    """Soft delete a file record"""
    db_file = crud_file.get_company_file(db, file_id, current_user.company_id)
    if not db_file:
        raise NotFoundError("File not found")

    crud_file.soft_delete_file(db, db_file, deleted_by=current_user.id)
    logger.info(f"User {current_user.id} deleted file {file_id}")
    return APIResponse[None](message="File deleted successfully")
