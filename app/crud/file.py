from sqlalchemy.orm import Session
from app.models.file import File
from app.models.user import User
from typing import Optional, List, Dict, Any
from datetime import datetime, timezone


def _company_files(db: Session, company_id: int):
    """Non-deleted files uploaded by users of a company"""
    return db.query(File).join(User, File.uploaded_by == User.id).filter(
        User.company_id == company_id,
        File.is_deleted == False,
    )


def get_company_file(db: Session, file_id: int, company_id: int) -> Optional[File]:
    """Get a file by ID if it was uploaded within the company"""
    return _company_files(db, company_id).filter(File.id == file_id).first()


def get_files_by_reference(db: Session, reference_id: int, reference_type: str, company_id: int) -> List[File]:
    """Get a company's files attached to an entity, newest first"""
    return _company_files(db, company_id).filter(
        File.reference_id == reference_id,
        File.reference_type == reference_type,
    ).order_by(File.uploaded_at.desc(), File.id.desc()).all()


def create_files(db: Session, values_list: List[Dict[str, Any]]) -> List[File]:
    """Create several file records in one commit"""
    db_files = [File(**values) for values in values_list]
    db.add_all(db_files)
    db.commit()
    for db_file in db_files:
        db.refresh(db_file)
    return db_files


def update_file_location(
    db: Session,
    db_file: File,
    file_path: str,
    reference_id: int,
    reference_type: str,
) -> File:
    """Point a file record at its new path and owner"""
    db_file.file_path = file_path
    db_file.reference_id = reference_id
    db_file.reference_type = reference_type
    db.commit()
    db.refresh(db_file)
    return db_file


def soft_delete_file(db: Session, db_file: File, deleted_by: int) -> File:
    """Flag a file as deleted; the physical file is kept"""
    db_file.is_deleted = True
    db_file.deleted_at = datetime.now(timezone.utc)
    db_file.deleted_by = deleted_by
    db.commit()
    db.refresh(db_file)
    return db_file
