from datetime import datetime
from typing import Optional, List

from app.schemas.common import CamelModel


class FileOut(CamelModel):
    """Stored file metadata"""
    id: int
    file_name: str
    original_file_name: Optional[str] = None
    file_extension: Optional[str] = None
    file_type: str
    file_size_mb: float
    file_path: str
    public_path: Optional[str] = None
    reference_id: Optional[int] = None
    reference_type: Optional[str] = None
    uploaded_at: Optional[datetime] = None


class FileRelocationOut(CamelModel):
    """Per-file outcome of attaching uploads to a ticket"""
    file_id: int
    status: str
    path: Optional[str] = None
    reason: Optional[str] = None


class FileRelocationReportOut(CamelModel):
    relocated: int
    already_in_place: int
    skipped: int
    results: List[FileRelocationOut]
