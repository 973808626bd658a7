from sqlalchemy import Column, String, Integer, Boolean, Float, DateTime, ForeignKey, func
from enum import Enum
from app.db.session import Base


class FileReferenceType(str, Enum):
    """Entity a stored file is attached to"""
    TICKET_ATTACHMENT = "TICKET_ATTACHMENT"
    COMPANY = "COMPANY"
    USER = "USER"
    LOGO = "LOGO"
    CONTRACT = "CONTRACT"
    GENERAL = "GENERAL"


class FileType(str, Enum):
    IMAGE = "image"
    PDF = "pdf"
    DOC = "doc"
    DOCX = "docx"
    EXCEL = "excel"
    VIDEO = "video"
    OTHER = "other"


class StorageProvider(str, Enum):
    LOCAL = "LOCAL"


class File(Base):
    """Uploaded file record; physical bytes live under settings.UPLOAD_DIR"""
    __tablename__ = "files"

    id = Column(Integer, primary_key=True, index=True)
    reference_id = Column(Integer, nullable=True, index=True)
    reference_type = Column(String(50), default=FileReferenceType.GENERAL.value, nullable=True)
    file_name = Column(String(255), nullable=False)
    original_file_name = Column(String(255), nullable=True)
    file_extension = Column(String(20), nullable=True)
    file_type = Column(String(20), default=FileType.OTHER.value, nullable=False)
    file_size_mb = Column(Float, default=0, nullable=False)
    file_path = Column(String(500), nullable=False)
    storage_provider = Column(String(20), default=StorageProvider.LOCAL.value, nullable=False)
    uploaded_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    uploaded_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    deleted_at = Column(DateTime(timezone=True), nullable=True)
    deleted_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    is_deleted = Column(Boolean, default=False, nullable=False)

    def __repr__(self):
        return f"<File(id={self.id}, name={self.file_name}, reference={self.reference_type}:{self.reference_id})>"
