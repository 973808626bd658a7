from sqlalchemy import Column, Integer, String, Boolean, DateTime, func
from sqlalchemy.orm import relationship
from app.db.session import Base


class Company(Base):
    __tablename__ = "companies"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    short_code = Column(String(20), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    is_deleted = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    # Relationships
    branches = relationship("Branch", back_populates="company")
    contracts = relationship("Contract", back_populates="company")
    users = relationship("User", back_populates="company")

    def __repr__(self):
        return f"<Company(id={self.id}, title={self.title})>"
