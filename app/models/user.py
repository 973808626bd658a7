from sqlalchemy import Column, String, Boolean, DateTime, func, ForeignKey, Integer
from sqlalchemy.orm import relationship
from app.db.session import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    company_id = Column(Integer, ForeignKey("companies.id", ondelete="SET NULL"), nullable=True, index=True)
    # Legacy numeric role code, translated through app.core.roles.Role
    user_role_id = Column(Integer, nullable=False, index=True)
    full_name = Column(String(255), nullable=False)
    user_number = Column(String(50), nullable=True)
    email = Column(String(100), unique=True, index=True, nullable=True)
    mobile_number = Column(String(20), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    is_deleted = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    # Relationships
    company = relationship("Company", back_populates="users")

    def __repr__(self):
        return f"<User(id={self.id}, role={self.user_role_id}, company={self.company_id})>"
