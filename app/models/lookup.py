from sqlalchemy import Column, String, Boolean, Integer, ForeignKey, Enum as SQLEnum
from sqlalchemy.orm import relationship
from enum import Enum
from app.db.session import Base


class LookupCategory(str, Enum):
    """Reference data categories"""
    MAIN_SERVICE = "MainService"
    SUB_SERVICE = "SubService"
    TOOL = "Tool"
    USER_ROLE = "UserRole"
    TICKET_TYPE = "TicketType"
    TICKET_STATUS = "TicketStatus"
    TICKET_PROCESS = "TicketProcess"


class Lookup(Base):
    """Generic reference data row (ticket types, statuses, services, tools)"""
    __tablename__ = "lookups"

    id = Column(Integer, primary_key=True, index=True)
    category = Column(SQLEnum(LookupCategory), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    name_arabic = Column(String(255), nullable=True)
    code = Column(String(50), nullable=True)
    icon = Column(String(255), nullable=True)
    order_id = Column(Integer, default=0, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    is_default = Column(Boolean, default=False, nullable=False)
    parent_lookup_id = Column(Integer, ForeignKey("lookups.id", ondelete="SET NULL"), nullable=True, index=True)

    # Relationships
    parent = relationship("Lookup", remote_side=[id])

    def __repr__(self):
        return f"<Lookup(id={self.id}, category={self.category}, name={self.name})>"
