from sqlalchemy import Column, String, Text, ForeignKey, Integer, Boolean, Date, Time, DateTime, JSON, func
from sqlalchemy.orm import relationship
from enum import Enum
from app.db.session import Base


class TicketSource(str, Enum):
    """Channel the ticket was raised from"""
    WEB = "Web"
    MOBILE = "Mobile"


class Ticket(Base):
    """Maintenance ticket raised against a company branch/zone"""
    __tablename__ = "tickets"

    id = Column(Integer, primary_key=True, index=True)
    # Human readable code, e.g. GAMMA-TKT-42
    ticket_code_id = Column(String(50), nullable=False, index=True)
    company_id = Column(Integer, ForeignKey("companies.id", ondelete="CASCADE"), nullable=False, index=True)
    contract_id = Column(Integer, ForeignKey("contracts.id"), nullable=False)
    branch_id = Column(Integer, ForeignKey("branches.id"), nullable=False)
    zone_id = Column(Integer, ForeignKey("zones.id"), nullable=False)

    location_map = Column(String(255), nullable=True)
    ticket_title = Column(String(255), nullable=False)
    ticket_type_id = Column(Integer, ForeignKey("lookups.id"), nullable=False)
    ticket_status_id = Column(Integer, ForeignKey("lookups.id"), nullable=False)
    ticket_date = Column(Date, nullable=False)
    ticket_time_from = Column(Time, nullable=False)
    ticket_time_to = Column(Time, nullable=False)

    assign_to_team_leader_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    assign_to_technician_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    ticket_description = Column(Text, nullable=True)
    having_female_engineer = Column(Boolean, default=False, nullable=False)
    customer_name = Column(String(255), nullable=True)
    with_material = Column(Boolean, default=False, nullable=False)
    main_service_id = Column(Integer, ForeignKey("lookups.id"), nullable=False)
    service_description = Column(Text, nullable=True)
    # Tool lookup ids
    tools = Column(JSON, nullable=True)
    source = Column(String(20), default=TicketSource.WEB.value, nullable=False)

    created_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    updated_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
    deleted_at = Column(DateTime(timezone=True), nullable=True)
    deleted_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    is_deleted = Column(Boolean, default=False, nullable=False)

    # Relationships
    company = relationship("Company")
    contract = relationship("Contract")
    branch = relationship("Branch")
    zone = relationship("Zone")
    ticket_type = relationship("Lookup", foreign_keys=[ticket_type_id])
    ticket_status = relationship("Lookup", foreign_keys=[ticket_status_id])
    main_service = relationship("Lookup", foreign_keys=[main_service_id])
    assign_to_team_leader = relationship("User", foreign_keys=[assign_to_team_leader_id])
    assign_to_technician = relationship("User", foreign_keys=[assign_to_technician_id])
    creator = relationship("User", foreign_keys=[created_by])
    updater = relationship("User", foreign_keys=[updated_by])

    def __repr__(self):
        return f"<Ticket(id={self.id}, code={self.ticket_code_id}, status={self.ticket_status_id})>"
