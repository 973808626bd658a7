from pydantic import Field, field_validator
from typing import Optional, List, Dict
from datetime import date, time, datetime

from app.models.ticket import TicketSource
from app.schemas.common import CamelModel
from app.schemas.lookup import LookupBrief, ToolBrief
from app.schemas.user import UserBrief
from app.schemas.file import FileOut, FileRelocationReportOut


# Wire names a ticket cannot be created without, in the order they are reported
REQUIRED_CREATE_FIELDS = (
    "contractId",
    "branchId",
    "zoneId",
    "ticketTitle",
    "ticketTypeId",
    "ticketDate",
    "ticketTimeFrom",
    "ticketTimeTo",
    "mainServiceId",
    "assignToTeamLeaderId",
    "assignToTechnicianId",
)


class TicketFields(CamelModel):
    """
    Writable ticket fields.

    Everything is optional at the schema level: presence of required fields
    is checked by the ticket service so that every missing field can be
    reported in a single response.
    """
    contract_id: Optional[int] = None
    branch_id: Optional[int] = None
    zone_id: Optional[int] = None
    location_map: Optional[str] = Field(None, max_length=255)
    ticket_title: Optional[str] = Field(None, max_length=255)
    ticket_type_id: Optional[int] = None
    ticket_date: Optional[date] = None
    ticket_time_from: Optional[time] = None
    ticket_time_to: Optional[time] = None
    assign_to_team_leader_id: Optional[int] = None
    assign_to_technician_id: Optional[int] = None
    ticket_description: Optional[str] = Field(None, max_length=2000)
    having_female_engineer: Optional[bool] = None
    customer_name: Optional[str] = Field(None, max_length=255)
    with_material: Optional[bool] = None
    main_service_id: Optional[int] = None
    service_description: Optional[str] = None
    tools: Optional[List[int]] = None
    source: Optional[TicketSource] = None
    file_ids: Optional[List[int]] = None

    @field_validator("location_map", "ticket_title", "ticket_description", "customer_name", mode="before")
    @classmethod
    def convert_empty_strings_to_none(cls, v):
        """Convert empty strings to None for text fields"""
        if isinstance(v, str) and v.strip() == "":
            return None
        return v


class TicketCreate(TicketFields):
    """Schema for creating a ticket"""


class TicketUpdate(TicketFields):
    """Schema for a partial ticket update"""
    ticket_status_id: Optional[int] = None


class TicketOut(CamelModel):
    """Schema for returning ticket data in lists"""
    id: int
    ticket_code_id: str
    company_id: int
    contract_id: int
    branch_id: int
    zone_id: int
    location_map: Optional[str] = None
    ticket_title: str
    ticket_type: Optional[LookupBrief] = None
    ticket_status: Optional[LookupBrief] = None
    main_service: Optional[LookupBrief] = None
    ticket_date: date
    ticket_time_from: time
    ticket_time_to: time
    assign_to_team_leader_id: int
    assign_to_technician_id: int
    ticket_description: Optional[str] = None
    service_description: Optional[str] = None
    having_female_engineer: bool
    with_material: bool
    customer_name: Optional[str] = None
    tools: Optional[List[int]] = None
    source: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ContractBrief(CamelModel):
    id: int
    contract_reference: str
    contract_title: str


class BranchBrief(CamelModel):
    id: int
    branch_title: str
    branch_name_english: Optional[str] = None
    branch_name_arabic: Optional[str] = None


class ZoneBrief(CamelModel):
    id: int
    zone_title: str
    zone_number: Optional[str] = None


class TicketDetailOut(TicketOut):
    """Ticket with nested relations, resolved tools and attachments"""
    contract: Optional[ContractBrief] = None
    branch: Optional[BranchBrief] = None
    zone: Optional[ZoneBrief] = None
    assign_to_team_leader: Optional[UserBrief] = None
    assign_to_technician: Optional[UserBrief] = None
    creator: Optional[UserBrief] = None
    updater: Optional[UserBrief] = None
    tools: List[ToolBrief] = []
    files: List[FileOut] = []
    file_relocation: Optional[FileRelocationReportOut] = None


class TicketBucket(CamelModel):
    total: int
    tickets: List[TicketOut]


class Pagination(CamelModel):
    page: int
    limit: int
    total: int
    has_more: bool


class TicketListData(CamelModel):
    """Tickets grouped by ticket type"""
    corrective: TicketBucket
    preventive: TicketBucket
    emergency: TicketBucket
    all: TicketBucket
    pagination: Pagination


class TicketTypeCounts(CamelModel):
    corrective: int
    preventive: int
    emergency: int
    total: int


class TicketStatisticsOut(CamelModel):
    by_type: TicketTypeCounts
    by_status: Dict[str, int]
