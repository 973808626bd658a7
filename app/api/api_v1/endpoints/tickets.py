from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import Optional, List

from app.db.session import get_db
from app.api.deps import get_company_user, get_ticket_creator, get_ticket_updater
from app.core import roles
from app.models.user import User
from app.models.ticket import Ticket
from app.models.lookup import LookupCategory
from app.models.file import FileReferenceType
from app.schemas.common import APIResponse, ErrorResponse
from app.schemas.file import FileOut, FileRelocationReportOut
from app.schemas.lookup import ToolBrief
from app.schemas.user import UserBrief
from app.schemas.ticket import (
    TicketCreate,
    TicketUpdate,
    TicketOut,
    TicketDetailOut,
    TicketBucket,
    TicketListData,
    TicketStatisticsOut,
    TicketTypeCounts,
    Pagination,
    ContractBrief,
    BranchBrief,
    ZoneBrief,
)
from app.crud import ticket as crud_ticket
from app.crud import lookup as crud_lookup
from app.crud import file as crud_file
from app.core.errors import NotFoundError
from app.services import ticket_lifecycle
from app.services.file_relocation import RelocationReport
from app.services.file_storage import public_path

router = APIRouter()

TYPE_BUCKETS = ("corrective", "preventive", "emergency")

ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Validation error"},
    401: {"model": ErrorResponse, "description": "Not authenticated"},
    403: {"model": ErrorResponse, "description": "Not allowed for this role"},
    404: {"model": ErrorResponse, "description": "Ticket not found"},
}


def _brief(schema, obj):
    return schema.model_validate(obj) if obj is not None else None


def _ticket_detail(db: Session, ticket: Ticket, report: Optional[RelocationReport] = None) -> TicketDetailOut:
    """Ticket with nested relations, resolved tool names and attachments"""
    base = TicketOut.model_validate(ticket).model_dump()
    base.pop("tools", None)

    tools: List[ToolBrief] = []
    if ticket.tools:
        tool_lookups = crud_lookup.get_active_lookups_by_ids(db, ticket.tools, LookupCategory.TOOL)
        tools = [ToolBrief(id=tool.id, title=tool.name, title_ar=tool.name_arabic) for tool in tool_lookups]

    files = [
        FileOut.model_validate(db_file).model_copy(update={"public_path": public_path(db_file.file_path)})
        for db_file in crud_file.get_files_by_reference(
            db, ticket.id, FileReferenceType.TICKET_ATTACHMENT.value, ticket.company_id
        )
    ]

    return TicketDetailOut(
        **base,
        contract=_brief(ContractBrief, ticket.contract),
        branch=_brief(BranchBrief, ticket.branch),
        zone=_brief(ZoneBrief, ticket.zone),
        assign_to_team_leader=_brief(UserBrief, ticket.assign_to_team_leader),
        assign_to_technician=_brief(UserBrief, ticket.assign_to_technician),
        creator=_brief(UserBrief, ticket.creator),
        updater=_brief(UserBrief, ticket.updater),
        tools=tools,
        files=files,
        file_relocation=FileRelocationReportOut(**report.to_dict()) if report else None,
    )


def _ticket_types_by_bucket(db: Session) -> dict:
    """Map bucket name (corrective/preventive/emergency) to its TicketType lookup"""
    ticket_types = crud_lookup.get_lookups_by_category(db, LookupCategory.TICKET_TYPE)
    by_name = {ticket_type.name.lower(): ticket_type for ticket_type in ticket_types}
    return {bucket: by_name.get(bucket) for bucket in TYPE_BUCKETS}


@router.get(
    "/tickets",
    response_model=APIResponse[TicketListData],
    status_code=status.HTTP_200_OK,
    tags=["Tickets"],
    responses=ERROR_RESPONSES,
)
async def list_tickets(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_company_user),
):
    """
    Paginated tickets for the caller's company, grouped by ticket type.

    Technicians only see tickets assigned to them. Each bucket's `total` is
    the full count for that type; `tickets` holds the current page's items.
    """
    company_id = current_user.company_id
    scope = roles.ticket_visibility_scope(current_user.user_role_id, current_user.id)

    tickets = crud_ticket.get_tickets_page(db, company_id, scope, skip=(page - 1) * limit, limit=limit)
    total = crud_ticket.count_tickets(db, company_id, scope)
    page_items = [TicketOut.model_validate(ticket) for ticket in tickets]

    buckets = {}
    for bucket, ticket_type in _ticket_types_by_bucket(db).items():
        if ticket_type is None:
            buckets[bucket] = TicketBucket(total=0, tickets=[])
            continue
        buckets[bucket] = TicketBucket(
            total=crud_ticket.count_tickets(db, company_id, scope, ticket_type_id=ticket_type.id),
            tickets=[item for item in page_items if item.ticket_type and item.ticket_type.id == ticket_type.id],
        )

    data = TicketListData(
        **buckets,
        all=TicketBucket(total=total, tickets=page_items),
        pagination=Pagination(page=page, limit=limit, total=total, has_more=page * limit < total),
    )
    return APIResponse[TicketListData](message="Tickets retrieved successfully", data=data)


@router.get(
    "/tickets/statistics",
    response_model=APIResponse[TicketStatisticsOut],
    status_code=status.HTTP_200_OK,
    tags=["Tickets"],
    responses=ERROR_RESPONSES,
)
async def get_ticket_statistics(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_company_user),
):
    """Ticket counts per type and per status for the caller's company"""
    company_id = current_user.company_id
    scope = roles.ticket_visibility_scope(current_user.user_role_id, current_user.id)

    by_type = {}
    for bucket, ticket_type in _ticket_types_by_bucket(db).items():
        by_type[bucket] = (
            crud_ticket.count_tickets(db, company_id, scope, ticket_type_id=ticket_type.id) if ticket_type else 0
        )

    status_counts = crud_ticket.count_tickets_by_status(db, company_id, scope)
    by_status = {
        ticket_status.name: status_counts.get(ticket_status.id, 0)
        for ticket_status in crud_lookup.get_lookups_by_category(db, LookupCategory.TICKET_STATUS)
    }

    data = TicketStatisticsOut(
        by_type=TicketTypeCounts(**by_type, total=sum(by_type.values())),
        by_status=by_status,
    )
    return APIResponse[TicketStatisticsOut](message="Ticket statistics retrieved successfully", data=data)


@router.get(
    "/tickets/{ticket_id}",
    response_model=APIResponse[TicketDetailOut],
    status_code=status.HTTP_200_OK,
    tags=["Tickets"],
    responses=ERROR_RESPONSES,
)
async def get_ticket(
    ticket_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_company_user),
):
    """Get a single ticket with its relations and attachments"""
    scope = roles.ticket_visibility_scope(current_user.user_role_id, current_user.id)
    ticket = crud_ticket.get_ticket_in_company(db, ticket_id, current_user.company_id, scope)
    if not ticket:
        raise NotFoundError(ticket_lifecycle.TICKET_NOT_FOUND)

    return APIResponse[TicketDetailOut](message="Ticket retrieved successfully", data=_ticket_detail(db, ticket))


@router.post(
    "/tickets",
    response_model=APIResponse[TicketDetailOut],
    status_code=status.HTTP_201_CREATED,
    tags=["Tickets"],
    responses={**ERROR_RESPONSES, 500: {"model": ErrorResponse, "description": "Lookup catalog not seeded"}},
)
async def create_ticket(
    ticket_data: TicketCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_ticket_creator),
):
    """
    Create a ticket (Admin and Team Leader only).

    Team leaders must assign the ticket to themselves. Files uploaded
    beforehand can be attached by passing their ids in `fileIds`.
    """
    ticket, report = ticket_lifecycle.create_ticket(db, current_user, ticket_data)
    return APIResponse[TicketDetailOut](message="Ticket created successfully", data=_ticket_detail(db, ticket, report))


@router.put(
    "/tickets/{ticket_id}",
    response_model=APIResponse[TicketDetailOut],
    status_code=status.HTTP_200_OK,
    tags=["Tickets"],
    responses=ERROR_RESPONSES,
)
async def update_ticket(
    ticket_id: int,
    ticket_data: TicketUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_ticket_updater),
):
    """
    Partially update a ticket.

    Technicians may only change `ticketStatusId` and `serviceDescription`
    on tickets assigned to them; restricted users cannot update at all.
    """
    ticket, report = ticket_lifecycle.update_ticket(db, current_user, ticket_id, ticket_data)
    return APIResponse[TicketDetailOut](message="Ticket updated successfully", data=_ticket_detail(db, ticket, report))
