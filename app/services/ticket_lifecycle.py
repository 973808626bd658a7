"""
Ticket lifecycle: creation and updates.

Both operations follow the same shape:
1. Role policy (app.core.roles) decides whether the caller may act at all
   and, for technicians, which fields they may touch
2. Every referenced entity is checked against the caller's company
   (contract and branch belong to the company, zone belongs to the branch,
   assignees belong to the company and hold a suitable role)
3. The ticket is written and uploaded files are attached to it
"""

import logging
from typing import Optional, Tuple, Dict, Any, List

from pydantic.alias_generators import to_camel
from sqlalchemy.orm import Session

from app.core import roles
from app.core.errors import ValidationError, ForbiddenError, NotFoundError, InternalError
from app.crud import branch as crud_branch
from app.crud import company as crud_company
from app.crud import contract as crud_contract
from app.crud import lookup as crud_lookup
from app.crud import ticket as crud_ticket
from app.crud import user as crud_user
from app.crud import zone as crud_zone
from app.models.lookup import LookupCategory
from app.models.ticket import Ticket, TicketSource
from app.models.user import User
from app.schemas.ticket import TicketCreate, TicketUpdate, REQUIRED_CREATE_FIELDS
from app.services.file_relocation import relocate_ticket_files, RelocationReport

logger = logging.getLogger(__name__)

CREATE_FORBIDDEN = "You do not have permission to create tickets. Only Admin and Team Leader roles can create tickets"
TEAM_LEADER_SELF_ASSIGN = "Team Leaders can only assign tickets to themselves as the team leader"
UPDATE_RESTRICTED = "Your role is restricted and cannot update tickets"
UPDATE_FORBIDDEN = "You do not have permission to update tickets"
NOT_ASSIGNED_TECHNICIAN = "You can only update tickets assigned to you"
TICKET_NOT_FOUND = "Ticket not found or access denied"
INVALID_CONTRACT = "Invalid contract or contract does not belong to your company"
INVALID_BRANCH = "Invalid branch or branch does not belong to your company"
INVALID_ZONE = "Invalid zone or zone does not belong to the selected branch"
INVALID_TEAM_LEADER = "Invalid team leader or team leader does not belong to your company"
INVALID_TECHNICIAN = "Invalid technician or technician does not belong to your company"
INVALID_TICKET_TYPE = "Invalid ticket type"
INVALID_TICKET_STATUS = "Invalid ticket status"
INVALID_MAIN_SERVICE = "Invalid main service"
INVALID_TOOLS = "Invalid tools"
DEFAULT_STATUS_MISSING = "Default ticket status is not configured"
COMPANY_NOT_FOUND = "Company not found"

# Fields that reference other rows
RELATIONSHIP_FIELDS = {
    "contract_id",
    "branch_id",
    "zone_id",
    "ticket_type_id",
    "ticket_status_id",
    "main_service_id",
    "assign_to_team_leader_id",
    "assign_to_technician_id",
}

# Columns that cannot be cleared once a ticket exists
NON_NULLABLE_FIELDS = set(RELATIONSHIP_FIELDS) | {
    "ticket_title",
    "ticket_date",
    "ticket_time_from",
    "ticket_time_to",
    "having_female_engineer",
    "with_material",
    "source",
}


def _technician_field_error(unauthorized: List[str]) -> ForbiddenError:
    return ForbiddenError(
        f"Technicians can only update ticketStatusId and serviceDescription. Unauthorized fields: {', '.join(unauthorized)}",
        unauthorizedFields=unauthorized,
    )


# ── Referential checks ─────────────────────────────────────────────────


def _validate_contract(db: Session, contract_id: int, company_id: int) -> None:
    if not crud_contract.get_contract_in_company(db, contract_id, company_id):
        raise ValidationError(INVALID_CONTRACT)


def _validate_branch(db: Session, branch_id: int, company_id: int) -> None:
    if not crud_branch.get_branch_in_company(db, branch_id, company_id):
        raise ValidationError(INVALID_BRANCH)


def _validate_zone(db: Session, zone_id: int, branch_id: int) -> None:
    if not crud_zone.get_zone_in_branch(db, zone_id, branch_id):
        raise ValidationError(INVALID_ZONE)


def _validate_team_leader(db: Session, user_id: int, company_id: int) -> None:
    team_leader = crud_user.get_user_in_company(db, user_id, company_id)
    if not team_leader or not roles.is_valid_team_leader(team_leader.user_role_id):
        raise ValidationError(INVALID_TEAM_LEADER)


def _validate_technician(db: Session, user_id: int, company_id: int) -> None:
    technician = crud_user.get_user_in_company(db, user_id, company_id)
    if not technician or not roles.is_valid_technician(technician.user_role_id):
        raise ValidationError(INVALID_TECHNICIAN)


def _validate_lookup(db: Session, lookup_id: int, category: LookupCategory, message: str) -> None:
    if not crud_lookup.get_active_lookup(db, lookup_id, category):
        raise ValidationError(message)


def _validate_tools(db: Session, tool_ids: List[int]) -> None:
    unique_ids = set(tool_ids)
    found = crud_lookup.get_active_lookups_by_ids(db, unique_ids, LookupCategory.TOOL)
    if len(found) != len(unique_ids):
        missing = sorted(unique_ids - {tool.id for tool in found})
        raise ValidationError(f"{INVALID_TOOLS}: {', '.join(str(tool_id) for tool_id in missing)}")


# ── Create ─────────────────────────────────────────────────────────────


def create_ticket(db: Session, user: User, payload: TicketCreate) -> Tuple[Ticket, Optional[RelocationReport]]:
    """Create a ticket for the caller's company and attach any uploaded files"""
    if not roles.can_create_ticket(user.user_role_id):
        logger.warning(f"User {user.id} with role {user.user_role_id} attempted to create a ticket")
        raise ForbiddenError(CREATE_FORBIDDEN)

    provided = payload.model_dump(by_alias=True)
    missing = [name for name in REQUIRED_CREATE_FIELDS if provided.get(name) is None]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}", missingFields=missing)

    if not roles.team_leader_self_assign_only(user.user_role_id, user.id, payload.assign_to_team_leader_id):
        logger.warning(f"Team leader {user.id} attempted to assign ticket to team leader {payload.assign_to_team_leader_id}")
        raise ForbiddenError(TEAM_LEADER_SELF_ASSIGN)

    company_id = user.company_id
    _validate_contract(db, payload.contract_id, company_id)
    _validate_branch(db, payload.branch_id, company_id)
    _validate_zone(db, payload.zone_id, payload.branch_id)
    _validate_team_leader(db, payload.assign_to_team_leader_id, company_id)
    _validate_technician(db, payload.assign_to_technician_id, company_id)
    if payload.tools:
        _validate_tools(db, payload.tools)

    _validate_lookup(db, payload.ticket_type_id, LookupCategory.TICKET_TYPE, INVALID_TICKET_TYPE)
    _validate_lookup(db, payload.main_service_id, LookupCategory.MAIN_SERVICE, INVALID_MAIN_SERVICE)

    default_status = crud_lookup.get_default_lookup(db, LookupCategory.TICKET_STATUS)
    if not default_status:
        logger.error("No default TicketStatus lookup found; lookup catalog is not seeded")
        raise InternalError(DEFAULT_STATUS_MISSING)

    company = crud_company.get_company_by_id(db, company_id)
    if not company or not company.is_active:
        raise NotFoundError(COMPANY_NOT_FOUND)
    short_name = crud_company.company_short_name(company)

    values = payload.model_dump(exclude={"file_ids"})
    values.update(
        company_id=company_id,
        ticket_status_id=default_status.id,
        having_female_engineer=bool(payload.having_female_engineer),
        with_material=bool(payload.with_material),
        source=(payload.source or TicketSource.WEB).value,
        created_by=user.id,
        updated_by=user.id,
    )
    ticket = crud_ticket.create_ticket_with_code(
        db,
        values,
        build_code=lambda ticket_id: f"{short_name}-TKT-{ticket_id}",
    )
    logger.info(f"Ticket {ticket.ticket_code_id} created by user {user.id}")

    report = None
    if payload.file_ids:
        report = relocate_ticket_files(db, payload.file_ids, ticket.id, user.company_id)
    return ticket, report


# ── Update ─────────────────────────────────────────────────────────────


def _validate_update_references(db: Session, user: User, ticket: Ticket, changes: Dict[str, Any]) -> None:
    """Re-run the creation checks for every relationship field present in the update"""
    company_id = user.company_id

    if "contract_id" in changes:
        _validate_contract(db, changes["contract_id"], company_id)
    if "branch_id" in changes:
        _validate_branch(db, changes["branch_id"], company_id)
    if "branch_id" in changes or "zone_id" in changes:
        # Zone must stay inside the ticket's branch whichever side changed
        _validate_zone(
            db,
            changes.get("zone_id", ticket.zone_id),
            changes.get("branch_id", ticket.branch_id),
        )
    if "ticket_type_id" in changes:
        _validate_lookup(db, changes["ticket_type_id"], LookupCategory.TICKET_TYPE, INVALID_TICKET_TYPE)
    if "ticket_status_id" in changes:
        _validate_lookup(db, changes["ticket_status_id"], LookupCategory.TICKET_STATUS, INVALID_TICKET_STATUS)
    if "main_service_id" in changes:
        _validate_lookup(db, changes["main_service_id"], LookupCategory.MAIN_SERVICE, INVALID_MAIN_SERVICE)
    if "assign_to_team_leader_id" in changes:
        _validate_team_leader(db, changes["assign_to_team_leader_id"], company_id)
    if "assign_to_technician_id" in changes:
        _validate_technician(db, changes["assign_to_technician_id"], company_id)
    if changes.get("tools"):
        _validate_tools(db, changes["tools"])


def update_ticket(
    db: Session,
    user: User,
    ticket_id: int,
    payload: TicketUpdate,
) -> Tuple[Ticket, Optional[RelocationReport]]:
    """Apply a partial update to a ticket, honouring the caller's role restrictions"""
    role = roles.resolve_role(user.user_role_id)
    if role == roles.Role.RESTRICTED:
        logger.warning(f"Restricted user {user.id} attempted to update ticket {ticket_id}")
        raise ForbiddenError(UPDATE_RESTRICTED)
    if not roles.can_update_ticket(user.user_role_id):
        raise ForbiddenError(UPDATE_FORBIDDEN)

    ticket = crud_ticket.get_ticket_in_company(db, ticket_id, user.company_id)
    if not ticket:
        raise NotFoundError(TICKET_NOT_FOUND)

    technician = roles.is_technician(user.user_role_id)
    if technician and ticket.assign_to_technician_id != user.id:
        logger.warning(f"Technician {user.id} attempted to update ticket {ticket_id} assigned to someone else")
        raise ForbiddenError(NOT_ASSIGNED_TECHNICIAN)

    provided = [name for name in payload.model_dump(exclude_unset=True, by_alias=True) if name != "fileIds"]
    allowed = roles.allowed_update_fields(user.user_role_id)
    if allowed is not None:
        unauthorized = [name for name in provided if name not in allowed]
        if unauthorized:
            logger.warning(f"Technician {user.id} attempted to update restricted fields {unauthorized} on ticket {ticket_id}")
            raise _technician_field_error(unauthorized)

    changes = payload.model_dump(exclude_unset=True, exclude={"file_ids"})
    cleared = [to_camel(name) for name, value in changes.items() if value is None and name in NON_NULLABLE_FIELDS]
    if cleared:
        raise ValidationError(f"Required fields cannot be empty: {', '.join(cleared)}", missingFields=cleared)

    _validate_update_references(db, user, ticket, changes)

    if "assign_to_team_leader_id" in changes and not roles.team_leader_self_assign_only(
        user.user_role_id, user.id, changes["assign_to_team_leader_id"]
    ):
        logger.warning(f"Team leader {user.id} attempted to reassign ticket {ticket_id} to another team leader")
        raise ForbiddenError(TEAM_LEADER_SELF_ASSIGN)

    if "source" in changes:
        changes["source"] = changes["source"].value

    ticket = crud_ticket.update_ticket(db, ticket, changes, updated_by=user.id)
    logger.info(f"Ticket {ticket.ticket_code_id} updated by user {user.id}: {sorted(changes)}")

    report = None
    if payload.file_ids:
        report = relocate_ticket_files(db, payload.file_ids, ticket.id, user.company_id)
    return ticket, report
