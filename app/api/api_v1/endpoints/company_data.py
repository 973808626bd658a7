from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional

from app.db.session import get_db
from app.api.deps import get_company_user, get_current_user
from app.core.roles import Role
from app.core.errors import ValidationError
from app.models.user import User
from app.models.lookup import LookupCategory
from app.schemas.common import APIResponse, ErrorResponse
from app.schemas.company_data import (
    ContractOption,
    BranchOption,
    ZoneOption,
    ServiceOption,
    UserOption,
    LookupOption,
)
from app.crud import branch as crud_branch
from app.crud import contract as crud_contract
from app.crud import lookup as crud_lookup
from app.crud import user as crud_user
from app.crud import zone as crud_zone

router = APIRouter()

ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "User has no company or invalid filter"},
    401: {"model": ErrorResponse, "description": "Not authenticated"},
}


@router.get(
    "/company-data/contracts",
    response_model=APIResponse[List[ContractOption]],
    status_code=status.HTTP_200_OK,
    tags=["Company Data"],
    responses=ERROR_RESPONSES,
)
async def list_company_contracts(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_company_user),
):
    """Contracts of the caller's company"""
    contracts = crud_contract.get_contracts_by_company(db, current_user.company_id)
    data = [
        ContractOption(
            id=contract.id,
            title=contract.contract_reference,
            subtitle=contract.contract_title,
            contract_reference=contract.contract_reference,
            contract_title=contract.contract_title,
        )
        for contract in contracts
    ]
    return APIResponse[List[ContractOption]](message="Contracts retrieved successfully", data=data)


@router.get(
    "/company-data/branches",
    response_model=APIResponse[List[BranchOption]],
    status_code=status.HTTP_200_OK,
    tags=["Company Data"],
    responses=ERROR_RESPONSES,
)
async def list_company_branches(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_company_user),
):
    """Branches of the caller's company"""
    branches = crud_branch.get_branches_by_company(db, current_user.company_id)
    data = [
        BranchOption(
            id=branch.id,
            title=branch.branch_title,
            subtitle=branch.branch_name_arabic or branch.branch_name_english or "",
            branch_title=branch.branch_title,
            branch_name_arabic=branch.branch_name_arabic,
            branch_name_english=branch.branch_name_english,
        )
        for branch in branches
    ]
    return APIResponse[List[BranchOption]](message="Branches retrieved successfully", data=data)


@router.get(
    "/company-data/zones",
    response_model=APIResponse[List[ZoneOption]],
    status_code=status.HTTP_200_OK,
    tags=["Company Data"],
    responses=ERROR_RESPONSES,
)
async def list_company_zones(
    branch_id: Optional[int] = Query(None, alias="branchId"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_company_user),
):
    """Zones of the caller's company branches, optionally for a single branch"""
    if branch_id:
        branch = crud_branch.get_branch_in_company(db, branch_id, current_user.company_id)
        if not branch:
            raise ValidationError("Invalid branch or branch does not belong to your company")
        branch_ids = [branch.id]
    else:
        branch_ids = [branch.id for branch in crud_branch.get_branches_by_company(db, current_user.company_id)]

    data = [
        ZoneOption(
            id=zone.id,
            title=zone.zone_title,
            subtitle=zone.zone_number or zone.zone_description or "",
            zone_title=zone.zone_title,
            zone_number=zone.zone_number,
            zone_description=zone.zone_description,
        )
        for zone in crud_zone.get_zones_by_branches(db, branch_ids)
    ]
    return APIResponse[List[ZoneOption]](message="Zones retrieved successfully", data=data)


@router.get(
    "/company-data/main-services",
    response_model=APIResponse[List[ServiceOption]],
    status_code=status.HTTP_200_OK,
    tags=["Company Data"],
    responses=ERROR_RESPONSES,
)
async def list_main_services(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Active main services"""
    services = crud_lookup.get_lookups_by_category(db, LookupCategory.MAIN_SERVICE)
    data = [
        ServiceOption(
            id=service.id,
            title=service.name,
            subtitle=service.name_arabic or "",
            name=service.name,
            name_arabic=service.name_arabic,
            icon=service.icon,
            image=service.icon,
        )
        for service in services
    ]
    return APIResponse[List[ServiceOption]](message="Main services retrieved successfully", data=data)


@router.get(
    "/company-data/sub-services",
    response_model=APIResponse[List[ServiceOption]],
    status_code=status.HTTP_200_OK,
    tags=["Company Data"],
    responses=ERROR_RESPONSES,
)
async def list_sub_services(
    parent_service_id: Optional[int] = Query(None, alias="parentServiceId"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Active sub services, optionally under a single main service"""
    services = crud_lookup.get_lookups_by_category(db, LookupCategory.SUB_SERVICE, parent_lookup_id=parent_service_id)
    data = [
        ServiceOption(
            id=service.id,
            title=service.name,
            subtitle=service.name_arabic or "",
            name=service.name,
            name_arabic=service.name_arabic,
            parent_id=service.parent_lookup_id,
        )
        for service in services
    ]
    return APIResponse[List[ServiceOption]](message="Sub services retrieved successfully", data=data)


def _user_options(users: List[User]) -> List[UserOption]:
    return [
        UserOption(
            id=user.id,
            title=user.full_name,
            subtitle=user.user_number or user.email or "",
            full_name=user.full_name,
            user_number=user.user_number,
            email=user.email,
        )
        for user in users
    ]


@router.get(
    "/company-data/team-leaders",
    response_model=APIResponse[List[UserOption]],
    status_code=status.HTTP_200_OK,
    tags=["Company Data"],
    responses=ERROR_RESPONSES,
)
async def list_team_leaders(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_company_user),
):
    """Active team leaders of the caller's company"""
    users = crud_user.get_users_by_roles(db, current_user.company_id, [Role.TEAM_LEADER])
    return APIResponse[List[UserOption]](message="Team leaders retrieved successfully", data=_user_options(users))


@router.get(
    "/company-data/technicians",
    response_model=APIResponse[List[UserOption]],
    status_code=status.HTTP_200_OK,
    tags=["Company Data"],
    responses=ERROR_RESPONSES,
)
async def list_technicians(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_company_user),
):
    """Active technicians and sub technicians of the caller's company"""
    users = crud_user.get_users_by_roles(db, current_user.company_id, [Role.TECHNICIAN, Role.SUB_TECHNICIAN])
    return APIResponse[List[UserOption]](message="Technicians retrieved successfully", data=_user_options(users))


def _lookup_options(db: Session, category: LookupCategory) -> List[LookupOption]:
    return [
        LookupOption(
            id=lookup.id,
            title=lookup.name,
            subtitle=lookup.name_arabic or "",
            name=lookup.name,
            name_arabic=lookup.name_arabic,
        )
        for lookup in crud_lookup.get_lookups_by_category(db, category)
    ]


@router.get(
    "/company-data/ticket-types",
    response_model=APIResponse[List[LookupOption]],
    status_code=status.HTTP_200_OK,
    tags=["Company Data"],
    responses=ERROR_RESPONSES,
)
async def list_ticket_types(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Active ticket types"""
    data = _lookup_options(db, LookupCategory.TICKET_TYPE)
    return APIResponse[List[LookupOption]](message="Ticket types retrieved successfully", data=data)


@router.get(
    "/company-data/ticket-statuses",
    response_model=APIResponse[List[LookupOption]],
    status_code=status.HTTP_200_OK,
    tags=["Company Data"],
    responses=ERROR_RESPONSES,
)
async def list_ticket_statuses(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Active ticket statuses"""
    data = _lookup_options(db, LookupCategory.TICKET_STATUS)
    return APIResponse[List[LookupOption]](message="Ticket statuses retrieved successfully", data=data)
