"""
Role policy for tickets.

Users carry a legacy numeric role code (``users.user_role_id``). Every
decision below goes through :func:`resolve_role` so the magic numbers live
in exactly one place.
"""
from enum import IntEnum
from typing import Optional, Set, Dict, Any


class Role(IntEnum):
    ADMIN = 18
    TEAM_LEADER = 20
    TECHNICIAN = 21
    SUB_TECHNICIAN = 22
    RESTRICTED = 23
    SUPER_USER = 26


TECHNICIAN_ROLES = frozenset({Role.TECHNICIAN, Role.SUB_TECHNICIAN})
CREATOR_ROLES = frozenset({Role.ADMIN, Role.TEAM_LEADER})
UPDATER_ROLES = frozenset({Role.ADMIN, Role.TEAM_LEADER, Role.TECHNICIAN, Role.SUB_TECHNICIAN, Role.SUPER_USER})

# Wire names of the fields a technician may change on an assigned ticket
TECHNICIAN_UPDATABLE_FIELDS = frozenset({"ticketStatusId", "serviceDescription"})


def resolve_role(role_id: Optional[int]) -> Optional[Role]:
    """Translate a legacy role code; unknown codes resolve to None"""
    try:
        return Role(role_id)
    except (ValueError, TypeError):
        return None


def is_technician(role_id: Optional[int]) -> bool:
    return resolve_role(role_id) in TECHNICIAN_ROLES


def can_create_ticket(role_id: Optional[int]) -> bool:
    return resolve_role(role_id) in CREATOR_ROLES


def can_update_ticket(role_id: Optional[int]) -> bool:
    return resolve_role(role_id) in UPDATER_ROLES


def allowed_update_fields(role_id: Optional[int]) -> Optional[Set[str]]:
    """
    Fields a role may write on update.

    Returns None when the role is unrestricted, an empty set when the role
    cannot update at all.
    """
    if not can_update_ticket(role_id):
        return set()
    if is_technician(role_id):
        return set(TECHNICIAN_UPDATABLE_FIELDS)
    return None


def ticket_visibility_scope(role_id: Optional[int], user_id: int) -> Dict[str, Any]:
    """Extra ticket column filters applied on top of the company scope"""
    if is_technician(role_id):
        return {"assign_to_technician_id": user_id}
    return {}


def team_leader_self_assign_only(role_id: Optional[int], user_id: int, requested_team_leader_id: Optional[int]) -> bool:
    """False when a team leader tries to assign a ticket to another team leader"""
    if resolve_role(role_id) != Role.TEAM_LEADER:
        return True
    return requested_team_leader_id == user_id


def is_valid_team_leader(role_id: Optional[int]) -> bool:
    return resolve_role(role_id) == Role.TEAM_LEADER


def is_valid_technician(role_id: Optional[int]) -> bool:
    """Any company user except admins and team leaders can be the assigned technician"""
    return role_id not in (Role.ADMIN, Role.TEAM_LEADER)
