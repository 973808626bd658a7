from datetime import date, time

import pytest

from app.models.company import Company
from app.models.lookup import Lookup
from app.models.ticket import Ticket
from app.schemas.ticket import REQUIRED_CREATE_FIELDS
from app.services import ticket_lifecycle

URL = "/api/v1/tickets"


def test_admin_creates_ticket_with_company_code(client, world, ticket_payload, auth):
    response = client.post(URL, json=ticket_payload(tools=[world.ladder]), headers=auth(world.admin))

    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert body["message"] == "Ticket created successfully"

    data = body["data"]
    assert data["ticketCodeId"] == f"GAMMA-TKT-{data['id']}"
    assert data["companyId"] == world.company
    assert data["ticketStatus"]["id"] == world.pending
    assert data["ticketStatus"]["name"] == "Pending"
    assert data["ticketType"]["name"] == "Corrective"
    assert data["source"] == "Web"
    assert data["havingFemaleEngineer"] is False
    assert data["withMaterial"] is False
    assert data["creator"]["id"] == world.admin
    assert data["assignToTechnician"]["fullName"] == "Ted Technician"
    assert data["tools"] == [{"id": world.ladder, "title": "Ladder", "titleAr": "سلم"}]
    assert data["fileRelocation"] is None


def test_ticket_code_uses_generated_id(client, db, world, ticket_payload, auth):
    db.add(Ticket(
        id=41,
        ticket_code_id="GAMMA-TKT-41",
        company_id=world.company,
        contract_id=world.contract,
        branch_id=world.branch,
        zone_id=world.zone,
        ticket_title="Earlier ticket",
        ticket_type_id=world.corrective,
        ticket_status_id=world.pending,
        ticket_date=date(2025, 1, 1),
        ticket_time_from=time(9, 0),
        ticket_time_to=time(10, 0),
        assign_to_team_leader_id=world.team_leader,
        assign_to_technician_id=world.technician,
        main_service_id=world.hvac,
    ))
    db.commit()

    response = client.post(URL, json=ticket_payload(), headers=auth(world.admin))

    assert response.status_code == 201
    assert response.json()["data"]["id"] == 42
    assert response.json()["data"]["ticketCodeId"] == "GAMMA-TKT-42"


def test_team_leader_creates_ticket_assigned_to_self(client, world, ticket_payload, auth):
    response = client.post(URL, json=ticket_payload(), headers=auth(world.team_leader))

    assert response.status_code == 201
    assert response.json()["data"]["assignToTeamLeaderId"] == world.team_leader


def test_team_leader_cannot_assign_another_team_leader(client, world, ticket_payload, auth):
    payload = ticket_payload(assignToTeamLeaderId=world.other_team_leader)
    response = client.post(URL, json=payload, headers=auth(world.team_leader))

    assert response.status_code == 403
    assert response.json()["message"] == ticket_lifecycle.TEAM_LEADER_SELF_ASSIGN
    assert response.json()["code"] == "FORBIDDEN"


@pytest.mark.parametrize("role_user", ["technician", "sub_technician", "restricted", "super_user"])
def test_non_creator_roles_are_forbidden(client, world, ticket_payload, auth, role_user):
    response = client.post(URL, json=ticket_payload(), headers=auth(getattr(world, role_user)))

    assert response.status_code == 403
    body = response.json()
    assert body["success"] is False
    assert body["message"] == ticket_lifecycle.CREATE_FORBIDDEN


def test_non_creator_role_is_forbidden_even_with_empty_payload(client, world, auth):
    response = client.post(URL, json={}, headers=auth(world.technician))

    assert response.status_code == 403


@pytest.mark.parametrize("role_user", ["technician", "restricted", "super_user"])
@pytest.mark.parametrize("body", [
    {"contractId": "abc"},
    {"ticketDate": "not-a-date", "tools": "ladder"},
    ["not", "an", "object"],
])
def test_non_creator_role_is_forbidden_before_body_validation(client, world, auth, role_user, body):
    response = client.post(URL, json=body, headers=auth(getattr(world, role_user)))

    assert response.status_code == 403
    assert response.json()["message"] == ticket_lifecycle.CREATE_FORBIDDEN


def test_missing_fields_are_reported_together(client, world, auth):
    response = client.post(URL, json={"ticketTitle": "Leaking pipe"}, headers=auth(world.admin))

    assert response.status_code == 400
    body = response.json()
    expected = [name for name in REQUIRED_CREATE_FIELDS if name != "ticketTitle"]
    assert body["missingFields"] == expected
    assert body["message"] == f"Missing required fields: {', '.join(expected)}"
    assert body["code"] == "VALIDATION_ERROR"


def test_empty_payload_lists_every_required_field(client, world, auth):
    response = client.post(URL, json={}, headers=auth(world.team_leader))

    assert response.status_code == 400
    assert response.json()["missingFields"] == list(REQUIRED_CREATE_FIELDS)


def test_blank_title_counts_as_missing(client, world, ticket_payload, auth):
    response = client.post(URL, json=ticket_payload(ticketTitle="   "), headers=auth(world.admin))

    assert response.status_code == 400
    assert response.json()["missingFields"] == ["ticketTitle"]


def test_zone_outside_branch_is_rejected(client, world, ticket_payload, auth):
    payload = ticket_payload(zoneId=world.second_zone)
    response = client.post(URL, json=payload, headers=auth(world.admin))

    assert response.status_code == 400
    assert response.json()["message"] == "Invalid zone or zone does not belong to the selected branch"


@pytest.mark.parametrize("overrides, message", [
    ({"contractId": "other_contract"}, ticket_lifecycle.INVALID_CONTRACT),
    ({"branchId": "other_branch"}, ticket_lifecycle.INVALID_BRANCH),
    ({"assignToTeamLeaderId": "technician"}, ticket_lifecycle.INVALID_TEAM_LEADER),
    ({"assignToTechnicianId": "outsider_technician"}, ticket_lifecycle.INVALID_TECHNICIAN),
    ({"assignToTechnicianId": "admin"}, ticket_lifecycle.INVALID_TECHNICIAN),
    ({"ticketTypeId": "hvac"}, ticket_lifecycle.INVALID_TICKET_TYPE),
    ({"mainServiceId": "ac_repair"}, ticket_lifecycle.INVALID_MAIN_SERVICE),
])
def test_cross_company_and_invalid_references_are_rejected(client, world, ticket_payload, auth, overrides, message):
    payload = ticket_payload(**{key: getattr(world, value) for key, value in overrides.items()})
    response = client.post(URL, json=payload, headers=auth(world.admin))

    assert response.status_code == 400
    assert response.json()["message"] == message


def test_inactive_tool_is_rejected(client, world, ticket_payload, auth):
    payload = ticket_payload(tools=[world.ladder, world.inactive_tool])
    response = client.post(URL, json=payload, headers=auth(world.admin))

    assert response.status_code == 400
    assert response.json()["message"] == f"Invalid tools: {world.inactive_tool}"


def test_missing_default_status_is_a_server_error(client, db, world, ticket_payload, auth):
    db.query(Lookup).filter(Lookup.id == world.pending).update({"is_default": False})
    db.commit()

    response = client.post(URL, json=ticket_payload(), headers=auth(world.admin))

    assert response.status_code == 500
    assert response.json()["message"] == ticket_lifecycle.DEFAULT_STATUS_MISSING
    assert db.query(Ticket).count() == 0


def test_malformed_body_returns_validation_envelope(client, world, ticket_payload, auth):
    response = client.post(URL, json=ticket_payload(ticketDate="not-a-date"), headers=auth(world.admin))

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["code"] == "VALIDATION_ERROR"
    assert body["errors"]


def test_mobile_source_is_stored(client, world, ticket_payload, auth):
    response = client.post(URL, json=ticket_payload(source="Mobile", withMaterial=True), headers=auth(world.admin))

    assert response.status_code == 201
    assert response.json()["data"]["source"] == "Mobile"
    assert response.json()["data"]["withMaterial"] is True


def test_inactive_company_cannot_raise_tickets(client, db, world, ticket_payload, auth):
    db.query(Company).filter(Company.id == world.company).update({"is_active": False})
    db.commit()

    response = client.post(URL, json=ticket_payload(), headers=auth(world.admin))

    assert response.status_code == 404
    assert response.json()["message"] == ticket_lifecycle.COMPANY_NOT_FOUND
    assert db.query(Ticket).count() == 0
