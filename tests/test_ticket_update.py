import pytest

from app.models.user import User
from app.services import ticket_lifecycle


def _url(ticket_id):
    return f"/api/v1/tickets/{ticket_id}"


def test_admin_updates_any_field(client, world, create_ticket, auth):
    ticket = create_ticket()

    response = client.put(
        _url(ticket["id"]),
        json={"ticketTitle": "Replace compressor", "ticketTypeId": world.emergency, "customerName": "Lobby desk"},
        headers=auth(world.admin),
    )

    assert response.status_code == 200
    data = response.json()["data"]
    assert response.json()["message"] == "Ticket updated successfully"
    assert data["ticketTitle"] == "Replace compressor"
    assert data["ticketType"]["name"] == "Emergency"
    assert data["customerName"] == "Lobby desk"
    assert data["ticketCodeId"] == ticket["ticketCodeId"]
    assert data["updater"]["id"] == world.admin


def test_unset_fields_are_left_untouched(client, world, create_ticket, auth):
    ticket = create_ticket(ticketDescription="Original description")

    response = client.put(_url(ticket["id"]), json={"customerName": "Front desk"}, headers=auth(world.admin))

    assert response.status_code == 200
    assert response.json()["data"]["ticketDescription"] == "Original description"


def test_technician_updates_status_and_service_description(client, world, create_ticket, auth):
    ticket = create_ticket()

    response = client.put(
        _url(ticket["id"]),
        json={"ticketStatusId": world.in_progress, "serviceDescription": "Replaced filter"},
        headers=auth(world.technician),
    )

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["ticketStatus"]["name"] == "In Progress"
    assert data["serviceDescription"] == "Replaced filter"
    assert data["updater"]["id"] == world.technician


def test_technician_cannot_touch_other_fields(client, world, create_ticket, auth):
    ticket = create_ticket()

    response = client.put(
        _url(ticket["id"]),
        json={"ticketStatusId": world.in_progress, "branchId": world.second_branch},
        headers=auth(world.technician),
    )

    assert response.status_code == 403
    body = response.json()
    assert body["unauthorizedFields"] == ["branchId"]
    assert "branchId" in body["message"]
    assert body["message"].startswith("Technicians can only update ticketStatusId and serviceDescription")


def test_technician_unauthorized_fields_all_listed(client, world, create_ticket, auth):
    ticket = create_ticket(assignToTechnicianId=world.sub_technician)

    response = client.put(
        _url(ticket["id"]),
        json={"zoneId": world.zone, "branchId": world.branch},
        headers=auth(world.sub_technician),
    )

    assert response.status_code == 403
    assert sorted(response.json()["unauthorizedFields"]) == ["branchId", "zoneId"]


def test_technician_cannot_update_ticket_assigned_to_someone_else(client, world, create_ticket, auth):
    ticket = create_ticket(assignToTechnicianId=world.second_technician)

    response = client.put(_url(ticket["id"]), json={"ticketStatusId": world.completed}, headers=auth(world.technician))

    assert response.status_code == 403
    assert response.json()["message"] == ticket_lifecycle.NOT_ASSIGNED_TECHNICIAN


@pytest.mark.parametrize("payload", [
    {},
    {"ticketStatusId": 1},
    {"serviceDescription": "anything"},
])
def test_restricted_role_can_never_update(client, world, create_ticket, auth, payload):
    ticket = create_ticket()

    response = client.put(_url(ticket["id"]), json=payload, headers=auth(world.restricted))

    assert response.status_code == 403
    assert response.json()["message"] == ticket_lifecycle.UPDATE_RESTRICTED


@pytest.mark.parametrize("ticket_ref, payload", [
    ("existing", {"branchId": "x"}),
    ("existing", {"ticketDate": "yesterday-ish", "tools": 5}),
    ("abc", {"ticketTitle": "x"}),
    ("abc", {"branchId": "x"}),
])
def test_restricted_role_is_forbidden_before_validation(client, world, create_ticket, auth, ticket_ref, payload):
    ticket_id = create_ticket()["id"] if ticket_ref == "existing" else ticket_ref

    response = client.put(_url(ticket_id), json=payload, headers=auth(world.restricted))

    assert response.status_code == 403
    assert response.json()["message"] == ticket_lifecycle.UPDATE_RESTRICTED


def test_super_user_updates_without_field_restrictions(client, world, create_ticket, auth):
    ticket = create_ticket()

    response = client.put(_url(ticket["id"]), json={"locationMap": "Gate 3"}, headers=auth(world.super_user))

    assert response.status_code == 200
    assert response.json()["data"]["locationMap"] == "Gate 3"


def test_unknown_ticket_returns_not_found(client, world, auth):
    response = client.put(_url(999), json={"ticketTitle": "x"}, headers=auth(world.admin))

    assert response.status_code == 404
    assert response.json()["message"] == ticket_lifecycle.TICKET_NOT_FOUND


def test_ticket_from_another_company_is_not_found(client, db, world, create_ticket, auth):
    ticket = create_ticket()
    outsider = User(company_id=world.other_company, user_role_id=18, full_name="Delta Admin")
    db.add(outsider)
    db.commit()

    response = client.put(_url(ticket["id"]), json={"ticketTitle": "x"}, headers=auth(outsider.id))

    assert response.status_code == 404


def test_changing_branch_revalidates_existing_zone(client, world, create_ticket, auth):
    ticket = create_ticket()

    response = client.put(_url(ticket["id"]), json={"branchId": world.second_branch}, headers=auth(world.admin))

    assert response.status_code == 400
    assert response.json()["message"] == ticket_lifecycle.INVALID_ZONE


def test_changing_branch_and_zone_together(client, world, create_ticket, auth):
    ticket = create_ticket()

    response = client.put(
        _url(ticket["id"]),
        json={"branchId": world.second_branch, "zoneId": world.second_zone},
        headers=auth(world.admin),
    )

    assert response.status_code == 200
    assert response.json()["data"]["zone"]["zoneTitle"] == "Loading Bay"
    assert response.json()["data"]["branch"]["branchTitle"] == "Warehouse"


def test_clearing_required_field_is_rejected(client, world, create_ticket, auth):
    ticket = create_ticket()

    response = client.put(_url(ticket["id"]), json={"ticketTitle": None}, headers=auth(world.admin))

    assert response.status_code == 400
    assert response.json()["missingFields"] == ["ticketTitle"]


def test_invalid_status_is_rejected_for_technicians(client, world, create_ticket, auth):
    ticket = create_ticket()

    response = client.put(_url(ticket["id"]), json={"ticketStatusId": world.hvac}, headers=auth(world.technician))

    assert response.status_code == 400
    assert response.json()["message"] == ticket_lifecycle.INVALID_TICKET_STATUS


def test_team_leader_cannot_reassign_to_another_team_leader(client, world, create_ticket, auth):
    ticket = create_ticket()

    response = client.put(
        _url(ticket["id"]),
        json={"assignToTeamLeaderId": world.other_team_leader},
        headers=auth(world.team_leader),
    )

    assert response.status_code == 403
    assert response.json()["message"] == ticket_lifecycle.TEAM_LEADER_SELF_ASSIGN


def test_admin_reassigns_technician(client, world, create_ticket, auth):
    ticket = create_ticket()

    response = client.put(
        _url(ticket["id"]),
        json={"assignToTechnicianId": world.sub_technician},
        headers=auth(world.admin),
    )

    assert response.status_code == 200
    assert response.json()["data"]["assignToTechnician"]["fullName"] == "Sam Sub"
