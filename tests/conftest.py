import os

os.environ["DATABASE_URL"] = "sqlite://"

from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from app.main import app
from app.core.config import settings
from app.core.roles import Role
from app.core.security import create_access_token
from app.db.session import Base, SessionLocal, engine
from app.models.branch import Branch
from app.models.company import Company
from app.models.contract import Contract
from app.models.lookup import Lookup, LookupCategory
from app.models.user import User
from app.models.zone import Zone


@pytest.fixture(autouse=True)
def reset_database():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture(autouse=True)
def upload_dir(tmp_path, monkeypatch):
    path = tmp_path / "uploads"
    path.mkdir()
    monkeypatch.setattr(settings, "UPLOAD_DIR", str(path))
    return path


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


def auth_headers(user_id: int) -> dict:
    return {"Authorization": f"Bearer {create_access_token(str(user_id))}"}


def _add(db, obj):
    db.add(obj)
    db.flush()
    return obj


@pytest.fixture
def world(db):
    """
    A company ("Gamma Solutions", id 7) with two branches, zones, a contract,
    one user per role, a second company, and the lookup catalog.
    """
    corrective = _add(db, Lookup(category=LookupCategory.TICKET_TYPE, name="Corrective", order_id=1))
    preventive = _add(db, Lookup(category=LookupCategory.TICKET_TYPE, name="Preventive", order_id=2))
    emergency = _add(db, Lookup(category=LookupCategory.TICKET_TYPE, name="Emergency", order_id=3))
    pending = _add(db, Lookup(category=LookupCategory.TICKET_STATUS, name="Pending", order_id=1, is_default=True))
    in_progress = _add(db, Lookup(category=LookupCategory.TICKET_STATUS, name="In Progress", order_id=2))
    completed = _add(db, Lookup(category=LookupCategory.TICKET_STATUS, name="Completed", order_id=3))
    hvac = _add(db, Lookup(category=LookupCategory.MAIN_SERVICE, name="HVAC", name_arabic="التكييف", order_id=1))
    electrical = _add(db, Lookup(category=LookupCategory.MAIN_SERVICE, name="Electrical", order_id=2))
    ac_repair = _add(db, Lookup(category=LookupCategory.SUB_SERVICE, name="AC Repair", parent_lookup_id=hvac.id))
    lighting = _add(db, Lookup(category=LookupCategory.SUB_SERVICE, name="Lighting", parent_lookup_id=electrical.id))
    ladder = _add(db, Lookup(category=LookupCategory.TOOL, name="Ladder", name_arabic="سلم"))
    inactive_tool = _add(db, Lookup(category=LookupCategory.TOOL, name="Old Drill", is_active=False))

    company = _add(db, Company(id=7, title="Gamma Solutions"))
    other_company = _add(db, Company(id=8, title="delta facilities"))

    branch = _add(db, Branch(company_id=company.id, branch_title="Head Office"))
    second_branch = _add(db, Branch(company_id=company.id, branch_title="Warehouse"))
    other_branch = _add(db, Branch(company_id=other_company.id, branch_title="Delta HQ"))

    zone = _add(db, Zone(branch_id=branch.id, zone_title="Ground Floor", zone_number="Z-01"))
    second_zone = _add(db, Zone(branch_id=second_branch.id, zone_title="Loading Bay"))

    contract = _add(db, Contract(company_id=company.id, contract_reference="CNT-001", contract_title="Annual"))
    other_contract = _add(db, Contract(company_id=other_company.id, contract_reference="CNT-900", contract_title="Delta"))

    def user(role, name, company_id=company.id, **kwargs):
        return _add(db, User(company_id=company_id, user_role_id=int(role), full_name=name, **kwargs))

    admin = user(Role.ADMIN, "Alice Admin")
    team_leader = user(Role.TEAM_LEADER, "Tom Leader")
    other_team_leader = user(Role.TEAM_LEADER, "Tina Leader")
    technician = user(Role.TECHNICIAN, "Ted Technician", user_number="T-100")
    second_technician = user(Role.TECHNICIAN, "Tara Technician")
    sub_technician = user(Role.SUB_TECHNICIAN, "Sam Sub")
    restricted = user(Role.RESTRICTED, "Rita Restricted")
    super_user = user(Role.SUPER_USER, "Sue Super")
    outsider_technician = user(Role.TECHNICIAN, "Otto Outsider", company_id=other_company.id)
    no_company = user(Role.ADMIN, "Nina Nocompany", company_id=None)

    db.commit()

    return SimpleNamespace(
        corrective=corrective.id,
        preventive=preventive.id,
        emergency=emergency.id,
        pending=pending.id,
        in_progress=in_progress.id,
        completed=completed.id,
        hvac=hvac.id,
        electrical=electrical.id,
        ac_repair=ac_repair.id,
        lighting=lighting.id,
        ladder=ladder.id,
        inactive_tool=inactive_tool.id,
        company=company.id,
        other_company=other_company.id,
        branch=branch.id,
        second_branch=second_branch.id,
        other_branch=other_branch.id,
        zone=zone.id,
        second_zone=second_zone.id,
        contract=contract.id,
        other_contract=other_contract.id,
        admin=admin.id,
        team_leader=team_leader.id,
        other_team_leader=other_team_leader.id,
        technician=technician.id,
        second_technician=second_technician.id,
        sub_technician=sub_technician.id,
        restricted=restricted.id,
        super_user=super_user.id,
        outsider_technician=outsider_technician.id,
        no_company=no_company.id,
    )


@pytest.fixture
def ticket_payload(world):
    def build(**overrides):
        payload = {
            "contractId": world.contract,
            "branchId": world.branch,
            "zoneId": world.zone,
            "ticketTitle": "AC not cooling in lobby",
            "ticketTypeId": world.corrective,
            "ticketDate": "2025-01-15",
            "ticketTimeFrom": "08:00:00",
            "ticketTimeTo": "10:00:00",
            "mainServiceId": world.hvac,
            "assignToTeamLeaderId": world.team_leader,
            "assignToTechnicianId": world.technician,
            "ticketDescription": "Lobby unit blowing warm air",
        }
        payload.update(overrides)
        return payload

    return build


@pytest.fixture
def create_ticket(client, world, ticket_payload):
    """Create a ticket through the API as the admin and return its data"""
    def create(**overrides):
        response = client.post("/api/v1/tickets", json=ticket_payload(**overrides), headers=auth_headers(world.admin))
        assert response.status_code == 201, response.json()
        return response.json()["data"]

    return create


@pytest.fixture
def auth():
    """Build a bearer header for a user id"""
    return auth_headers
