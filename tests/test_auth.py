from datetime import timedelta

from app.core.security import create_access_token
from app.models.user import User

URL = "/api/v1/tickets"


def test_missing_token_is_unauthorized(client, world):
    response = client.get(URL)

    assert response.status_code == 401
    assert response.json() == {"success": False, "message": "Access token required", "code": "UNAUTHORIZED"}


def test_garbage_token_is_unauthorized(client, world):
    response = client.get(URL, headers={"Authorization": "Bearer not-a-jwt"})

    assert response.status_code == 401
    assert response.json()["message"] == "Invalid token"


def test_expired_token_is_unauthorized(client, world):
    token = create_access_token(str(world.admin), expires_delta=timedelta(minutes=-5))

    response = client.get(URL, headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401
    assert response.json()["message"] == "Token expired"


def test_unknown_user_is_not_found(client, world, auth):
    response = client.get(URL, headers=auth(9999))

    assert response.status_code == 404
    assert response.json()["message"] == "User not found"


def test_inactive_user_is_rejected(client, db, world, auth):
    db.query(User).filter(User.id == world.admin).update({"is_active": False})
    db.commit()

    response = client.get(URL, headers=auth(world.admin))

    assert response.status_code == 400
    assert response.json()["message"] == "Inactive user"


def test_user_without_company_is_rejected(client, world, auth):
    response = client.get(URL, headers=auth(world.no_company))

    assert response.status_code == 400
    assert response.json()["message"] == "User is not associated with a company"


def test_unknown_route_uses_error_envelope(client):
    response = client.get("/api/v1/does-not-exist")

    assert response.status_code == 404
    assert response.json()["success"] is False
    assert response.json()["code"] == "NOT_FOUND"


def test_health(client):
    response = client.get("/api/v1/health")

    assert response.status_code == 200
    assert response.json()["success"] is True
    assert response.json()["message"] == "API is running"
