import pytest
from fastapi import status
from tenantdesk.config import settings
from tenantdesk.models import ErrorLog
from tenantdesk.services import UserService
from tenantdesk.utils import clean_object, create_response, find_deep


def error_logs(db):
    db.expire_all()
    return db.query(ErrorLog).all()


def test_not_found_envelope(client, auth_headers):
    response = client.get("/api/users/missing-id", headers=auth_headers)
    assert response.status_code == status.HTTP_404_NOT_FOUND
    body = response.json()
    assert body["success"] is False
    assert body["statusCode"] == 404
    assert body["message"] == "User not found with id: missing-id"
    assert body["data"]["method"] == "GET"
    assert body["data"]["url"].endswith("/api/users/missing-id")
    assert body["data"]["name"] == "NotFoundError"
    assert "Traceback" in body["data"]["stack"]
    assert body["data"]["loggedUser"] == "owner@example.com"


def test_unknown_route(client):
    response = client.get("/api/nothing-here")
    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["success"] is False


def test_error_is_persisted_with_request_details(client, db):
    response = client.post("/api/auth/login", json={"email": "ghost@example.com", "password": "x"})
    assert response.status_code == status.HTTP_400_BAD_REQUEST

    logs = error_logs(db)
    assert len(logs) == 1
    log = logs[0]
    assert log.status == "400"
    assert log.message == "Invalid email or password"
    assert log.method == "POST"
    assert log.name == "ValidationError"
    assert log.details["email"] == "ghost@example.com"
    assert log.logged_user is None


def test_error_log_records_logged_user(client, db, auth_headers):
    client.get("/api/users/missing-id", headers=auth_headers)
    log = error_logs(db)[-1]
    assert log.logged_user == "owner@example.com"
    assert log.details["id"] == "missing-id"


def test_structured_logging_skips_error_table(client, db, monkeypatch):
    monkeypatch.setattr(settings, "structured_logging", True)
    client.post("/api/auth/login", json={"email": "ghost@example.com", "password": "x"})
    assert error_logs(db) == []


def test_validation_error(client, db):
    response = client.post("/api/auth/login", json={"email": "not-an-email"})
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    body = response.json()
    assert body["message"].startswith("Validation Error: ")
    assert "password" in body["message"]
    assert body["data"]["details"]["errors"]
    assert error_logs(db)[0].details["email"] == "not-an-email"


def test_production_hides_internals(client, monkeypatch):
    monkeypatch.setattr(settings, "environment", "production")
    response = client.get("/api/users/missing-id")
    body = response.json()
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert set(body["data"]) == {"method", "url"}


def test_unhandled_error_is_500(client, auth_headers, monkeypatch):
    def boom(self):
        raise RuntimeError("boom")

    monkeypatch.setattr(UserService, "get_all", boom)
    response = client.get("/api/users", headers=auth_headers)
    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert response.json()["message"] == "Internal server error"
    assert response.json()["data"]["name"] == "RuntimeError"


def test_create_response_defaults():
    assert create_response(data=[1]) == {
        "success": True,
        "statusCode": 200,
        "message": "OK",
        "data": [1],
    }
    assert create_response(status_code=404, success=False)["message"] == "Not Found"


def test_clean_object():
    assert clean_object({"a": None, "b": {}, "c": [], "d": {"e": None, "f": 1}, "g": 0}) == {"d": {"f": 1}, "g": 0}


@pytest.mark.parametrize("value,expected", [
    ({"user": {"email": "a@b.com"}}, "a@b.com"),
    ({"items": [{"x": 1}, {"email": "c@d.com"}]}, "c@d.com"),
    ({"other": 1}, None),
    (None, None),
])
def test_find_deep(value, expected):
    assert find_deep(value, ["email"]) == expected
