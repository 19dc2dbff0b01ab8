import io
from pathlib import Path
import pandas as pd
from fastapi import status
from tenantdesk.core.security import verify_password
from tenantdesk.models import Conversation, File, User


def create_user(client, headers, email, **extra):
    payload = {"email": email, "password": "password123"}
    payload.update(extra)
    return client.post("/api/users", json=payload, headers=headers)


def test_users_require_authentication(client):
    response = client.get("/api/users")
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json()["success"] is False


def test_create_user(client, auth_headers):
    response = create_user(client, auth_headers, "New@Example.com", name="New", phoneNumber="555")
    assert response.status_code == status.HTTP_201_CREATED
    user = response.json()["data"]
    assert user["email"] == "new@example.com"
    assert user["phoneNumber"] == "555"
    assert user["tenant"]["name"] == "Default Tenant"
    assert "password" not in user
    assert "resetToken" not in user


def test_create_user_duplicate_email(client, auth_headers):
    response = create_user(client, auth_headers, "owner@example.com")
    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_create_user_invalid_email(client, auth_headers):
    response = create_user(client, auth_headers, "not-an-email")
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["message"].startswith("Validation Error:")


def test_get_user_by_id_and_email(client, auth_headers, current_user_id):
    response = client.get(f"/api/users/{current_user_id}", headers=auth_headers)
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["data"]["email"] == "owner@example.com"

    response = client.get("/api/users/email/owner@example.com", headers=auth_headers)
    assert response.json()["data"]["id"] == current_user_id


def test_get_missing_user(client, auth_headers):
    response = client.get("/api/users/missing-id", headers=auth_headers)
    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["message"] == "User not found with id: missing-id"


def test_update_user(client, auth_headers):
    user_id = create_user(client, auth_headers, "edit@example.com", name="Before").json()["data"]["id"]
    response = client.put(f"/api/users/{user_id}", json={"bio": "Hello"}, headers=auth_headers)
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["data"]["bio"] == "Hello"
    assert response.json()["data"]["name"] == "Before"


def test_update_user_email_conflict(client, auth_headers):
    user_id = create_user(client, auth_headers, "edit@example.com").json()["data"]["id"]
    response = client.put(f"/api/users/{user_id}", json={"email": "owner@example.com"}, headers=auth_headers)
    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_update_user_keeps_own_email(client, auth_headers):
    user_id = create_user(client, auth_headers, "edit@example.com").json()["data"]["id"]
    response = client.put(f"/api/users/{user_id}", json={"email": "edit@example.com"}, headers=auth_headers)
    assert response.status_code == status.HTTP_200_OK


def test_find_users(client, auth_headers):
    for index in range(5):
        create_user(client, auth_headers, f"member{index}@example.com")
    response = client.post("/api/users/find", json={
        "paginate": {"page": 1, "pageSize": 2},
        "orderBy": [{"field": "email", "direction": "desc"}],
        "filter": {"email": "MEMBER"},
    }, headers=auth_headers)
    assert response.status_code == status.HTTP_200_OK
    data = response.json()["data"]
    assert data["totalCount"] == 5
    assert data["totalPages"] == 3
    assert [item["email"] for item in data["items"]] == ["member4@example.com", "member3@example.com"]


def test_find_users_rejects_password_filter(client, auth_headers):
    response = client.post("/api/users/find", json={"filter": {"password": "x"}}, headers=auth_headers)
    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_find_users_rejects_object_filter_value(client, auth_headers):
    response = client.post("/api/users/find", json={"filter": {"name": {"x": 1}}}, headers=auth_headers)
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["message"] == "Unsupported filter value for name"


def test_delete_user_cascades_to_files_and_conversations(client, auth_headers, db, storage):
    user_id = create_user(client, auth_headers, "leaving@example.com").json()["data"]["id"]
    upload = client.post(
        "/api/files/upload",
        files={"file": ("notes.txt", b"hello", "text/plain")},
        data={"userId": user_id},
        headers=auth_headers,
    )
    assert upload.status_code == status.HTTP_201_CREATED
    path = Path(upload.json()["data"]["path"])
    assert path.exists()
    client.post("/api/conversations", json={"userId": user_id, "category": "support"}, headers=auth_headers)

    response = client.delete(f"/api/users/{user_id}", headers=auth_headers)
    assert response.status_code == status.HTTP_200_OK

    assert client.get(f"/api/files/user/{user_id}", headers=auth_headers).json()["data"] == []
    assert db.query(File).filter(File.user_id == user_id).count() == 0
    assert db.query(Conversation).filter(Conversation.user_id == user_id).count() == 0
    assert not path.exists()
    assert list(Path(storage.directory).iterdir()) == []
    assert client.get(f"/api/users/{user_id}", headers=auth_headers).status_code == status.HTTP_404_NOT_FOUND


def test_bulk_delete_users(client, auth_headers):
    ids = [create_user(client, auth_headers, f"bulk{index}@example.com").json()["data"]["id"] for index in range(3)]
    response = client.request("DELETE", "/api/users/bulk", json={"ids": ids + ["missing"]}, headers=auth_headers)
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["data"] == {"deletedCount": 3}


def test_bulk_delete_rejects_empty_or_invalid_ids(client, auth_headers):
    response = client.request("DELETE", "/api/users/bulk", json={"ids": []}, headers=auth_headers)
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["message"] == "Invalid or empty array of ids"

    response = client.request("DELETE", "/api/users/bulk", json={"ids": "abc"}, headers=auth_headers)
    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_bulk_delete_nothing_found(client, auth_headers):
    response = client.request("DELETE", "/api/users/bulk", json={"ids": ["missing"]}, headers=auth_headers)
    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["message"] == "No users found to delete"


def test_export_users(client, auth_headers):
    response = client.get("/api/users/export", headers=auth_headers)
    assert response.status_code == status.HTTP_200_OK
    assert response.headers["content-type"].startswith("text/csv")
    assert response.headers["content-disposition"] == "attachment; filename=users.csv"
    frame = pd.read_csv(io.StringIO(response.text), dtype=str)
    assert "password" not in frame.columns
    assert list(frame["email"]) == ["owner@example.com"]


def test_import_users(client, auth_headers, db):
    content = (
        "Email,Password,Name,Bio\n"
        " A@B.com ,secret,X,UNDEFINED\n"
        "owner@example.com,secret,Duplicate,NULL\n"
        "broken,secret,Bad,\n"
        "c@d.com,other,Y,Hi\n"
    ).encode()
    response = client.post(
        "/api/users/import",
        files={"file": ("users.csv", content, "text/csv")},
        headers=auth_headers,
    )
    assert response.status_code == status.HTTP_200_OK
    result = response.json()["data"]
    assert result["createdCount"] == 2
    assert result["skippedCount"] == 2
    assert [error["row"] for error in result["errors"]] == [2, 3]

    imported = db.query(User).filter(User.email == "a@b.com").one()
    assert imported.name == "X"
    assert imported.password != "secret"
    assert verify_password("secret", imported.password)
    assert imported.tenant_id is not None


def test_import_rejects_non_csv(client, auth_headers):
    response = client.post(
        "/api/users/import",
        files={"file": ("users.json", b"{}", "application/json")},
        headers=auth_headers,
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST
