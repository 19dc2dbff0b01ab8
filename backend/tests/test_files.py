from pathlib import Path
import pytest
from fastapi import status
from tenantdesk.models import File
from tenantdesk.repositories import FileRepository


def upload(client, headers, content=b"hello world", filename="notes.txt", **fields):
    return client.post(
        "/api/files/upload",
        files={"file": (filename, content, "text/plain")},
        data=fields,
        headers=headers,
    )


@pytest.fixture
def uploaded(client, auth_headers):
    response = upload(client, auth_headers, text="First draft", tags="draft")
    assert response.status_code == status.HTTP_201_CREATED
    return response.json()["data"]


def test_files_require_authentication(client):
    response = client.get("/api/files")
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_upload_file(client, auth_headers, current_user_id, storage, uploaded):
    assert uploaded["userId"] == current_user_id
    assert uploaded["name"] == "notes.txt"
    assert uploaded["text"] == "First draft"
    assert uploaded["views"] == 0
    path = Path(uploaded["path"])
    assert path.parent == storage.directory
    assert path.name.startswith("file-")
    assert path.suffix == ".txt"
    assert path.read_bytes() == b"hello world"


def test_upload_for_unknown_user_leaves_no_artifact(client, auth_headers, storage):
    response = upload(client, auth_headers, userId="missing")
    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert not storage.directory.exists() or list(storage.directory.iterdir()) == []


def test_upload_removes_artifact_when_record_fails(client, auth_headers, storage, monkeypatch):
    def fail(self, data):
        raise RuntimeError("insert failed")

    monkeypatch.setattr(FileRepository, "create", fail)
    response = upload(client, auth_headers)
    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert list(storage.directory.iterdir()) == []


def test_download_counts_views(client, auth_headers, uploaded):
    response = client.get(f"/api/files/{uploaded['id']}/download", headers=auth_headers)
    assert response.status_code == status.HTTP_200_OK
    assert response.content == b"hello world"
    assert "notes.txt" in response.headers["content-disposition"]

    client.get(f"/api/files/{uploaded['id']}/download", headers=auth_headers)
    record = client.get(f"/api/files/{uploaded['id']}", headers=auth_headers).json()["data"]
    assert record["views"] == 2


def test_download_missing_content(client, auth_headers, uploaded):
    Path(uploaded["path"]).unlink()
    response = client.get(f"/api/files/{uploaded['id']}/download", headers=auth_headers)
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_update_metadata(client, auth_headers, uploaded):
    response = client.put(f"/api/files/{uploaded['id']}", json={"tags": "final"}, headers=auth_headers)
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["data"]["tags"] == "final"
    assert response.json()["data"]["text"] == "First draft"


def test_replace_content(client, auth_headers, uploaded):
    response = client.put(
        f"/api/files/{uploaded['id']}/content",
        files={"file": ("notes-v2.txt", b"second version", "text/plain")},
        data={"text": "Second draft"},
        headers=auth_headers,
    )
    assert response.status_code == status.HTTP_200_OK
    data = response.json()["data"]
    assert data["path"] == uploaded["path"]
    assert data["name"] == "notes-v2.txt"
    assert data["text"] == "Second draft"
    assert Path(uploaded["path"]).read_bytes() == b"second version"


def test_replace_content_restored_when_record_update_fails(client, auth_headers, uploaded, monkeypatch):
    def fail(self, id, data):
        raise RuntimeError("update failed")

    monkeypatch.setattr(FileRepository, "update", fail)
    response = client.put(
        f"/api/files/{uploaded['id']}/content",
        files={"file": ("notes.txt", b"lost version", "text/plain")},
        headers=auth_headers,
    )
    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert Path(uploaded["path"]).read_bytes() == b"hello world"


def test_delete_file_removes_artifact(client, auth_headers, db, storage, uploaded):
    response = client.delete(f"/api/files/{uploaded['id']}", headers=auth_headers)
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["data"]["id"] == uploaded["id"]
    assert not Path(uploaded["path"]).exists()
    assert list(storage.directory.iterdir()) == []
    assert db.query(File).count() == 0


def test_delete_file_restores_artifact_when_delete_fails(client, auth_headers, db, uploaded, monkeypatch):
    def fail(self, ids):
        raise RuntimeError("delete failed")

    monkeypatch.setattr(FileRepository, "delete_many", fail)
    response = client.delete(f"/api/files/{uploaded['id']}", headers=auth_headers)
    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert Path(uploaded["path"]).read_bytes() == b"hello world"
    assert db.query(File).count() == 1


def test_bulk_delete_files(client, auth_headers, uploaded):
    second = upload(client, auth_headers, content=b"other", filename="other.txt").json()["data"]
    response = client.request(
        "DELETE", "/api/files/bulk", json={"ids": [uploaded["id"], second["id"]]}, headers=auth_headers
    )
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["data"] == {"deletedCount": 2}
    assert not Path(uploaded["path"]).exists()
    assert not Path(second["path"]).exists()


def test_files_by_user(client, auth_headers, current_user_id, uploaded):
    response = client.get(f"/api/files/user/{current_user_id}", headers=auth_headers)
    assert [file["id"] for file in response.json()["data"]] == [uploaded["id"]]

    response = client.get("/api/files/user/someone-else", headers=auth_headers)
    assert response.json()["data"] == []


def test_find_files(client, auth_headers, uploaded):
    upload(client, auth_headers, filename="report.pdf", tags="final")
    response = client.post("/api/files/find", json={"filter": {"tags": "FIN"}}, headers=auth_headers)
    data = response.json()["data"]
    assert data["totalCount"] == 1
    assert data["items"][0]["name"] == "report.pdf"


def test_export_without_files(client, auth_headers):
    response = client.get("/api/files/export", headers=auth_headers)
    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["message"] == "No files found to export"


def test_export_files(client, auth_headers, uploaded):
    response = client.get("/api/files/export", headers=auth_headers)
    assert response.status_code == status.HTTP_200_OK
    assert response.headers["content-disposition"] == "attachment; filename=files.csv"
    assert uploaded["id"] in response.text


def test_import_files(client, auth_headers, current_user_id):
    content = f"userId,name,tags,views\n{current_user_id},imported.txt,csv,3\nmissing-user,orphan.txt,,\n".encode()
    response = client.post(
        "/api/files/import",
        files={"file": ("files.csv", content, "text/csv")},
        headers=auth_headers,
    )
    assert response.status_code == status.HTTP_200_OK
    result = response.json()["data"]
    assert result["createdCount"] == 1
    assert result["skippedCount"] == 1
    assert result["errors"][0]["row"] == 2
