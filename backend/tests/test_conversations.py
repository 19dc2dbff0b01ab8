import io
import json
import pandas as pd
from fastapi import status


def create_conversation(client, headers, **payload):
    return client.post("/api/conversations", json=payload, headers=headers)


def test_create_conversation_defaults_to_caller(client, auth_headers, current_user_id):
    response = create_conversation(client, auth_headers, category="onboarding")
    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()["data"]
    assert data["userId"] == current_user_id
    assert data["category"] == "onboarding"
    assert data["messages"] == []


def test_create_conversation_with_json_fields(client, auth_headers):
    answers = {"plan": "pro", "seats": 5}
    response = create_conversation(
        client,
        auth_headers,
        answers=answers,
        notes=["call back"],
        messages=[{"role": "user", "content": "Hi"}],
    )
    data = response.json()["data"]
    assert data["answers"] == answers
    assert data["notes"] == ["call back"]
    assert data["messages"] == [{"role": "user", "content": "Hi"}]


def test_create_conversation_rejects_message_without_role(client, auth_headers):
    response = create_conversation(client, auth_headers, messages=[{"content": "Hi"}])
    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_create_conversation_for_unknown_user(client, auth_headers):
    response = create_conversation(client, auth_headers, userId="missing")
    assert response.status_code >= status.HTTP_400_BAD_REQUEST
    assert response.json()["success"] is False


def test_append_message(client, auth_headers):
    conversation_id = create_conversation(
        client, auth_headers, messages=[{"role": "user", "content": "Hi"}]
    ).json()["data"]["id"]
    response = client.post(
        f"/api/conversations/{conversation_id}/messages",
        json={"role": "assistant", "content": "Hello, how can I help?"},
        headers=auth_headers,
    )
    assert response.status_code == status.HTTP_200_OK
    assert [message["role"] for message in response.json()["data"]["messages"]] == ["user", "assistant"]


def test_append_message_to_missing_conversation(client, auth_headers):
    response = client.post(
        "/api/conversations/missing/messages",
        json={"role": "user", "content": "Hi"},
        headers=auth_headers,
    )
    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["message"] == "Conversation not found with id: missing"


def test_update_conversation(client, auth_headers):
    conversation_id = create_conversation(client, auth_headers, category="a").json()["data"]["id"]
    response = client.put(
        f"/api/conversations/{conversation_id}",
        json={"notes": {"priority": "high"}},
        headers=auth_headers,
    )
    data = response.json()["data"]
    assert data["notes"] == {"priority": "high"}
    assert data["category"] == "a"


def test_delete_conversation(client, auth_headers):
    conversation_id = create_conversation(client, auth_headers).json()["data"]["id"]
    response = client.delete(f"/api/conversations/{conversation_id}", headers=auth_headers)
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["data"]["id"] == conversation_id
    response = client.get(f"/api/conversations/{conversation_id}", headers=auth_headers)
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_conversations_by_user(client, auth_headers, current_user_id):
    create_conversation(client, auth_headers, category="a")
    create_conversation(client, auth_headers, category="b")
    response = client.get(f"/api/conversations/user/{current_user_id}", headers=auth_headers)
    assert sorted(item["category"] for item in response.json()["data"]) == ["a", "b"]


def test_find_conversations_by_category(client, auth_headers):
    for category in ("billing", "support", "billing-disputes"):
        create_conversation(client, auth_headers, category=category)
    response = client.post(
        "/api/conversations/find",
        json={"filter": {"category": "billing"}, "orderBy": [{"field": "category"}]},
        headers=auth_headers,
    )
    data = response.json()["data"]
    assert data["totalCount"] == 2
    assert [item["category"] for item in data["items"]] == ["billing", "billing-disputes"]


def test_export_conversations(client, auth_headers):
    create_conversation(client, auth_headers, answers={"plan": "pro"}, messages=[{"role": "user", "content": "Hi"}])
    response = client.get("/api/conversations/export", headers=auth_headers)
    assert response.status_code == status.HTTP_200_OK
    frame = pd.read_csv(io.StringIO(response.text), dtype=str)
    assert json.loads(frame.loc[0, "answers"]) == {"plan": "pro"}
    assert json.loads(frame.loc[0, "messages"]) == [{"role": "user", "content": "Hi"}]


def test_import_conversations(client, auth_headers, current_user_id):
    frame = pd.DataFrame([
        {"userId": current_user_id, "category": "imported", "answers": '{"plan": "free"}', "messages": ""},
        {"userId": current_user_id, "category": "bad", "answers": "", "messages": '[{"content": "x"}]'},
    ])
    response = client.post(
        "/api/conversations/import",
        files={"file": ("conversations.csv", frame.to_csv(index=False).encode(), "text/csv")},
        headers=auth_headers,
    )
    result = response.json()["data"]
    assert result["createdCount"] == 1
    assert [error["row"] for error in result["errors"]] == [2]

    items = client.get(f"/api/conversations/user/{current_user_id}", headers=auth_headers).json()["data"]
    assert items[0]["answers"] == {"plan": "free"}
    assert items[0]["messages"] == []
