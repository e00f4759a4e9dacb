from uuid import uuid4

from fastapi.testclient import TestClient


def test_create_and_get(client: TestClient) -> None:
    response = client.post(
        "/api/content", json={"title": "Hello", "type": "video", "tags": ["a", "a"]}
    )

    assert response.status_code == 201
    data = response.json()
    assert data["status"] == "draft"
    assert data["tags"] == ["a"]

    fetched = client.get(f"/api/content/{data['id']}")
    assert fetched.status_code == 200
    assert fetched.json()["title"] == "Hello"


def test_create_rejects_title_over_limit(client: TestClient, rules) -> None:
    response = client.post("/api/content", json={"title": "x" * (rules.content.title.max + 1)})

    assert response.status_code == 400
    assert response.json()["detail"]["code"] == "invalid_content"


def test_review_and_publish(client: TestClient) -> None:
    content_id = client.post("/api/content", json={"title": "Hello"}).json()["id"]

    assert client.post(f"/api/content/{content_id}/submit").json()["status"] == "pending_approval"
    assert client.post(f"/api/content/{content_id}/approve").json()["status"] == "approved"

    published = client.post(f"/api/content/{content_id}/publish")
    assert published.status_code == 200
    assert published.json()["published_at"] is not None

    # Published is terminal.
    assert client.post(f"/api/content/{content_id}/return-to-draft").status_code == 409


def test_publish_draft_rejected(client: TestClient) -> None:
    content_id = client.post("/api/content", json={"title": "Hello"}).json()["id"]

    response = client.post(f"/api/content/{content_id}/publish")

    assert response.status_code == 409
    assert response.json()["detail"]["code"] == "invalid_transition"


def test_list_and_stats(client: TestClient) -> None:
    owner = str(uuid4())
    first = client.post("/api/content", json={"title": "A", "owner_id": owner}).json()
    client.post("/api/content", json={"title": "B", "owner_id": owner})
    client.post(f"/api/content/{first['id']}/submit")

    pending = client.get("/api/content", params={"status": "pending_approval"}).json()
    assert [i["id"] for i in pending] == [first["id"]]

    stats = client.get("/api/content/stats", params={"owner_id": owner}).json()
    assert stats["total"] == 2
    assert stats["counts"]["draft"] == 1


def test_unknown_content(client: TestClient) -> None:
    assert client.get(f"/api/content/{uuid4()}").status_code == 404
