from datetime import UTC, datetime
from unittest.mock import Mock

from fastapi.testclient import TestClient

from contentlab.api.deps import get_publisher_job
from contentlab.domain.entities import Content, ScheduledPublication
from contentlab.domain.errors import LifecycleError, StoreUnavailable


def test_run_now_publishes_due(client: TestClient, content_repo, schedule_repo, clock) -> None:
    at = datetime(2023, 12, 31, 23, 0, tzinfo=UTC)
    content = content_repo.add(Content(title="Due", status="approved", scheduled_at=at))
    schedule = schedule_repo.add(ScheduledPublication(content_id=content.id, scheduled_at=at))

    response = client.post("/api/publisher/run")

    assert response.status_code == 200
    assert response.json() == {
        "processed": 1,
        "results": [
            {
                "id": str(schedule.id),
                "content_id": str(content.id),
                "status": "success",
                "error": None,
            }
        ],
    }
    assert content_repo.get_by_id(content.id).published_at == clock.now_utc()


def test_run_now_store_down(client: TestClient) -> None:
    job = Mock()
    job.run.side_effect = StoreUnavailable("schedule store unreachable")
    client.app.dependency_overrides[get_publisher_job] = lambda: job

    response = client.post("/api/publisher/run")

    assert response.status_code == 503
    assert response.json()["detail"]["code"] == "store_unavailable"


def test_health(client: TestClient) -> None:
    assert client.get("/health").json() == {"status": "ok", "service": "api"}


def test_unmapped_lifecycle_error_is_bad_request(client: TestClient) -> None:
    job = Mock()
    job.run.side_effect = LifecycleError("something else went wrong")
    client.app.dependency_overrides[get_publisher_job] = lambda: job

    response = client.post("/api/publisher/run")

    assert response.status_code == 400
    assert response.json() == {
        "detail": {"code": "lifecycle_error", "message": "something else went wrong"}
    }
