from datetime import UTC, datetime

from fastapi.testclient import TestClient

from redeploy.main import app
from redeploy.services import get_history_service

USER = {"X-User-Id": "user-1"}


def _seed() -> list[str]:
    history = get_history_service()
    ok = history.log("user-1", repo="acme/site", branch="main", status="success", sha="abc")
    bad = history.log(
        "user-1", repo="acme/docs", branch="main", status="failed", error_message="Not Found"
    )
    return [ok.id, bad.id]


def test_list_and_filter_history() -> None:
    _seed()
    client = TestClient(app)

    everything = client.get("/api/history", headers=USER).json()
    failed = client.get("/api/history?status=failed", headers=USER).json()
    limited = client.get("/api/history?limit=1", headers=USER).json()

    assert everything["total"] == 2
    assert [d["repo"] for d in failed["deployments"]] == ["acme/docs"]
    assert limited["total"] == 1


def test_invalid_date_filter() -> None:
    client = TestClient(app)
    response = client.get("/api/history?from=yesterday", headers=USER)

    assert response.status_code == 400
    assert response.json()["code"] == "INVALID_DATE"


def test_history_stats() -> None:
    _seed()
    client = TestClient(app)

    stats = client.get("/api/history/stats", headers=USER).json()

    assert stats["total"] == 2
    assert stats["success"] == 1
    assert stats["failed"] == 1
    assert stats["success_rate"] == 50


def test_get_single_deployment() -> None:
    ok_id, _ = _seed()
    client = TestClient(app)

    assert client.get(f"/api/history/{ok_id}", headers=USER).json()["sha"] == "abc"
    missing = client.get("/api/history/dep_missing", headers=USER)
    assert missing.status_code == 404


def test_export_csv() -> None:
    _seed()
    client = TestClient(app)

    response = client.get("/api/history/export", headers=USER)

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    day = datetime.now(UTC).date().isoformat()
    assert f"deployment-history-{day}.csv" in response.headers["content-disposition"]
    lines = response.text.split("\n")
    assert lines[0].startswith("ID,Repository,Branch,Status")
    assert len(lines) == 3
