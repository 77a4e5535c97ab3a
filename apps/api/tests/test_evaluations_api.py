"""
API tests for /api/v1/evaluations (in-memory backend).

These tests verify:
- listing: pagination, status filter, sorting and parameter fallbacks
- the summary cards are global (unaffected by the filter)
- run trigger semantics and the 404 body
- error mapping for database failures
"""

from __future__ import annotations

import random

from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from apps.api import storage
from apps.api.main import app
from apps.api.routes.evaluations import get_results_rng

BASE = "/api/v1/evaluations"


def test_list_returns_evaluations_pagination_and_summary(add_evaluation) -> None:
    client = TestClient(app)
    add_evaluation("Fraud Detection Accuracy", score=90.0)
    add_evaluation("Credit Risk Scoring", score=95.0)
    add_evaluation("KYC Document Verification", status="running", score=None)

    res = client.get(BASE)
    assert res.status_code == 200
    body = res.json()

    assert len(body["evaluations"]) == 3
    assert body["pagination"] == {"page": 1, "limit": 10, "total": 3, "totalPages": 1}
    assert body["summary"] == {"totalEvaluations": 3, "averageScore": 92.5, "activeTests": 1}

    first = body["evaluations"][0]
    assert set(first) >= {"id", "name", "status", "score", "testCases", "lastRun", "createdAt", "updatedAt"}


def test_list_trailing_slash_is_accepted(add_evaluation) -> None:
    client = TestClient(app)
    add_evaluation()

    res = client.get(f"{BASE}/")
    assert res.status_code == 200
    assert res.json()["pagination"]["total"] == 1


def test_pagination_splits_rows_into_pages(add_evaluation) -> None:
    client = TestClient(app)
    for i in range(25):
        add_evaluation(f"Suite {i}", score=float(i), days_ago=i)

    page3 = client.get(BASE, params={"page": 3, "limit": 10}).json()
    assert len(page3["evaluations"]) == 5
    assert page3["pagination"] == {"page": 3, "limit": 10, "total": 25, "totalPages": 3}

    # Past the last page: empty list, same total.
    page4 = client.get(BASE, params={"page": 4, "limit": 10}).json()
    assert page4["evaluations"] == []
    assert page4["pagination"]["total"] == 25


def test_status_filter_narrows_rows_but_not_summary(add_evaluation) -> None:
    client = TestClient(app)
    add_evaluation("A", status="completed", score=80.0)
    add_evaluation("B", status="completed", score=90.0)
    add_evaluation("C", status="running", score=None)
    add_evaluation("D", status="pending", score=None)

    body = client.get(BASE, params={"status": "running"}).json()
    assert [e["name"] for e in body["evaluations"]] == ["C"]
    assert body["pagination"]["total"] == 1
    assert body["summary"] == {"totalEvaluations": 4, "averageScore": 85.0, "activeTests": 1}


def test_empty_status_means_no_filter(add_evaluation) -> None:
    client = TestClient(app)
    add_evaluation("A", status="completed")
    add_evaluation("B", status="pending", score=None)

    body = client.get(BASE, params={"status": ""}).json()
    assert body["pagination"]["total"] == 2


def test_sort_by_score_ascending_puts_nulls_last(add_evaluation) -> None:
    client = TestClient(app)
    add_evaluation("Mid", score=85.0)
    add_evaluation("Unscored", status="pending", score=None)
    add_evaluation("Low", score=70.0)
    add_evaluation("High", score=99.0)

    names = [e["name"] for e in client.get(BASE, params={"sort": "score", "order": "ASC"}).json()["evaluations"]]
    assert names == ["Low", "Mid", "High", "Unscored"]


def test_default_order_is_most_recently_updated_first(add_evaluation) -> None:
    client = TestClient(app)
    add_evaluation("Old", days_ago=5)
    add_evaluation("New", days_ago=0)
    add_evaluation("Middle", days_ago=2)

    names = [e["name"] for e in client.get(BASE).json()["evaluations"]]
    assert names == ["New", "Middle", "Old"]


def test_invalid_parameters_fall_back_to_defaults(add_evaluation) -> None:
    client = TestClient(app)
    add_evaluation("Old", days_ago=5)
    add_evaluation("New", days_ago=0)

    res = client.get(
        BASE,
        params={"page": "abc", "limit": "-5", "sort": "name; DROP TABLE evaluations", "order": "sideways"},
    )
    assert res.status_code == 200
    body = res.json()
    assert body["pagination"]["page"] == 1
    assert body["pagination"]["limit"] == 10
    # Unknown sort -> updated_at, unknown order -> desc
    assert [e["name"] for e in body["evaluations"]] == ["New", "Old"]


def test_large_limit_is_honoured(add_evaluation) -> None:
    client = TestClient(app)
    for i in range(250):
        add_evaluation(f"Suite {i}", days_ago=i)

    body = client.get(BASE, params={"page": 2, "limit": 200}).json()
    assert body["pagination"] == {"page": 2, "limit": 200, "total": 250, "totalPages": 2}
    # offset = (2 - 1) * 200, newest first
    assert [e["name"] for e in body["evaluations"]] == [f"Suite {i}" for i in range(200, 250)]


def test_huge_page_returns_empty_page(add_evaluation) -> None:
    client = TestClient(app)
    add_evaluation()

    res = client.get(BASE, params={"page": "99999999999999999999"})
    assert res.status_code == 200
    body = res.json()
    assert body["evaluations"] == []
    assert body["pagination"]["total"] == 1
    # Clamped to the last page whose offset still fits a 64-bit integer.
    assert body["pagination"]["page"] == (2**63 - 1) // 10 + 1


def test_empty_store_has_zero_summary_and_pages() -> None:
    client = TestClient(app)

    body = client.get(BASE).json()
    assert body["evaluations"] == []
    assert body["pagination"] == {"page": 1, "limit": 10, "total": 0, "totalPages": 0}
    assert body["summary"] == {"totalEvaluations": 0, "averageScore": 0, "activeTests": 0}


def test_get_evaluation_by_id(add_evaluation) -> None:
    client = TestClient(app)
    created = add_evaluation("AML Compliance Check", score=93.5, test_cases=500)

    res = client.get(f"{BASE}/{created.id}")
    assert res.status_code == 200
    body = res.json()
    assert body["id"] == created.id
    assert body["name"] == "AML Compliance Check"
    assert body["score"] == 93.5
    assert body["testCases"] == 500
    assert body["lastRun"].endswith((" AM", " PM"))


def test_unknown_id_returns_404_with_message() -> None:
    client = TestClient(app)

    res = client.get(f"{BASE}/9999")
    assert res.status_code == 404
    assert res.json() == {
        "error": "Evaluation not found",
        "message": "Evaluation with ID 9999 does not exist",
    }

    for path in (f"{BASE}/9999/results",):
        assert client.get(path).status_code == 404
    assert client.post(f"{BASE}/9999/run").status_code == 404


def test_run_marks_evaluation_running_and_clears_score(add_evaluation) -> None:
    client = TestClient(app)
    created = add_evaluation("Credit Risk Scoring", score=88.7, days_ago=3)

    res = client.post(f"{BASE}/{created.id}/run")
    assert res.status_code == 200
    body = res.json()
    assert body["message"] == "Evaluation run started successfully"

    evaluation = body["evaluation"]
    assert evaluation["status"] == "running"
    assert evaluation["score"] is None
    assert evaluation["lastRun"] is not None

    # Persisted: the summary now counts it as active and it has no score.
    listing = client.get(BASE).json()
    assert listing["summary"]["activeTests"] == 1
    assert listing["summary"]["averageScore"] == 0

    # Running evaluations have no detailed results.
    results = client.get(f"{BASE}/{created.id}/results").json()
    assert results["testResults"] is None
    assert results["metrics"] is None
    assert results["summary"] == {"totalTests": 100, "passed": None, "failed": None, "accuracy": None}


def test_run_on_running_evaluation_restamps_it(add_evaluation) -> None:
    client = TestClient(app)
    created = add_evaluation("KYC Document Verification", status="running", score=None, days_ago=2)

    res = client.post(f"{BASE}/{created.id}/run")
    assert res.status_code == 200
    assert res.json()["evaluation"]["status"] == "running"
    assert storage.BACKEND.get_evaluation(created.id).updated_at > created.updated_at


def test_results_for_completed_evaluation(add_evaluation) -> None:
    app.dependency_overrides[get_results_rng] = lambda: random.Random(7)
    try:
        client = TestClient(app)
        created = add_evaluation("Latency Benchmark", score=92.0, test_cases=100)

        body = client.get(f"{BASE}/{created.id}/results").json()
    finally:
        app.dependency_overrides.clear()

    assert body["summary"] == {"totalTests": 100, "passed": 92, "failed": 8, "accuracy": 92.0}
    assert body["testResults"] == [
        {"category": "True Positives", "count": 60, "percentage": 60},
        {"category": "True Negatives", "count": 32, "percentage": 32},
        {"category": "False Positives", "count": 5, "percentage": 5},
        {"category": "False Negatives", "count": 3, "percentage": 3},
    ]
    assert body["metrics"] == {"precision": "0.874", "recall": "0.902", "f1Score": "0.888", "auc": "0.911"}
    assert body["errors"] == []

    seconds = int(body["executionTime"].rstrip("s"))
    assert 60 <= seconds < 360


def test_results_warnings_below_ninety(add_evaluation) -> None:
    client = TestClient(app)
    low = add_evaluation("Low", score=89.0)
    ok = add_evaluation("Ok", score=90.0)

    assert len(client.get(f"{BASE}/{low.id}/results").json()["errors"]) == 2
    assert client.get(f"{BASE}/{ok.id}/results").json()["errors"] == []


def test_performance_report_shape_and_window(add_evaluation, now) -> None:
    client = TestClient(app)
    add_evaluation("Fraud Detection Accuracy", score=96.0, days_ago=0)
    add_evaluation("Transaction Fraud Recall", score=88.0, days_ago=0)
    add_evaluation("AML Compliance Check", score=70.0, days_ago=3)
    add_evaluation("KYC Document Verification", status="running", score=None, days_ago=1)
    add_evaluation("Ancient Fraud Suite", score=99.0, days_ago=60)

    body = client.get(f"{BASE}/performance", params={"days": 7}).json()

    assert body["summary"]["daysAnalyzed"] == 7
    assert body["summary"]["totalDataPoints"] == len(body["performanceOverTime"])
    assert body["summary"]["categories"] == len(body["categoryBreakdown"])

    dates = [p["date"] for p in body["performanceOverTime"]]
    assert dates == sorted(dates)
    assert sum(p["totalEvaluations"] for p in body["performanceOverTime"]) == 4

    breakdown = {c["category"]: c for c in body["categoryBreakdown"]}
    assert breakdown["Fraud Detection"]["count"] == 2
    assert breakdown["Fraud Detection"]["avgScore"] == 92.0
    assert breakdown["Compliance"]["completed"] == 1
    assert breakdown["Identity"]["avgScore"] == 0
    assert body["categoryBreakdown"][0]["category"] == "Fraud Detection"

    # recentTrends ignores the window but only lists completed, scored rows.
    names = [t["name"] for t in body["recentTrends"]]
    assert "Ancient Fraud Suite" in names
    assert "KYC Document Verification" not in names
    assert [t["rank"] for t in body["recentTrends"]] == list(range(1, len(names) + 1))


def test_performance_invalid_days_defaults_to_thirty(add_evaluation) -> None:
    client = TestClient(app)
    add_evaluation(days_ago=20)

    body = client.get(f"{BASE}/performance", params={"days": "zero"}).json()
    assert body["summary"]["daysAnalyzed"] == 30
    assert body["summary"]["totalDataPoints"] == 1


def test_performance_huge_days_is_clamped(add_evaluation) -> None:
    client = TestClient(app)
    add_evaluation(days_ago=400)

    res = client.get(f"{BASE}/performance", params={"days": "1000000"})
    assert res.status_code == 200
    body = res.json()
    assert body["summary"]["daysAnalyzed"] == 36500
    assert body["summary"]["totalDataPoints"] == 1


def test_performance_recent_trends_capped_at_ten(add_evaluation) -> None:
    client = TestClient(app)
    for i in range(12):
        add_evaluation(f"Suite {i}", score=80.0 + i, days_ago=i)

    trends = client.get(f"{BASE}/performance").json()["recentTrends"]
    assert len(trends) == 10
    assert trends[0]["name"] == "Suite 0"


def test_database_failure_returns_generic_500(monkeypatch) -> None:
    client = TestClient(app)

    def _boom(*args, **kwargs):
        raise OperationalError("SELECT 1", {}, Exception("connection refused"))

    monkeypatch.setattr(storage.BACKEND, "list_evaluations", _boom)

    res = client.get(BASE)
    assert res.status_code == 500
    assert res.json() == {
        "error": "Internal Server Error",
        "message": "An unexpected error occurred while processing the request",
    }
    assert "connection refused" not in res.text


def test_responses_carry_correlation_id() -> None:
    client = TestClient(app)

    res = client.get("/health")
    assert res.status_code == 200
    assert res.json() == {"status": "ok"}
    assert res.headers.get("X-Correlation-ID")


def test_storage_health_reports_backend_and_count(add_evaluation) -> None:
    client = TestClient(app)
    add_evaluation()

    body = client.get("/health/storage").json()
    assert body == {"status": "ok", "backend": "inmemory", "evaluations": 1}
