"""
Tests for SqlStorageBackend.

Why test with SQLite?
---------------------
We want to test the *logic* of the database backend without requiring a real Postgres
instance in every developer environment. SQLAlchemy Core emits the same statements
against a SQLite file, so these tests run fast with no external services.

In CI/production you can also add an integration test job with a real Postgres container.
"""

from __future__ import annotations

import pytest

from apps.api.storage import InMemoryStorageBackend, SqlStorageBackend
from evaluations.classify.categories import CategoryClassifier, CategoryRule
from evaluations.query import ListQuery
from evaluations.seed import seed_backend


@pytest.fixture
def backend(tmp_path) -> SqlStorageBackend:
    db_path = tmp_path / "evaluations_test.sqlite"
    backend = SqlStorageBackend(f"sqlite:///{db_path}", auto_create_schema=True)
    backend.reset()
    return backend


def test_sql_backend_round_trip(backend, add_evaluation) -> None:
    """
    End-to-end storage test:
    - create evaluation
    - read it back
    - trigger a run
    """

    created = add_evaluation("AML Compliance Check", score=93.5, test_cases=500, days_ago=2, backend=backend)
    assert created.id >= 1

    fetched = backend.get_evaluation(created.id)
    assert fetched is not None
    assert fetched.name == "AML Compliance Check"
    assert fetched.score == 93.5
    assert fetched.test_cases == 500
    assert fetched.last_run == created.last_run

    running = backend.start_run(created.id)
    assert running is not None
    assert running.status == "running"
    assert running.score is None
    assert running.last_run == running.updated_at
    assert running.updated_at > created.updated_at

    assert backend.get_evaluation(created.id).status == "running"
    assert backend.start_run(9999) is None
    assert backend.get_evaluation(9999) is None


def test_sql_backend_ids_are_not_reused(backend, add_evaluation) -> None:
    first = add_evaluation("A", backend=backend)
    backend.reset()
    second = add_evaluation("B", backend=backend)

    assert second.id > first.id


def test_sql_list_filter_sort_and_pagination(backend, add_evaluation) -> None:
    add_evaluation("Mid", score=85.0, days_ago=1, backend=backend)
    add_evaluation("Unscored", status="pending", score=None, days_ago=2, backend=backend)
    add_evaluation("Low", score=70.0, days_ago=3, backend=backend)
    add_evaluation("High", score=99.0, days_ago=4, backend=backend)
    add_evaluation("Busy", status="running", score=None, days_ago=5, backend=backend)

    rows, total = backend.list_evaluations(ListQuery.from_params(sort="score", order="asc"))
    assert total == 5
    assert [r.name for r in rows][:3] == ["Low", "Mid", "High"]

    rows, total = backend.list_evaluations(ListQuery.from_params(sort="score", order="desc"))
    assert [r.name for r in rows][-3:] == ["High", "Mid", "Low"]

    rows, total = backend.list_evaluations(ListQuery.from_params(status="pending"))
    assert (total, [r.name for r in rows]) == (1, ["Unscored"])

    rows, total = backend.list_evaluations(ListQuery.from_params(page="2", limit="2"))
    assert total == 5
    assert [r.name for r in rows] == ["Low", "High"]


def test_sql_huge_page_and_limit_do_not_overflow(backend, add_evaluation) -> None:
    add_evaluation("Only", backend=backend)

    rows, total = backend.list_evaluations(ListQuery.from_params(page="99999999999999999999"))
    assert (rows, total) == ([], 1)

    rows, total = backend.list_evaluations(ListQuery.from_params(limit="99999999999999999999"))
    assert ([r.name for r in rows], total) == (["Only"], 1)


def test_sql_summary_stats_are_global(backend, add_evaluation) -> None:
    add_evaluation("A", score=92.25, backend=backend)
    add_evaluation("B", score=92.25, backend=backend)
    add_evaluation("C", status="running", score=None, backend=backend)

    summary = backend.summary_stats()
    assert summary.total_evaluations == 3
    assert summary.average_score == 92.3
    assert summary.active_tests == 1


def test_sql_summary_of_empty_table(backend) -> None:
    summary = backend.summary_stats()
    assert (summary.total_evaluations, summary.average_score, summary.active_tests) == (0, 0, 0)


def test_sql_performance_matches_in_memory(backend, add_evaluation, now) -> None:
    memory = InMemoryStorageBackend()
    for target in (backend, memory):
        add_evaluation("Fraud Detection Accuracy", score=96.0, days_ago=0, backend=target)
        add_evaluation("Transaction Fraud Recall", score=88.0, days_ago=0, backend=target)
        add_evaluation("Model Performance Regression", score=81.6, days_ago=2, backend=target)
        add_evaluation("KYC Document Verification", status="running", score=None, days_ago=2, backend=target)
        add_evaluation("Old Risk Model", score=90.0, days_ago=45, backend=target)

    sql_buckets = backend.performance_over_time(30, now=now)
    mem_buckets = memory.performance_over_time(30, now=now)
    assert sql_buckets == mem_buckets
    assert len(sql_buckets) == 2

    latest = sql_buckets[-1]
    assert latest.total_evaluations == 2
    assert (latest.avg_score, latest.max_score, latest.min_score) == (92.0, 96.0, 88.0)
    assert (latest.excellent_tests, latest.good_tests, latest.poor_tests) == (1, 1, 0)

    earlier = sql_buckets[0]
    assert earlier.active_tests == 1
    assert earlier.poor_tests == 1

    assert backend.category_breakdown(30, now=now) == memory.category_breakdown(30, now=now)
    assert [t.name for t in backend.recent_trends()] == [t.name for t in memory.recent_trends()]


def test_sql_category_matching_is_case_sensitive(tmp_path, add_evaluation, now) -> None:
    classifier = CategoryClassifier([CategoryRule.substring("Compliance", "AML")])
    backend = SqlStorageBackend(f"sqlite:///{tmp_path / 'cat.sqlite'}", classifier=classifier)
    add_evaluation("AML Compliance Check", backend=backend)
    add_evaluation("aml lowercase check", backend=backend)

    breakdown = {b.category: b.count for b in backend.category_breakdown(30, now=now)}
    assert breakdown == {"Compliance": 1, "Other": 1}


def test_seed_backend_only_when_empty(backend) -> None:
    inserted = seed_backend(backend)
    assert inserted > 0
    assert backend.count_evaluations() == inserted

    assert seed_backend(backend) == 0
    assert seed_backend(backend, only_if_empty=False) == inserted
    assert backend.count_evaluations() == 2 * inserted
