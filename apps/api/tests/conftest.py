"""
pytest configuration (fixtures).

Why this file exists
--------------------
pytest automatically discovers fixtures in a file named `conftest.py`.
We use it to share common test setup across all tests.

Key concept for this project:
-----------------------------
The default store is an in-memory dict behind `storage.BACKEND`.
Tests can accidentally affect each other unless we reset state,
so the store is cleared before each test.
"""

from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from apps.api import storage
from evaluations.schemas.evaluation import EvaluationCreate, utcnow


@pytest.fixture(autouse=True)
def _reset_store_before_each_test() -> None:
    """
    Reset storage state before each test.

    Using BACKEND.reset() keeps the same test suite working for both backends.
    """

    storage.BACKEND.reset()


@pytest.fixture
def now() -> datetime:
    return utcnow()


@pytest.fixture
def add_evaluation(now):
    """
    Factory fixture: insert one evaluation into the active backend.

    `days_ago` places `updated_at` in the past (created_at is a day earlier).
    """

    def _add(
        name: str = "Fraud Detection Accuracy",
        *,
        status: str = "completed",
        score: float | None = 92.0,
        test_cases: int = 100,
        days_ago: float = 0,
        description: str = "",
        backend=None,
    ):
        updated_at = now - timedelta(days=days_ago)
        target = backend or storage.BACKEND
        return target.create_evaluation(
            EvaluationCreate(
                name=name,
                description=description,
                status=status,
                score=score,
                test_cases=test_cases,
                last_run=updated_at if status != "pending" else None,
                created_at=updated_at - timedelta(days=1),
                updated_at=updated_at,
            )
        )

    return _add
