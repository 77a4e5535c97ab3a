"""
Synthetic results schemas.

The detail fields are optional because only completed, scored evaluations get them.
Metric values are strings (fixed three decimals) to keep trailing zeros on the wire.
"""

from __future__ import annotations

from pydantic import Field

from evaluations.schemas.evaluation import CamelModel


class TestResultBucket(CamelModel):
    # Not a pytest test class.
    __test__ = False

    category: str
    count: int
    percentage: int


class ResultMetrics(CamelModel):
    precision: str
    recall: str
    f1_score: str
    auc: str


class ResultsSummary(CamelModel):
    total_tests: int
    passed: int | None = None
    failed: int | None = None
    accuracy: float | None = None


class EvaluationResults(CamelModel):
    """Response body for GET /api/v1/evaluations/{id}/results."""

    id: int
    name: str
    description: str = ""
    status: str
    score: float | None = None
    test_cases: int
    last_run: str | None = Field(default=None, description="Display-formatted last run")
    summary: ResultsSummary
    test_results: list[TestResultBucket] | None = None
    metrics: ResultMetrics | None = None
    execution_time: str | None = None
    errors: list[str] = Field(default_factory=list)
