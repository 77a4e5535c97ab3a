"""Pydantic data contracts for evaluations and the reports derived from them."""

from evaluations.schemas.evaluation import (
    Evaluation,
    EvaluationCreate,
    EvaluationList,
    EvaluationStatus,
    EvaluationSummary,
    Pagination,
    RunResponse,
)
from evaluations.schemas.performance import (
    CategoryBucket,
    PerformanceBucket,
    PerformanceReport,
    PerformanceSummary,
    RecentTrend,
)
from evaluations.schemas.results import (
    EvaluationResults,
    ResultMetrics,
    ResultsSummary,
    TestResultBucket,
)

__all__ = [
    "CategoryBucket",
    "Evaluation",
    "EvaluationCreate",
    "EvaluationList",
    "EvaluationResults",
    "EvaluationStatus",
    "EvaluationSummary",
    "Pagination",
    "PerformanceBucket",
    "PerformanceReport",
    "PerformanceSummary",
    "RecentTrend",
    "ResultMetrics",
    "ResultsSummary",
    "RunResponse",
    "TestResultBucket",
]
