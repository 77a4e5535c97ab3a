"""
Performance report schemas.

These are *derived* shapes: nothing here is persisted.
The service computes them at read time from the evaluations table and the dashboard
charts them without further aggregation.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import Field

from evaluations.schemas.evaluation import CamelModel


class PerformanceBucket(CamelModel):
    """
    One calendar date inside the analysis window.

    Score bands:
    - excellent: score >= 95
    - good: 85 <= score < 95
    - poor: score < 85
    Rows without a score count toward `total_evaluations` but toward no band.
    """

    date: str = Field(..., description="Calendar date (YYYY-MM-DD) of updated_at")
    total_evaluations: int = Field(..., ge=0)
    avg_score: float = Field(..., description="One decimal; 0.0 if no row had a score")
    max_score: float
    min_score: float
    completed_tests: int = Field(..., ge=0)
    active_tests: int = Field(..., ge=0)
    excellent_tests: int = Field(..., ge=0)
    good_tests: int = Field(..., ge=0)
    poor_tests: int = Field(..., ge=0)


class CategoryBucket(CamelModel):
    """Evaluations grouped by the category their name classifies into."""

    category: str
    count: int = Field(..., ge=1)
    avg_score: float
    completed: int = Field(..., ge=0)


class RecentTrend(CamelModel):
    """A recently completed evaluation; rank 1 is the most recently updated."""

    id: int
    name: str
    score: float
    status: str
    updated_at: datetime
    rank: int = Field(..., ge=1)


class PerformanceSummary(CamelModel):
    days_analyzed: int = Field(..., ge=1)
    total_data_points: int = Field(..., ge=0, description="Number of date buckets")
    categories: int = Field(..., ge=0, description="Number of category buckets")


class PerformanceReport(CamelModel):
    """Response body for GET /api/v1/evaluations/performance."""

    performance_over_time: list[PerformanceBucket]
    category_breakdown: list[CategoryBucket]
    recent_trends: list[RecentTrend]
    summary: PerformanceSummary
