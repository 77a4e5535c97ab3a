"""
Aggregation helpers (pure functions).

Both storage backends produce the same report shapes. The SQL backend pushes the
date rollup into the database and uses these helpers only to normalise the numbers;
the in-memory backend computes everything here.

Rounding
--------
Averages and extremes are rounded half-up to one decimal (92.25 -> 92.3), using
Decimal so the result does not depend on binary float representation.
"""

from __future__ import annotations

from collections import defaultdict
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Iterable, NamedTuple

from evaluations.classify.categories import CategoryClassifier, classify_name
from evaluations.schemas.evaluation import EvaluationStatus
from evaluations.schemas.performance import CategoryBucket, PerformanceBucket, RecentTrend

EXCELLENT_THRESHOLD = 95
GOOD_THRESHOLD = 85


class ScoreRow(NamedTuple):
    """The columns every report needs from an evaluation row."""

    id: int
    name: str
    status: str
    score: float | None
    updated_at: datetime


def round_one(value: Any) -> float:
    """Round half-up to one decimal; None -> 0.0."""

    if value is None:
        return 0.0
    return float(Decimal(str(value)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def score_band(score: float | None) -> str | None:
    """'excellent' (>=95), 'good' (85-94.x), 'poor' (<85); None for unscored rows."""

    if score is None:
        return None
    if score >= EXCELLENT_THRESHOLD:
        return "excellent"
    if score >= GOOD_THRESHOLD:
        return "good"
    return "poor"


def _mean(values: list[float]) -> float | None:
    return sum(values) / len(values) if values else None


def date_key(value: Any) -> str:
    """Normalise a DB date value (date, datetime or 'YYYY-MM-DD...' text) to YYYY-MM-DD."""

    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return str(value)[:10]


def make_performance_bucket(
    *,
    day: Any,
    total: Any,
    avg_score: Any,
    max_score: Any,
    min_score: Any,
    completed: Any,
    active: Any,
    excellent: Any,
    good: Any,
    poor: Any,
) -> PerformanceBucket:
    """Build a bucket from raw aggregate values (SQL drivers may return Decimal/None)."""

    return PerformanceBucket(
        date=date_key(day),
        total_evaluations=int(total or 0),
        avg_score=round_one(avg_score),
        max_score=round_one(max_score),
        min_score=round_one(min_score),
        completed_tests=int(completed or 0),
        active_tests=int(active or 0),
        excellent_tests=int(excellent or 0),
        good_tests=int(good or 0),
        poor_tests=int(poor or 0),
    )


def performance_over_time(rows: Iterable[ScoreRow]) -> list[PerformanceBucket]:
    """
    One bucket per calendar date of `updated_at`, ascending.

    Dates with no rows are simply absent.
    """

    by_day: dict[str, list[ScoreRow]] = defaultdict(list)
    for row in rows:
        by_day[date_key(row.updated_at)].append(row)

    buckets: list[PerformanceBucket] = []
    for day in sorted(by_day):
        day_rows = by_day[day]
        scores = [r.score for r in day_rows if r.score is not None]
        bands = [score_band(s) for s in scores]
        buckets.append(
            make_performance_bucket(
                day=day,
                total=len(day_rows),
                avg_score=_mean(scores),
                max_score=max(scores) if scores else None,
                min_score=min(scores) if scores else None,
                completed=sum(1 for r in day_rows if r.status == EvaluationStatus.COMPLETED.value),
                active=sum(1 for r in day_rows if r.status == EvaluationStatus.RUNNING.value),
                excellent=bands.count("excellent"),
                good=bands.count("good"),
                poor=bands.count("poor"),
            )
        )
    return buckets


def category_breakdown(
    rows: Iterable[ScoreRow], classifier: CategoryClassifier | None = None
) -> list[CategoryBucket]:
    """
    Group rows by name category.

    Sorted by count descending; equal counts are ordered by category name so the
    output is stable. Categories with no rows are absent.
    """

    classify = classifier.classify if classifier is not None else classify_name

    groups: dict[str, list[ScoreRow]] = defaultdict(list)
    for row in rows:
        groups[classify(row.name)].append(row)

    buckets = [
        CategoryBucket(
            category=category,
            count=len(members),
            avg_score=round_one(_mean([m.score for m in members if m.score is not None])),
            completed=sum(1 for m in members if m.status == EvaluationStatus.COMPLETED.value),
        )
        for category, members in groups.items()
    ]
    buckets.sort(key=lambda b: (-b.count, b.category))
    return buckets


def rank_recent(rows: Iterable[ScoreRow]) -> list[RecentTrend]:
    """Attach 1-based ranks to rows already ordered most-recent-first."""

    scored = [row for row in rows if row.score is not None]
    return [
        RecentTrend(
            id=row.id,
            name=row.name,
            score=float(row.score),
            status=row.status,
            updated_at=row.updated_at,
            rank=i,
        )
        for i, row in enumerate(scored, 1)
    ]
