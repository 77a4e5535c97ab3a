"""
Synthetic results for a single evaluation.

Important: nothing here executes tests
--------------------------------------
The detail view needs a pass/fail breakdown and headline metrics, but no test engine
produces them. Instead, every figure is a fixed function of two stored fields:
`score` and `test_cases`. Only `executionTime` is random.

Formulas (for a completed evaluation with score s and n test cases)
--------------------------------------------------------------------
- True Positives:  floor(n * 0.60)              percentage 60
- True Negatives:  floor(n * (s/100 - 0.60))    percentage round(s - 60)
- False Positives: floor(n * 0.05)              percentage 5
- False Negatives: n - (the three above)        percentage round(100 - s - 5)

The four counts always sum to n because the last one is the remainder.
The percentages are computed independently and need not sum to 100
(e.g. s=92.5 gives 60 + 33 + 5 + 3 = 101). Clients show them as-is.

Counts use `fractions.Fraction` (exact), and `round` here means half-up, so results are
identical on every platform. A score below 60 makes the True Negatives count negative;
the remainder keeps the sum exact.

Metrics are fixed scalings of s/100, computed in Decimal and rounded up to 3 places:
precision x0.95, recall x0.98, F1 x0.965, AUC x0.99.
"""

from __future__ import annotations

import math
import random
from decimal import ROUND_CEILING, Decimal
from fractions import Fraction

from evaluations.schemas.evaluation import Evaluation, EvaluationStatus, format_last_run
from evaluations.schemas.results import (
    EvaluationResults,
    ResultMetrics,
    ResultsSummary,
    TestResultBucket,
)

TRUE_POSITIVE_SHARE = Fraction(60, 100)
FALSE_POSITIVE_SHARE = Fraction(5, 100)

METRIC_SCALES: dict[str, Decimal] = {
    "precision": Decimal("0.95"),
    "recall": Decimal("0.98"),
    "f1_score": Decimal("0.965"),
    "auc": Decimal("0.99"),
}

WARNING_THRESHOLD = 90
LOW_SCORE_WARNINGS: tuple[str, ...] = (
    "Some test cases had ambiguous ground truth labels",
    "Model confidence threshold may need adjustment",
)

# Execution time is drawn from [MIN, MAX) seconds.
EXECUTION_TIME_MIN_SECONDS = 60
EXECUTION_TIME_MAX_SECONDS = 360


def _exact(score: float) -> Fraction:
    # Parse from the decimal text so 92.1 means 921/10, not its binary approximation.
    return Fraction(str(score))


def _round_half_up(value: Fraction) -> int:
    return math.floor(value + Fraction(1, 2))


def has_details(evaluation: Evaluation) -> bool:
    """Only completed evaluations with a score get a detailed breakdown."""

    return evaluation.status == EvaluationStatus.COMPLETED.value and evaluation.score is not None


def passed_count(test_cases: int, score: float) -> int:
    return math.floor(test_cases * _exact(score) / 100)


def build_test_results(test_cases: int, score: float) -> list[TestResultBucket]:
    """Partition `test_cases` into the four confusion-matrix buckets."""

    s = _exact(score)
    true_pos = math.floor(test_cases * TRUE_POSITIVE_SHARE)
    true_neg = math.floor(test_cases * (s / 100 - TRUE_POSITIVE_SHARE))
    false_pos = math.floor(test_cases * FALSE_POSITIVE_SHARE)
    false_neg = test_cases - true_pos - true_neg - false_pos

    return [
        TestResultBucket(category="True Positives", count=true_pos, percentage=60),
        TestResultBucket(
            category="True Negatives", count=true_neg, percentage=_round_half_up(s - 60)
        ),
        TestResultBucket(category="False Positives", count=false_pos, percentage=5),
        TestResultBucket(
            category="False Negatives", count=false_neg, percentage=_round_half_up(100 - s - 5)
        ),
    ]


def build_metrics(score: float) -> ResultMetrics:
    base = Decimal(str(score)) / Decimal(100)
    values = {
        name: str((base * scale).quantize(Decimal("0.001"), rounding=ROUND_CEILING))
        for name, scale in METRIC_SCALES.items()
    }
    return ResultMetrics(**values)


def build_warnings(score: float) -> list[str]:
    return list(LOW_SCORE_WARNINGS) if score < WARNING_THRESHOLD else []


def format_execution_time(rng: random.Random) -> str:
    seconds = rng.randrange(EXECUTION_TIME_MIN_SECONDS, EXECUTION_TIME_MAX_SECONDS)
    return f"{seconds}s"


def generate_results(
    evaluation: Evaluation, rng: random.Random | None = None
) -> EvaluationResults:
    """
    Build the results payload for an evaluation.

    `rng` is the randomness source for `executionTime`; pass a seeded
    `random.Random` for reproducible output. Defaults to the module-level generator.
    """

    results = EvaluationResults(
        id=evaluation.id,
        name=evaluation.name,
        description=evaluation.description,
        status=evaluation.status,
        score=evaluation.score,
        test_cases=evaluation.test_cases,
        last_run=format_last_run(evaluation.last_run),
        summary=ResultsSummary(total_tests=evaluation.test_cases, accuracy=evaluation.score),
    )
    score = evaluation.score
    if score is None or not has_details(evaluation):
        return results

    passed = passed_count(evaluation.test_cases, score)

    results.summary.passed = passed
    results.summary.failed = evaluation.test_cases - passed
    results.test_results = build_test_results(evaluation.test_cases, score)
    results.metrics = build_metrics(score)
    results.execution_time = format_execution_time(rng or _RNG)
    results.errors = build_warnings(score)
    return results


_RNG = random.Random()
