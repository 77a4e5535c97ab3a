"""
Evaluation routes.

Endpoints (all under /api/v1/evaluations):
- GET  /                 paginated list + global summary cards
- GET  /performance      per-date rollup, category breakdown, recent completed runs
- GET  /{id}             one evaluation
- POST /{id}/run         move an evaluation to `running` (clears its score)
- GET  /{id}/results     synthetic results report

List and performance parameters arrive as raw strings on purpose: malformed values
are replaced with defaults by `evaluations.query` instead of producing a 422.
"""

from __future__ import annotations

import logging
import random

from fastapi import APIRouter, Depends, Query

from apps.api import storage
from apps.api.auth import RUN_ROLES, AuthContext, require_roles
from apps.api.correlation import log_event
from apps.api.errors import EvaluationNotFoundError
from evaluations.query import ListQuery, resolve_days
from evaluations.results import generate_results
from evaluations.schemas.evaluation import (
    Evaluation,
    EvaluationList,
    Pagination,
    RunResponse,
    utcnow,
)
from evaluations.schemas.performance import PerformanceReport, PerformanceSummary
from evaluations.schemas.results import EvaluationResults

logger = logging.getLogger("evaluation_dashboard.api.evaluations")

router = APIRouter(
    prefix="/api/v1/evaluations",
    tags=["evaluations"],
    dependencies=[Depends(require_roles())],
)


def get_results_rng() -> random.Random | None:
    """Randomness source for `executionTime` (None = module default). Overridable in tests."""

    return None


@router.get("", response_model=EvaluationList)
@router.get("/", response_model=EvaluationList, include_in_schema=False)
def list_evaluations(
    page: str | None = Query(default=None),
    limit: str | None = Query(default=None),
    status: str | None = Query(default=None),
    sort: str | None = Query(default=None),
    order: str | None = Query(default=None),
) -> EvaluationList:
    """
    List evaluations, one page at a time.

    - `status` filters the page and its total (exact match)
    - `summary` is always computed over ALL evaluations, ignoring the filter,
      so the dashboard cards do not change when the user filters the table
    """

    query = ListQuery.from_params(page=page, limit=limit, status=status, sort=sort, order=order)
    log_event(
        logger,
        "evaluations_fetch",
        page=query.page,
        limit=query.limit,
        status=query.status,
        sort=query.sort,
        order=query.order,
    )

    evaluations, total = storage.BACKEND.list_evaluations(query)
    summary = storage.BACKEND.summary_stats()

    log_event(logger, "evaluations_fetched", count=len(evaluations), total=total)
    return EvaluationList(
        evaluations=evaluations,
        pagination=Pagination(
            page=query.page,
            limit=query.limit,
            total=total,
            total_pages=query.total_pages(total),
        ),
        summary=summary,
    )


@router.get("/performance", response_model=PerformanceReport)
def get_performance(days: str | None = Query(default=None)) -> PerformanceReport:
    """
    Chart data for the performance panel.

    `performanceOverTime` and `categoryBreakdown` cover rows updated in the last
    `days` days. `recentTrends` is the 10 most recently updated completed runs,
    independent of the window.
    """

    window = resolve_days(days)
    log_event(logger, "performance_fetch", days=window)

    now = utcnow()
    over_time = storage.BACKEND.performance_over_time(window, now=now)
    categories = storage.BACKEND.category_breakdown(window, now=now)
    recent = storage.BACKEND.recent_trends()

    log_event(
        logger, "performance_fetched", data_points=len(over_time), categories=len(categories)
    )
    return PerformanceReport(
        performance_over_time=over_time,
        category_breakdown=categories,
        recent_trends=recent,
        summary=PerformanceSummary(
            days_analyzed=window,
            total_data_points=len(over_time),
            categories=len(categories),
        ),
    )


@router.get("/{evaluation_id}", response_model=Evaluation)
def get_evaluation(evaluation_id: int) -> Evaluation:
    log_event(logger, "evaluation_fetch", evaluation_id=evaluation_id)

    evaluation = storage.BACKEND.get_evaluation(evaluation_id)
    if evaluation is None:
        raise EvaluationNotFoundError(evaluation_id)
    return evaluation


@router.post("/{evaluation_id}/run", response_model=RunResponse)
def run_evaluation(
    evaluation_id: int,
    auth: AuthContext = Depends(require_roles(RUN_ROLES)),
) -> RunResponse:
    """
    Trigger a run.

    Sets status=running, stamps last_run/updated_at and clears the score in one
    atomic update. Completing the run (status=completed + score) is done by the
    process that executes the suite; this service never writes it.
    Re-running a running evaluation simply re-stamps it.
    """

    evaluation = storage.BACKEND.start_run(evaluation_id)
    if evaluation is None:
        raise EvaluationNotFoundError(evaluation_id)

    log_event(
        logger,
        "evaluation_run_triggered",
        evaluation_id=evaluation_id,
        name=evaluation.name,
        actor=auth.user,
    )
    return RunResponse(message="Evaluation run started successfully", evaluation=evaluation)


@router.get("/{evaluation_id}/results", response_model=EvaluationResults)
def get_evaluation_results(
    evaluation_id: int,
    rng: random.Random | None = Depends(get_results_rng),
) -> EvaluationResults:
    evaluation = storage.BACKEND.get_evaluation(evaluation_id)
    if evaluation is None:
        raise EvaluationNotFoundError(evaluation_id)

    results = generate_results(evaluation, rng=rng)
    log_event(
        logger,
        "evaluation_results_fetched",
        evaluation_id=evaluation_id,
        detailed=results.test_results is not None,
    )
    return results
