"""
Evaluation dashboard (Streamlit).

Run from repo root (API must be running, see DASHBOARD_API_URL):
    streamlit run apps/dashboard/app.py

Layout:
- header with "Run New Evaluation"
- three summary cards (global, unaffected by filters)
- performance panel: score trends / categories / overview tabs + recent scores
- evaluations table with pagination, "View Results" dialog and "Run Again"
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

# Repo root on sys.path: `streamlit run` only adds this file's directory.
ROOT = Path(__file__).resolve().parent.parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pandas as pd  # noqa: E402
import streamlit as st  # noqa: E402
from dotenv import load_dotenv  # noqa: E402

load_dotenv(dotenv_path=ROOT / ".env")

from apps.dashboard.charts import (  # noqa: E402
    MODE_LABELS,
    ChartMode,
    available_modes,
    categories_figure,
    format_score,
    header_caption,
    overview_figure,
    recent_scores,
    status_badge,
    status_label,
    trends_figure,
)
from apps.dashboard.service import (  # noqa: E402
    EvaluationsService,
    LoadResult,
    LoadState,
    pick_evaluation_to_run,
)
from evaluations.query import SORT_FIELDS  # noqa: E402

st.set_page_config(page_title="Model Evaluations", page_icon="✅", layout="wide")

STATUS_OPTIONS = ["All", "pending", "running", "completed"]
PAGE_SIZES = [10, 25, 50]


@st.cache_resource
def get_service() -> EvaluationsService:
    return EvaluationsService()


service = get_service()
st.session_state.setdefault("page", 1)


def _reset_page() -> None:
    st.session_state["page"] = 1


def _trigger_run(evaluation: dict[str, Any]) -> None:
    result = service.run(evaluation["id"])
    if result.ok:
        st.toast(f"Run started: {evaluation['name']}", icon="🚀")
    else:
        st.session_state["run_error"] = result.error


# ============================================================================
# SIDEBAR
# ============================================================================

with st.sidebar:
    st.header("Filters")
    status_filter = st.selectbox("Status", STATUS_OPTIONS, format_func=status_label, on_change=_reset_page)
    sort = st.selectbox(
        "Sort by",
        SORT_FIELDS,
        index=SORT_FIELDS.index("updated_at"),
        format_func=lambda f: f.replace("_", " ").title(),
        on_change=_reset_page,
    )
    order = st.radio("Order", ["desc", "asc"], horizontal=True, on_change=_reset_page)
    limit = st.selectbox("Rows per page", PAGE_SIZES, on_change=_reset_page)

    st.header("Performance")
    days = st.slider("Days analysed", min_value=7, max_value=90, value=30)
    compact = st.toggle("Compact charts", value=False)

    st.markdown("---")
    st.caption(f"API: {service.base_url}")


# ============================================================================
# RESULTS DIALOG
# ============================================================================

def _render_results(report: dict[str, Any]) -> None:
    st.subheader(report.get("name", ""))
    if report.get("description"):
        st.caption(report["description"])

    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Status", status_label(report.get("status")))
    col2.metric("Score", format_score(report.get("score")))
    col3.metric("Test Cases", report.get("testCases", 0))
    col4.metric("Execution Time", report.get("executionTime") or "-")
    st.caption(f"Last run: {report.get('lastRun') or 'Never'}")

    summary = report.get("summary") or {}
    if report.get("testResults") is None:
        st.info("Detailed results are available once the evaluation has completed with a score.")
        return

    s1, s2, s3 = st.columns(3)
    s1.metric("Passed", summary.get("passed"))
    s2.metric("Failed", summary.get("failed"))
    s3.metric("Accuracy", f"{summary.get('accuracy')}%")

    st.markdown("**Test results**")
    st.dataframe(
        pd.DataFrame(report["testResults"]).rename(
            columns={"category": "Category", "count": "Count", "percentage": "Percentage (%)"}
        ),
        hide_index=True,
        use_container_width=True,
    )

    metrics = report.get("metrics") or {}
    m1, m2, m3, m4 = st.columns(4)
    m1.metric("Precision", metrics.get("precision"))
    m2.metric("Recall", metrics.get("recall"))
    m3.metric("F1 Score", metrics.get("f1Score"))
    m4.metric("AUC", metrics.get("auc"))

    for warning in report.get("errors") or []:
        st.warning(warning)


@st.dialog("Evaluation Results", width="large")
def results_dialog(evaluation_id: int) -> None:
    """Opened by a row's View click only; results are fetched here and dropped on close."""

    with st.spinner("Loading results..."):
        result = service.results(evaluation_id)

    if result.state is LoadState.ERROR:
        st.error("Failed to load evaluation results. Please try again.")
        st.caption(result.error)
    else:
        _render_results(result.data)

    if st.button("Close", key="close-results"):
        st.rerun()


# ============================================================================
# PERFORMANCE PANEL
# ============================================================================

def _render_mode(mode: ChartMode, data: dict[str, Any]) -> None:
    if mode is ChartMode.TRENDS:
        points = data.get("performanceOverTime") or []
        if not points:
            st.info("No evaluations were updated in this period.")
            return
        st.plotly_chart(trends_figure(points), use_container_width=True)
        return

    categories = data.get("categoryBreakdown") or []
    if not categories:
        st.info("No category data for this period.")
        return
    if mode is ChartMode.CATEGORIES:
        st.plotly_chart(categories_figure(categories), use_container_width=True)
        return

    left, right = st.columns([3, 2])
    with left:
        st.plotly_chart(overview_figure(categories), use_container_width=True)
    with right:
        st.markdown("**Recent Evaluation Scores**")
        rows = recent_scores(data.get("recentTrends") or [])
        if not rows:
            st.caption("No completed evaluations yet.")
        for row in rows:
            st.markdown(
                f"{row['name']}  \n"
                f"<span style='color:#6B7280'>{row['date']}</span> "
                f"<b style='color:{row['color']}'>{row['score']}</b>",
                unsafe_allow_html=True,
            )


@st.fragment
def performance_panel(days: int, compact: bool) -> None:
    st.subheader("📈 Performance Overview")
    with st.spinner("Loading performance data..."):
        result = service.performance(days)

    if result.state is LoadState.ERROR:
        st.error("Failed to load performance data.")
        st.caption(result.error)
        if st.button("Retry", key="retry-performance"):
            st.rerun(scope="fragment")
        return

    data = result.data
    st.caption(header_caption(data.get("summary") or {}))

    modes = available_modes(compact)
    if len(modes) == 1:
        _render_mode(modes[0], data)
        return
    for tab, mode in zip(st.tabs([MODE_LABELS[m] for m in modes]), modes):
        with tab:
            _render_mode(mode, data)


# ============================================================================
# EVALUATIONS TABLE
# ============================================================================

def _load_evaluations() -> LoadResult:
    with st.spinner("Loading evaluations..."):
        return service.list_evaluations(
            page=st.session_state["page"],
            limit=limit,
            status=None if status_filter == "All" else status_filter,
            sort=sort,
            order=order,
        )


def _render_summary_cards(summary: dict[str, Any]) -> None:
    col1, col2, col3 = st.columns(3)
    col1.metric("Total Evaluations", summary.get("totalEvaluations", 0))
    col2.metric("Average Score", f"{summary.get('averageScore', 0)}%")
    col3.metric("Active Tests", summary.get("activeTests", 0))


def _render_table(evaluations: list[dict[str, Any]]) -> None:
    if not evaluations:
        st.info("No evaluations match the current filters.")
        return

    widths = [4, 2, 1, 1, 2, 2]
    header = st.columns(widths)
    for col, title in zip(header, ["Evaluation", "Status", "Score", "Test Cases", "Last Run", "Actions"]):
        col.markdown(f"**{title}**")

    for evaluation in evaluations:
        name_col, status_col, score_col, cases_col, run_col, actions_col = st.columns(widths)
        name_col.markdown(f"**{evaluation['name']}**  \n{evaluation.get('description') or ''}")
        status_col.write(status_badge(evaluation.get("status")))
        score_col.write(format_score(evaluation.get("score")))
        cases_col.write(evaluation.get("testCases", 0))
        run_col.write(evaluation.get("lastRun") or "Never")
        with actions_col:
            view, rerun = st.columns(2)
            if view.button("View", key=f"view-{evaluation['id']}", help="View results"):
                results_dialog(evaluation["id"])
            if rerun.button("Run", key=f"run-{evaluation['id']}", help="Run again"):
                _trigger_run(evaluation)
                st.rerun()


def _render_pagination(pagination: dict[str, Any]) -> None:
    page = pagination.get("page", 1)
    total_pages = pagination.get("totalPages", 0)
    prev_col, info_col, next_col = st.columns([1, 4, 1])
    if prev_col.button("← Previous", disabled=page <= 1):
        st.session_state["page"] = page - 1
        st.rerun()
    info_col.caption(
        f"Page {page} of {max(total_pages, 1)} • {pagination.get('total', 0)} evaluations"
    )
    if next_col.button("Next →", disabled=page >= total_pages):
        st.session_state["page"] = page + 1
        st.rerun()


# ============================================================================
# PAGE
# ============================================================================

listing = _load_evaluations()
evaluations = listing.data.get("evaluations", []) if listing.ok else []

title_col, button_col = st.columns([4, 1])
title_col.title("Model Evaluations")
title_col.caption("Monitor evaluation runs, scores and results across test suites.")
if button_col.button("▶ Run New Evaluation", type="primary", disabled=not evaluations):
    target = pick_evaluation_to_run(evaluations)
    if target is not None:
        _trigger_run(target)
        st.rerun()

if "run_error" in st.session_state:
    st.error(f"Failed to start evaluation run: {st.session_state.pop('run_error')}")

if listing.state is LoadState.ERROR:
    st.error("Failed to load evaluations.")
    st.caption(listing.error)
    if st.button("Retry", key="retry-evaluations"):
        st.rerun()
else:
    _render_summary_cards(listing.data.get("summary") or {})

st.markdown("---")
performance_panel(days, compact)

st.markdown("---")
st.subheader("📋 Evaluations")
if listing.ok:
    _render_table(evaluations)
    _render_pagination(listing.data.get("pagination") or {})
