"""
Chart builders and display formatting for the dashboard.

All data arrives pre-aggregated from the API; this module only reshapes it for
Plotly and formats values for display.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

import plotly.graph_objects as go

from evaluations.aggregate import score_band

COLORS = ["#3B82F6", "#10B981", "#F59E0B", "#EF4444", "#8B5CF6", "#06B6D4", "#84CC16"]

BAND_COLORS = {"excellent": "#16A34A", "good": "#2563EB", "poor": "#DC2626"}

STATUS_BADGES = {"completed": "🟢", "running": "🔵", "pending": "🟡"}

CHART_HEIGHT = 300


class ChartMode(str, Enum):
    TRENDS = "trends"
    CATEGORIES = "categories"
    OVERVIEW = "overview"


MODE_LABELS = {
    ChartMode.TRENDS: "📈 Score Trends",
    ChartMode.CATEGORIES: "📊 Categories",
    ChartMode.OVERVIEW: "🥧 Overview",
}


def available_modes(compact: bool) -> list[ChartMode]:
    """Compact panels show only the trends chart (and no mode selector)."""

    return [ChartMode.TRENDS] if compact else list(ChartMode)


# ============================================================================
# FORMATTING
# ============================================================================

def format_date(value: Any) -> str:
    """ISO date/datetime -> MM/DD/YYYY. Unparseable values are returned unchanged."""

    if isinstance(value, datetime):
        return value.strftime("%m/%d/%Y")
    text = str(value or "")
    try:
        return datetime.fromisoformat(text.replace("Z", "")).strftime("%m/%d/%Y")
    except ValueError:
        return text


def format_score(score: float | None) -> str:
    if score is None:
        return "-"
    return f"{score:g}%"


def status_label(status: str | None) -> str:
    text = status or ""
    return text[:1].upper() + text[1:]


def status_badge(status: str | None) -> str:
    return f"{STATUS_BADGES.get(status or '', '⚪')} {status_label(status)}"


def header_caption(summary: dict[str, Any]) -> str:
    return f"Last {summary.get('daysAnalyzed', 0)} days • {summary.get('totalDataPoints', 0)} data points"


# ============================================================================
# FIGURES
# ============================================================================

def _apply_layout(fig: go.Figure, yaxis_title: str | None = None) -> go.Figure:
    fig.update_layout(
        height=CHART_HEIGHT,
        margin=dict(l=20, r=20, t=30, b=20),
        plot_bgcolor="white",
        legend=dict(orientation="h", yanchor="bottom", y=1.02, xanchor="left", x=0),
        yaxis_title=yaxis_title,
    )
    fig.update_yaxes(gridcolor="#E5E7EB")
    return fig


def trends_figure(performance_over_time: list[dict[str, Any]]) -> go.Figure:
    """Average / max / min score per day."""

    dates = [format_date(p.get("date")) for p in performance_over_time]
    fig = go.Figure()
    for key, name, color in (
        ("avgScore", "Average Score", COLORS[0]),
        ("maxScore", "Max Score", COLORS[1]),
        ("minScore", "Min Score", COLORS[3]),
    ):
        fig.add_trace(
            go.Scatter(
                x=dates,
                y=[p.get(key) for p in performance_over_time],
                mode="lines+markers",
                name=name,
                line=dict(color=color, width=3 if key == "avgScore" else 2),
                hovertemplate="%{y}%<extra>" + name + "</extra>",
            )
        )
    fig.update_yaxes(range=[0, 100])
    return _apply_layout(fig, "Score (%)")


def categories_figure(category_breakdown: list[dict[str, Any]]) -> go.Figure:
    """Total vs completed tests per category; average score in the hover."""

    categories = [c.get("category") for c in category_breakdown]
    avg_scores = [c.get("avgScore") for c in category_breakdown]
    fig = go.Figure(
        data=[
            go.Bar(
                x=categories,
                y=[c.get("count") for c in category_breakdown],
                name="Total Tests",
                marker_color=COLORS[0],
                customdata=avg_scores,
                hovertemplate="%{y} tests<br>Average Score: %{customdata}%<extra></extra>",
            ),
            go.Bar(
                x=categories,
                y=[c.get("completed") for c in category_breakdown],
                name="Completed Tests",
                marker_color=COLORS[1],
            ),
        ]
    )
    fig.update_layout(barmode="group")
    return _apply_layout(fig)


def overview_figure(category_breakdown: list[dict[str, Any]]) -> go.Figure:
    """Share of evaluations per category."""

    fig = go.Figure(
        data=[
            go.Pie(
                labels=[c.get("category") for c in category_breakdown],
                values=[int(c.get("count") or 0) for c in category_breakdown],
                marker=dict(colors=[COLORS[i % len(COLORS)] for i in range(len(category_breakdown))]),
                textinfo="label+percent",
                sort=False,
            )
        ]
    )
    fig.update_layout(height=250, margin=dict(l=10, r=10, t=10, b=10), showlegend=False)
    return fig


def recent_scores(recent_trends: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Rows for the "Recent Evaluation Scores" list, coloured by score band."""

    rows = []
    for trend in recent_trends:
        band = score_band(trend.get("score"))
        rows.append(
            {
                "name": trend.get("name"),
                "date": format_date(trend.get("updatedAt")),
                "score": format_score(trend.get("score")),
                "band": band,
                "color": BAND_COLORS.get(band or "", "#6B7280"),
            }
        )
    return rows
