"""
Evaluation schemas (Pydantic v2).

What this file does
-------------------
This module defines the **data contracts** for evaluation records and the list/run
responses built from them.

An evaluation is a named test-suite record:
- it has a lifecycle status (pending -> running -> completed)
- it carries a score (0-100) only once it has completed
- it knows how many test cases its suite contains

Wire format note
----------------
The dashboard consumes camelCase JSON (`testCases`, `lastRun`, ...).
We keep snake_case attributes in Python and let Pydantic generate camelCase aliases.
FastAPI serializes response models *by alias*, so routes can return these models directly.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator
from pydantic.alias_generators import to_camel


LAST_RUN_FORMAT = "%Y-%m-%d %H:%M"


def utcnow() -> datetime:
    """Naive UTC timestamp (the store keeps timestamps without timezone info)."""

    return datetime.now(timezone.utc).replace(tzinfo=None)


def format_last_run(value: datetime | None) -> str | None:
    """
    Format `last_run` the way list/detail responses have always shown it.

    The format is `YYYY-MM-DD HH:MM` on a 24-hour clock followed by an AM/PM suffix,
    e.g. "2024-03-05 14:30 PM". Clients display it as-is, so it must stay stable.
    """

    if value is None:
        return None
    meridian = "AM" if value.hour < 12 else "PM"
    return f"{value.strftime(LAST_RUN_FORMAT)} {meridian}"


class CamelModel(BaseModel):
    """Base model that reads snake_case or camelCase and writes camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class EvaluationStatus(str, Enum):
    """
    Known lifecycle states.

    The stored `status` column is free text (no check constraint), so records use
    plain `str` and these values are the ones the service itself writes or filters on.
    """

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"


class EvaluationCreate(BaseModel):
    """
    Input model used when seeding evaluations into a store.

    There is no HTTP endpoint that creates evaluations; rows come from seed scripts,
    migrations, or tests. Timestamps are optional so fixtures can place rows in the past.
    """

    name: str = Field(..., min_length=1, description="Display name of the evaluation suite")
    description: str = Field(default="", description="What the suite checks")
    status: str = Field(default=EvaluationStatus.PENDING.value, description="Lifecycle status")
    score: float | None = Field(default=None, ge=0, le=100, description="Score 0-100")
    test_cases: int = Field(default=0, ge=0, description="Number of test cases in the suite")
    last_run: datetime | None = Field(default=None, description="When the last run started")
    created_at: datetime | None = Field(default=None, description="Defaults to now")
    updated_at: datetime | None = Field(default=None, description="Defaults to created_at")


class Evaluation(CamelModel):
    """Stored/returned evaluation record."""

    id: int = Field(..., description="Primary key (never reused)")
    name: str
    description: str = ""
    status: str
    score: float | None = Field(default=None, description="Null unless the evaluation completed")
    test_cases: int = Field(default=0, ge=0)
    last_run: datetime | None = None
    created_at: datetime
    updated_at: datetime

    @field_validator("last_run", mode="before")
    @classmethod
    def _parse_last_run(cls, value: Any) -> Any:
        # Accept our own display format so a dumped record validates again.
        if isinstance(value, str) and value[-3:] in (" AM", " PM"):
            return datetime.strptime(value[:-3], LAST_RUN_FORMAT)
        return value

    @field_serializer("last_run")
    def _serialize_last_run(self, value: datetime | None) -> str | None:
        return format_last_run(value)


class Pagination(CamelModel):
    page: int = Field(..., ge=1)
    limit: int = Field(..., ge=1)
    total: int = Field(..., ge=0)
    total_pages: int = Field(..., ge=0)


class EvaluationSummary(CamelModel):
    """
    Global statistics shown in the dashboard cards.

    These are always computed over the *whole* table, never over the current filter.
    """

    total_evaluations: int = Field(..., ge=0)
    average_score: float = Field(..., description="Average score, one decimal, 0 if none")
    active_tests: int = Field(..., ge=0, description="Rows currently in the running state")


class EvaluationList(CamelModel):
    """Response body for GET /api/v1/evaluations."""

    evaluations: list[Evaluation]
    pagination: Pagination
    summary: EvaluationSummary


class RunResponse(CamelModel):
    """Response body for POST /api/v1/evaluations/{id}/run."""

    message: str
    evaluation: Evaluation
