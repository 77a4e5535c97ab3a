"""API client for the Streamlit dashboard."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from enum import Enum
from typing import Any

import httpx

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1/evaluations"
DEFAULT_API_URL = "http://localhost:8000"


class LoadState(str, Enum):
    """Where a view's data currently is."""

    LOADING = "loading"
    ERROR = "error"
    READY = "ready"


@dataclass(frozen=True)
class LoadResult:
    """Outcome of one fetch. Views render from this, never from raw responses."""

    state: LoadState
    data: Any = None
    error: str | None = None

    @classmethod
    def loading(cls) -> "LoadResult":
        return cls(state=LoadState.LOADING)

    @classmethod
    def ready(cls, data: Any) -> "LoadResult":
        return cls(state=LoadState.READY, data=data)

    @classmethod
    def failed(cls, message: str) -> "LoadResult":
        return cls(state=LoadState.ERROR, error=message)

    @property
    def ok(self) -> bool:
        return self.state is LoadState.READY


def _error_message(response: httpx.Response) -> str:
    """Prefer the API's `message` (or FastAPI's `detail`) over a bare status code."""

    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        for key in ("message", "detail", "error"):
            if isinstance(body.get(key), str):
                return body[key]
    return f"HTTP {response.status_code}"


class EvaluationsService:
    """
    Thin wrapper over the evaluation endpoints.

    Every method returns a LoadResult. Network and HTTP failures become the ERROR
    state (and a warning in the log) so one failing view can show a retry button
    while the rest of the page keeps working.
    """

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        *,
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._base_url = (base_url or os.getenv("DASHBOARD_API_URL", DEFAULT_API_URL)).rstrip("/")
        key = api_key if api_key is not None else os.getenv("DASHBOARD_API_KEY")
        self._headers = {"X-API-Key": key} if key else {}
        self._timeout = timeout
        self._transport = transport

    @property
    def base_url(self) -> str:
        return self._base_url

    def _request(
        self, method: str, path: str, params: dict[str, Any] | None = None
    ) -> LoadResult:
        url = f"{API_PREFIX}{path}"
        try:
            with httpx.Client(
                base_url=self._base_url,
                headers=self._headers,
                timeout=self._timeout,
                transport=self._transport,
            ) as client:
                response = client.request(method, url, params=params)
                response.raise_for_status()
                return LoadResult.ready(response.json())
        except httpx.HTTPStatusError as exc:
            message = _error_message(exc.response)
            logger.warning("%s %s failed: %s", method, url, message)
            return LoadResult.failed(message)
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed: %s", method, url, exc)
            return LoadResult.failed(f"Could not reach the evaluation API: {exc}")
        except ValueError as exc:
            logger.warning("%s %s returned invalid JSON: %s", method, url, exc)
            return LoadResult.failed("The evaluation API returned an invalid response")

    def list_evaluations(
        self,
        *,
        page: int = 1,
        limit: int = 10,
        status: str | None = None,
        sort: str = "updated_at",
        order: str = "desc",
    ) -> LoadResult:
        params: dict[str, Any] = {"page": page, "limit": limit, "sort": sort, "order": order}
        if status:
            params["status"] = status
        return self._request("GET", "", params=params)

    def performance(self, days: int = 30) -> LoadResult:
        return self._request("GET", "/performance", params={"days": days})

    def get_evaluation(self, evaluation_id: int) -> LoadResult:
        return self._request("GET", f"/{evaluation_id}")

    def results(self, evaluation_id: int) -> LoadResult:
        return self._request("GET", f"/{evaluation_id}/results")

    def run(self, evaluation_id: int) -> LoadResult:
        return self._request("POST", f"/{evaluation_id}/run")


def pick_evaluation_to_run(evaluations: list[dict[str, Any]]) -> dict[str, Any] | None:
    """
    Choose the target of "Run New Evaluation".

    First pending evaluation, else the first completed one (re-run), else the first row.
    """

    if not evaluations:
        return None
    for status in ("pending", "completed"):
        for evaluation in evaluations:
            if evaluation.get("status") == status:
                return evaluation
    return evaluations[0]
