"""
API error types and their HTTP mapping.

Error taxonomy
--------------
- Not found: unknown evaluation id -> 404 with `{error, message}`.
- Upstream failure: any database/SQLAlchemy error -> 500 with a generic body.
  The full exception goes to the log, never to the client.
- Bad query parameters are not errors at all: `evaluations.query` replaces them
  with safe defaults before they reach storage.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI
from sqlalchemy.exc import SQLAlchemyError
from starlette.requests import Request
from starlette.responses import JSONResponse

from apps.api.correlation import log_event

logger = logging.getLogger("evaluation_dashboard.api.errors")

INTERNAL_ERROR_BODY = {
    "error": "Internal Server Error",
    "message": "An unexpected error occurred while processing the request",
}


class EvaluationNotFoundError(Exception):
    """Raised by route handlers when storage has no row for the requested id."""

    def __init__(self, evaluation_id: int) -> None:
        self.evaluation_id = evaluation_id
        super().__init__(f"Evaluation with ID {evaluation_id} does not exist")

    def to_body(self) -> dict[str, str]:
        return {"error": "Evaluation not found", "message": str(self)}


async def _evaluation_not_found(request: Request, exc: EvaluationNotFoundError) -> JSONResponse:
    log_event(
        logger,
        "evaluation_not_found",
        level=logging.WARNING,
        evaluation_id=exc.evaluation_id,
        path=request.url.path,
    )
    return JSONResponse(status_code=404, content=exc.to_body())


async def _upstream_failure(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    log_event(
        logger,
        "upstream_failure",
        level=logging.ERROR,
        exc_info=exc,
        method=request.method,
        path=request.url.path,
        error_type=type(exc).__name__,
    )
    return JSONResponse(status_code=500, content=INTERNAL_ERROR_BODY)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(EvaluationNotFoundError, _evaluation_not_found)
    app.add_exception_handler(SQLAlchemyError, _upstream_failure)
