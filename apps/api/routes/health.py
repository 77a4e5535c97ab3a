"""Health check and diagnostic endpoints."""

from fastapi import APIRouter

from apps.api import storage

router = APIRouter(tags=["health"])


@router.get("/health")
def health_check():
    """Basic liveness check for monitoring and smoke tests."""
    return {"status": "ok"}


@router.get("/health/storage")
def storage_health_check():
    """
    Check that the evaluation store answers a query.

    Database errors propagate to the upstream-failure handler (generic 500).
    """
    return {
        "status": "ok",
        "backend": storage.backend_name(),
        "evaluations": storage.BACKEND.count_evaluations(),
    }
