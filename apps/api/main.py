import logging
import os
import time
from pathlib import Path
from uuid import uuid4

from dotenv import load_dotenv

# Load environment variables from .env file (if it exists) before anything reads them
# (storage picks its backend at import time).
env_path = Path(__file__).parent.parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

from fastapi import FastAPI  # noqa: E402
from starlette.middleware.cors import CORSMiddleware  # noqa: E402
from starlette.requests import Request  # noqa: E402
from starlette.responses import Response  # noqa: E402

from apps.api import storage  # noqa: E402
from apps.api.correlation import log_event, set_correlation_id  # noqa: E402
from apps.api.errors import register_exception_handlers  # noqa: E402
from apps.api.routes.evaluations import router as evaluations_router  # noqa: E402
from apps.api.routes.health import router as health_router  # noqa: E402
from evaluations.seed import seed_backend  # noqa: E402

# Logger for request-level structured logs.
# In production you would configure handlers/formatters (JSON logs, log shipping, etc.).
logging.basicConfig(level=logging.INFO, format="%(levelname)s:%(name)s:%(message)s")
logger = logging.getLogger("evaluation_dashboard.api")

# FastAPI application instance.
app = FastAPI(title="Evaluation Dashboard API")

logger.info("Storage backend: %s", storage.backend_name())

# CORS: allow the Streamlit dashboard (and configured origins) to call the API.
_cors_origins = os.environ.get("CORS_ORIGINS", "http://localhost:8501,http://127.0.0.1:8501")
app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in _cors_origins.split(",") if o.strip()],
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "X-API-Key"],
)


# Middleware: attach a correlation ID to every request and log one line per request.
@app.middleware("http")
async def correlation_id_middleware(request: Request, call_next) -> Response:
    correlation_id = uuid4()
    set_correlation_id(correlation_id)

    start = time.perf_counter()
    response: Response = await call_next(request)
    duration_ms = (time.perf_counter() - start) * 1000.0

    log_event(
        logger,
        "http_request",
        method=request.method,
        path=request.url.path,
        status_code=response.status_code,
        duration_ms=round(duration_ms, 2),
    )
    response.headers["X-Correlation-ID"] = str(correlation_id)
    return response


register_exception_handlers(app)

# Register routers (API modules).
app.include_router(health_router)
app.include_router(evaluations_router)


def _auto_seed_evaluations() -> None:
    """Insert the demo evaluation set on startup if enabled and the store is empty."""
    auto_seed = os.getenv("AUTO_SEED_EVALUATIONS", "").strip().lower() in ("1", "true", "yes")
    if not auto_seed:
        return

    inserted = seed_backend(storage.BACKEND, only_if_empty=True)
    if inserted:
        logger.info("Auto-seeded %d demo evaluations on startup", inserted)
    else:
        logger.info("Evaluations already present, skipping auto-seed")


_auto_seed_evaluations()
