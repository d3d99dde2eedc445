"""
EUDR Compliance API -- Application entry point.

Run with:
    uvicorn eudr_api.main:app --reload

Then open http://localhost:8000/docs for the interactive Swagger UI.
Set EUDR_SEED_DEMO_DATA=1 to log in as admin / password123 against the
demo supply chain.

This file:
  1. Builds the store (and seeds it when configured)
  2. Creates the FastAPI application around that store
  3. Adds session, CORS and request-logging middleware
  4. Mounts all route modules
  5. Defines the health check endpoint
"""

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.sessions import SessionMiddleware

from eudr_api import config
from eudr_api.middleware import RequestLoggingMiddleware, setup_exception_handlers
from eudr_api.models.schemas import HealthResponse
from eudr_api.routes import (
    activities,
    auth,
    compliance,
    customers,
    dashboard,
    declarations,
    documents,
    risk_categories,
    saqs,
    suppliers,
    tasks,
    users,
)
from eudr_api.seed import seed_demo_data
from eudr_api.store import MemStorage, Storage

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
)
logger = logging.getLogger(__name__)

DESCRIPTION = (
    "Compliance tracking for the EU Deforestation Regulation.\n\n"
    "Tracks suppliers, customers, inbound/outbound declarations, documents, "
    "tasks and self-assessment questionnaires, and aggregates them into "
    "the dashboard metrics.\n\n"
    "---\n\n"
    "| Area | Endpoints |\n"
    "|------|----------|\n"
    "| Session | `/api/auth/login`, `/api/auth/logout`, `/api/auth/user`, `/api/auth/register` |\n"
    "| Dashboard | `/api/dashboard`, `/api/compliance/*` |\n"
    "| Supply chain | `/api/suppliers`, `/api/customers`, `/api/declarations` |\n"
    "| Evidence | `/api/documents`, `/api/saqs` |\n"
    "| Work | `/api/tasks`, `/api/activities` |\n\n"
    "---\n\n"
    "**Storage:** in-memory. Everything is lost on restart."
)


def create_app(storage: Storage | None = None, seed_demo: bool | None = None) -> FastAPI:
    """Build the application around a store.

    storage defaults to a fresh MemStorage. seed_demo defaults to the
    EUDR_SEED_DEMO_DATA setting and only applies to a store built here."""
    if storage is None:
        storage = MemStorage()
        if config.SEED_DEMO_DATA if seed_demo is None else seed_demo:
            seed_demo_data(storage)

    app = FastAPI(
        title="EUDR Compliance API",
        version=config.VERSION,
        description=DESCRIPTION,
    )
    app.state.storage = storage

    # Middleware added last runs first: logging wraps sessions wraps CORS.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "X-Processing-Time-MS"],
    )
    app.add_middleware(
        SessionMiddleware,
        secret_key=config.SESSION_SECRET,
        session_cookie=config.SESSION_COOKIE,
        max_age=config.SESSION_MAX_AGE,
        https_only=config.SESSION_HTTPS_ONLY,
        same_site="lax",
    )
    app.add_middleware(RequestLoggingMiddleware)
    setup_exception_handlers(app)

    for module in (
        auth,
        dashboard,
        compliance,
        suppliers,
        customers,
        declarations,
        documents,
        tasks,
        activities,
        risk_categories,
        saqs,
        users,
    ):
        app.include_router(module.router)

    @app.get(
        "/v1/health",
        response_model=HealthResponse,
        summary="Health check",
        description="Returns the current status of the API. Use this for uptime monitoring.",
        tags=["System"],
    )
    async def health(request: Request) -> HealthResponse:
        counts = request.app.state.storage.counts()
        return HealthResponse(
            status="healthy",
            version=config.VERSION,
            records_stored=counts,
        )

    logger.info("EUDR Compliance API ready (%s)", storage.counts())
    return app


app = create_app()
