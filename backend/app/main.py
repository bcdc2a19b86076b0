"""
main.py — FastAPI Application Entrypoint

Purpose:
- Initialize application services (logging, config, DB schema, relationship table).
- Register API routers.
- Define root-level health/status endpoints.
- Provide `app` object used by ASGI server (uvicorn).

Run locally (from backend/):
    uvicorn app.main:app --reload --port 8000

This file should stay clean: no business logic here.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import resolve_backend_path, settings
from app.core.database import init_db
from app.core.logging import configure_logging, get_logger
from app.api.v1 import companies
from app.services.companies.relationships import RelationshipTable

# -----------------------------------------------------------------------------
# App Initialization
# -----------------------------------------------------------------------------

configure_logging(settings.LOG_LEVEL)  # Set logging defaults at startup

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Schema is created from the ORM models; there are no migrations
    try:
        init_db()
    except Exception as e:
        logger.error("Database initialisation failed: %s", e)
        raise

    # Relationship table: a load failure leaves it empty, never aborts startup
    table = RelationshipTable(source=resolve_backend_path(settings.RELATIONSHIPS_CSV_PATH))
    app.state.relationships = table
    table.load()

    yield


app = FastAPI(
    title="Company Dashboard Backend",
    description="Company records, dimensional queries and hierarchy for the dashboard",
    version="0.1.0",
    lifespan=lifespan,
)

# -----------------------------------------------------------------------------
# CORS
# -----------------------------------------------------------------------------

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# -----------------------------------------------------------------------------
# Router Registration
# -----------------------------------------------------------------------------

# Mount all v1 API routers under /api/v1 prefix
app.include_router(companies.router, prefix="/api/v1")

# -----------------------------------------------------------------------------
# Health Check
# -----------------------------------------------------------------------------

@app.get("/")
def root():
    return {"status": "ok", "message": "Company backend running"}
