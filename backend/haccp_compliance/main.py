"""HACCP Compliance API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery — ExMA anti-pattern)
    - Global error handlers map HaccpError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Database initialized on startup via lifespan context manager

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - Error handlers live in api/error_handlers.py (ADR: ExMA import fan-out < 10)
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from haccp_compliance.api.error_handlers import register_error_handlers
from haccp_compliance.api.routes import calibration, ccp_records, health, pest_control
from haccp_compliance.config import get_settings
from haccp_compliance.infrastructure.database import init_db
from haccp_compliance.infrastructure.observability import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    logger.info("HACCP compliance API started")
    yield
    logger.info("HACCP compliance API shutting down")


app = FastAPI(
    title="HACCP Compliance API", version="1.0.0", lifespan=lifespan,
)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routes: explicit registration (ExMA: no convention-over-config)
app.include_router(health.router)
app.include_router(ccp_records.router)
app.include_router(pest_control.router)
app.include_router(calibration.router)

register_error_handlers(app)
