"""Health & Readiness — process liveness, database reachability, catalog presence.

Invariants:
    - GET /health/ always returns 200 if the process is up (liveness)
    - GET /health/ready returns 503 only when the database is unreachable
    - An empty CCP or pest-standard catalog is reported as a warning, not a failure:
      records still evaluate (unknown parameters, unconfigured traps) and the
      operator must see why

Design Decisions:
    - Catalog counts in readiness over a separate endpoint: one request answers
      "can this instance produce verdicts?"
"""

import logging

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from haccp_compliance.infrastructure import database

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/health", tags=["health"])

SERVICE_NAME = "haccp-compliance-api"
SERVICE_VERSION = "1.0.0"
REQUIRED_CATALOGS = ("ccp_definitions", "pest_standards")


@router.get("/", status_code=status.HTTP_200_OK)
async def health_check():
    return {"status": "healthy", "service": SERVICE_NAME, "version": SERVICE_VERSION}


@router.get("/ready")
async def readiness_check():
    manager = database.db_manager
    if manager is None or not await manager.health_check():
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "not_ready", "reason": "database_unavailable"},
        )
    counts = await manager.catalog_counts()
    warnings = [f"{name}_empty" for name in REQUIRED_CATALOGS if not counts[name]]
    if warnings:
        logger.warning(f"Ready with empty catalogs: {', '.join(warnings)}")
    return {
        "status": "ready",
        "checks": {"database": "healthy", "catalogs": counts},
        "warnings": warnings,
    }
