"""Database Session Manager — async engine, per-request unit of work, readiness check.

Invariants:
    - A request session either commits through a repository save or rolls back;
      a failed request never leaves a flushed corrective action behind
    - SQLAlchemy exceptions leave this module as DatabaseError (core/errors.py),
      most specific mapping first
    - Connection pool uses pool_pre_ping for stale connection detection

Design Decisions:
    - Singleton db_manager initialized on startup: FastAPI lifespan manages lifecycle
      (ADR: no global import side effects)
    - expire_on_commit=False: snapshots are built from rows after commit
    - sqlite URLs skip pool sizing: aiosqlite uses a static pool
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from sqlalchemy.exc import (
    IntegrityError, OperationalError, DBAPIError, SQLAlchemyError,
)

from haccp_compliance.core.errors import DatabaseError, ErrorContext
from haccp_compliance.models.ccp_definition import CCPDefinitionModel
from haccp_compliance.models.equipment_calibration import EquipmentCalibrationModel
from haccp_compliance.models.pest_catalog import PestStandardModel, TrapLocationModel

logger = logging.getLogger(__name__)

# (exception type, message, operation); first match wins
SQL_ERROR_MAP: tuple[tuple[type[SQLAlchemyError], str, str], ...] = (
    (IntegrityError, "Integrity constraint violated", "commit"),
    (OperationalError, "Connection or operational error", "execute"),
    (DBAPIError, "Database driver error", "query"),
    (SQLAlchemyError, "Database operation failed", "unknown"),
)


def to_database_error(exc: SQLAlchemyError) -> DatabaseError:
    for exc_type, message, operation in SQL_ERROR_MAP:
        if isinstance(exc, exc_type):
            break
    ctx = ErrorContext(debug_info={"driver_error": type(getattr(exc, "orig", exc)).__name__})
    return DatabaseError(message, operation, ctx)


class DatabaseSessionManager:
    """Owns the engine and hands out one session per request."""

    def __init__(
        self, database_url: str, pool_size: int = 20, max_overflow: int = 10,
    ):
        engine_kwargs: dict = {"pool_pre_ping": True}
        if not database_url.startswith("sqlite"):
            engine_kwargs.update(
                pool_size=pool_size, max_overflow=max_overflow, pool_recycle=3600,
            )
        self.engine = create_async_engine(database_url, **engine_kwargs)
        self._session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Session whose uncommitted work is discarded when the request fails."""
        session = self._session_factory()
        try:
            yield session
        except SQLAlchemyError as e:
            await session.rollback()
            error = to_database_error(e)
            logger.error(
                f"DB error during request: {e}",
                extra={"error_code": error.code},
            )
            raise error from e
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

    async def health_check(self) -> bool:
        """Check database connectivity (for readiness checks)."""
        try:
            async with self.session() as db:
                await db.execute(select(1))
            return True
        except Exception as e:
            logger.error(f"DB health check failed: {e}")
            return False

    async def catalog_counts(self) -> dict[str, int]:
        """Active catalog sizes for the readiness check."""
        queries = {
            "ccp_definitions": select(func.count()).select_from(CCPDefinitionModel)
            .where(CCPDefinitionModel.status == "ACTIVE"),
            "pest_standards": select(func.count()).select_from(PestStandardModel),
            "trap_locations": select(func.count()).select_from(TrapLocationModel)
            .where(TrapLocationModel.is_active.is_(True)),
            "equipment": select(func.count()).select_from(EquipmentCalibrationModel)
            .where(EquipmentCalibrationModel.is_active.is_(True)),
        }
        async with self.session() as db:
            return {
                name: (await db.execute(query)).scalar_one()
                for name, query in queries.items()
            }


# Singleton (initialized on startup)
db_manager: DatabaseSessionManager | None = None


def init_db(database_url: str, **kwargs):
    global db_manager
    db_manager = DatabaseSessionManager(database_url, **kwargs)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency for database sessions."""
    if not db_manager:
        raise RuntimeError("Database not initialized")
    async with db_manager.session() as session:
        yield session
