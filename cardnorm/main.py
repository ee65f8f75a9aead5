"""
Card Normalizer — Application Entrypoint

Configures structlog, creates the async SQLAlchemy engine and runs the
maintenance pass (duplicate merge, then price-anomaly correction) over the
stored card records.

Run via:
    python -m cardnorm.main
"""

from __future__ import annotations

import asyncio
import logging
import sys
from typing import Any

import structlog
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from cardnorm import __version__
from cardnorm.config import settings
from cardnorm.pipeline.anomalies import PriceAnomalyCorrector
from cardnorm.pipeline.normalizer import run_maintenance


# ---------------------------------------------------------------------------
# Structlog Configuration
# ---------------------------------------------------------------------------


def configure_logging(log_level: str = "INFO") -> None:
    """
    Set up structured logging with JSON output.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR).
    """
    # Configure stdlib logging first (for SQLAlchemy and aiosqlite)
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper()),
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.JSONRenderer(),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


# ---------------------------------------------------------------------------
# Database Setup
# ---------------------------------------------------------------------------


def create_db_engine(database_url: str | None = None) -> tuple[Any, async_sessionmaker[AsyncSession]]:
    """
    Create SQLAlchemy async engine and session factory.

    Args:
        database_url: Override for settings.DATABASE_URL.

    Returns:
        (engine, session_factory) tuple.
    """
    logger = structlog.get_logger(__name__)
    url = database_url or settings.DATABASE_URL

    logger.info("database_engine_initializing", database_url=url)

    engine = create_async_engine(url, echo=False, pool_pre_ping=True)
    session_factory = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )

    logger.info("database_engine_ready")
    return engine, session_factory


# ---------------------------------------------------------------------------
# Maintenance Run
# ---------------------------------------------------------------------------


async def main() -> None:
    """
    Maintenance entrypoint.

    Execution order:
    1. Configure logging (structlog JSON)
    2. Create async database engine and session factory
    3. Verify database connection (health check)
    4. Merge duplicates, correct price anomalies, validate the result
    """
    configure_logging(log_level=settings.LOG_LEVEL)
    logger = structlog.get_logger(__name__)

    logger.info("cardnorm_maintenance_begin", version=__version__)

    engine, session_factory = create_db_engine()

    try:
        async with session_factory() as session:
            await session.execute(text("SELECT 1"))
        logger.info("database_health_check_passed")
    except Exception as e:
        logger.error(
            "database_health_check_failed",
            error=str(e),
            error_type=type(e).__name__,
        )
        await engine.dispose()
        raise

    try:
        summary = await run_maintenance(session_factory)
        report = await PriceAnomalyCorrector(session_factory).validate()
        logger.info(
            "cardnorm_maintenance_complete",
            groups_merged=summary.merge.groups_merged,
            records_removed=summary.merge.records_removed,
            groups_failed=len(summary.merge.failed_titles),
            records_corrected=summary.correction.records_corrected,
            multipliers_computed=summary.correction.multipliers_computed,
            remaining_anomalies=report.remaining_anomalies,
        )
    finally:
        await engine.dispose()


# ---------------------------------------------------------------------------
# CLI Entry
# ---------------------------------------------------------------------------


if __name__ == "__main__":
    asyncio.run(main())
