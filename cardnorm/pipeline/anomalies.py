"""
Card Normalizer — Price-Anomaly Corrector

Runs after the duplicate merger. Repairs records whose price relationships
are impossible (a raw card priced above its PSA 10, a PSA 9 above a PSA 10)
and fills in missing or stale PSA 10 multipliers. The arithmetic lives in
cardnorm.engine.prices; this module applies it to stored records.
"""

from __future__ import annotations

from typing import NamedTuple

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from cardnorm.engine.prices import compute_multiplier, correct_prices, find_anomalies
from cardnorm.models.card_record import CardRecord
from cardnorm.pipeline.merger import price_fields_of

logger = structlog.get_logger(__name__)


class CorrectionSummary(NamedTuple):
    records_corrected: int
    multipliers_computed: int


class ValidationReport(NamedTuple):
    remaining_anomalies: int
    missing_multipliers: int   # Records whose multiplier is missing or stale


class PriceAnomalyCorrector:
    """Applies the price-anomaly rules to every stored card record."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def run(self) -> CorrectionSummary:
        """
        Correct every record in one transaction.

        Returns:
            CorrectionSummary with the number of records whose prices were
            rescaled and the number of multipliers (re)computed.
        """
        corrected = computed = 0
        async with self.session_factory() as session:
            async with session.begin():
                result = await session.execute(select(CardRecord).order_by(CardRecord.id))
                for record in result.scalars():
                    outcome = correct_prices(price_fields_of(record))
                    if not outcome.changed:
                        continue

                    for name, value in outcome.prices._asdict().items():
                        setattr(record, name, value)

                    if outcome.corrections:
                        corrected += 1
                        logger.info(
                            "price_anomaly_corrected",
                            card_id=record.id,
                            canonical_title=record.canonical_title,
                            corrections=list(outcome.corrections),
                            source="anomalies",
                        )
                    if outcome.multiplier_computed:
                        computed += 1

        summary = CorrectionSummary(corrected, computed)
        logger.info(
            "price_anomaly_correction_complete",
            records_corrected=summary.records_corrected,
            multipliers_computed=summary.multipliers_computed,
            source="anomalies",
        )
        return summary

    async def validate(self) -> ValidationReport:
        """Count the anomalies and missing or stale multipliers still present."""
        anomalies = missing = 0
        async with self.session_factory() as session:
            result = await session.execute(select(CardRecord))
            for record in result.scalars():
                prices = price_fields_of(record)
                if find_anomalies(prices):
                    anomalies += 1
                expected = compute_multiplier(prices)
                if expected is not None and prices.multiplier != expected:
                    missing += 1

        report = ValidationReport(anomalies, missing)
        log = logger.warning if anomalies else logger.info
        log(
            "price_validation_complete",
            remaining_anomalies=report.remaining_anomalies,
            missing_multipliers=report.missing_multipliers,
            source="anomalies",
        )
        return report
