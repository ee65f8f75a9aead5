"""
Card Normalizer — Price Aggregation & Anomaly Rules

Pure Decimal arithmetic behind the duplicate merger and the price-anomaly
corrector. Never use float for money.

Anomaly rules, applied in order (each only when its anchor price is > 0):
    raw  > psa10_price          -> raw  = psa10_price × RAW_TO_PSA10_RATIO
    psa9 > psa10_price          -> psa9 = psa10_price × PSA9_TO_PSA10_RATIO
    raw  > psa10_average_price  -> raw  = psa10_average_price × RAW_TO_PSA10_RATIO

multiplier = psa10_price / raw (psa10_average_price when psa10_price is
missing), recomputed whenever it is missing or no longer matches the
prices (after a merge averaged it, or after raw was rescaled). A multiplier
that cannot be computed is left as stored.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, NamedTuple, Optional

import structlog

from cardnorm.config import settings

logger = structlog.get_logger(__name__)


class PriceFields(NamedTuple):
    """The price columns of one card record."""
    raw_average_price: Optional[Decimal] = None
    psa9_average_price: Optional[Decimal] = None
    psa10_price: Optional[Decimal] = None
    psa10_average_price: Optional[Decimal] = None
    multiplier: Optional[Decimal] = None


class PriceCorrection(NamedTuple):
    """Outcome of correct_prices()."""
    prices: PriceFields
    corrections: tuple[str, ...]   # Names of the anomaly rules that fired
    multiplier_computed: bool

    @property
    def changed(self) -> bool:
        return bool(self.corrections) or self.multiplier_computed


def _quantize(value: Decimal) -> Decimal:
    return value.quantize(settings.PRICE_QUANTUM, rounding=ROUND_HALF_UP)


def _positive(value: Optional[Decimal]) -> bool:
    return value is not None and value > 0


def mean_price(values: Iterable[Optional[Decimal]]) -> Optional[Decimal]:
    """
    Average the non-null values.

    Returns:
        Quantized mean, or None when every value is null.
    """
    present = [Decimal(v) for v in values if v is not None]
    if not present:
        return None
    return _quantize(sum(present, Decimal("0")) / len(present))


def merge_price_fields(records: Iterable[PriceFields]) -> PriceFields:
    """
    Merge the prices of duplicate records field by field.

    Args:
        records: Price fields of every record in a duplicate group.

    Returns:
        PriceFields where each field is the mean of the non-null inputs.
    """
    records = list(records)
    merged = PriceFields(
        *(mean_price(getattr(r, name) for r in records) for name in PriceFields._fields)
    )
    logger.debug(
        "prices_merged",
        group_size=len(records),
        raw_average_price=str(merged.raw_average_price),
        source="prices",
    )
    return merged


def compute_multiplier(prices: PriceFields) -> Optional[Decimal]:
    """
    PSA 10 premium over raw.

    Returns:
        psa10 / raw at 2dp (psa10_price, falling back to
        psa10_average_price), or None when either side is missing or raw
        is not positive.
    """
    psa10 = prices.psa10_price if _positive(prices.psa10_price) else prices.psa10_average_price
    if not _positive(psa10) or not _positive(prices.raw_average_price):
        return None
    return _quantize(psa10 / prices.raw_average_price)


def find_anomalies(prices: PriceFields) -> tuple[str, ...]:
    """Names of the anomaly rules a record currently violates."""
    found = []
    raw, psa9 = prices.raw_average_price, prices.psa9_average_price
    if _positive(prices.psa10_price) and raw is not None and raw > prices.psa10_price:
        found.append("raw_above_psa10")
    if _positive(prices.psa10_price) and psa9 is not None and psa9 > prices.psa10_price:
        found.append("psa9_above_psa10")
    if _positive(prices.psa10_average_price) and raw is not None and raw > prices.psa10_average_price:
        found.append("raw_above_psa10_average")
    return tuple(found)


def correct_prices(prices: PriceFields) -> PriceCorrection:
    """
    Repair inconsistent price relationships for one record.

    Args:
        prices: Current price fields.

    Returns:
        PriceCorrection with the repaired fields and the rules that fired.
        Consistent records come back unchanged.
    """
    raw = prices.raw_average_price
    psa9 = prices.psa9_average_price
    psa10 = prices.psa10_price
    psa10_avg = prices.psa10_average_price
    corrections: list[str] = []

    if _positive(psa10) and raw is not None and raw > psa10:
        raw = _quantize(psa10 * settings.RAW_TO_PSA10_RATIO)
        corrections.append("raw_above_psa10")

    if _positive(psa10) and psa9 is not None and psa9 > psa10:
        psa9 = _quantize(psa10 * settings.PSA9_TO_PSA10_RATIO)
        corrections.append("psa9_above_psa10")

    if _positive(psa10_avg) and raw is not None and raw > psa10_avg:
        raw = _quantize(psa10_avg * settings.RAW_TO_PSA10_RATIO)
        corrections.append("raw_above_psa10_average")

    corrected = prices._replace(raw_average_price=raw, psa9_average_price=psa9)

    multiplier_computed = False
    multiplier = compute_multiplier(corrected)
    if multiplier is not None and multiplier != prices.multiplier:
        corrected = corrected._replace(multiplier=multiplier)
        multiplier_computed = True

    if corrections:
        logger.debug(
            "prices_corrected",
            corrections=corrections,
            raw_average_price=str(corrected.raw_average_price),
            psa9_average_price=str(corrected.psa9_average_price),
            multiplier=str(corrected.multiplier),
            source="prices",
        )
    return PriceCorrection(corrected, tuple(corrections), multiplier_computed)
