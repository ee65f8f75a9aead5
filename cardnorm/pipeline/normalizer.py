"""
Card Normalizer — Batch Normalizer

Feeds scraped listings through the extraction pipeline and writes the
results to the cards table.

- normalize_listings(): pure batch extraction; invalid listings are logged
  and skipped, never fatal to the batch.
- upsert_card_records(): insert or update records keyed by source_id.
  Price columns are owned by the pricing side and never touched here.
- rebuild_canonical_titles(): re-assemble canonical titles from stored
  fields after the assembler or the term lists change.
- run_maintenance(): duplicate merge followed by anomaly correction.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping, NamedTuple, Optional, Sequence, Union

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from cardnorm.config import GradeNumberPolicy
from cardnorm.engine.assembler import assemble_title
from cardnorm.engine.extractor import ExtractionResult, extract_fields
from cardnorm.engine.fields import ExtractedFields, InvalidInput, RawListing
from cardnorm.models.card_record import CardRecord
from cardnorm.pipeline.anomalies import CorrectionSummary, PriceAnomalyCorrector
from cardnorm.pipeline.merger import DuplicateMerger, MergeSummary
from cardnorm.utils.term_lists import TermLists, get_term_lists

logger = structlog.get_logger(__name__)

_EXTRACTED_COLUMNS = tuple(ExtractedFields.model_fields)


class NormalizedListing(NamedTuple):
    source_id: str
    title: str
    result: ExtractionResult


class SkippedListing(NamedTuple):
    source_id: Optional[str]
    reason: str


class NormalizationBatch(NamedTuple):
    normalized: list[NormalizedListing]
    skipped: list[SkippedListing]


class MaintenanceSummary(NamedTuple):
    merge: MergeSummary
    correction: CorrectionSummary


def normalize_listings(
    listings: Iterable[Union[RawListing, Mapping[str, Any]]],
    terms: Optional[TermLists] = None,
    *,
    grade_policy: Optional[GradeNumberPolicy] = None,
) -> NormalizationBatch:
    """
    Run a batch of listings through the extraction pipeline.

    Args:
        listings: RawListing objects or {"id", "title"} mappings.
        terms: Term lists shared by the whole batch. Defaults to the
               process-wide lists.
        grade_policy: Override for GRADE_NUMBER_POLICY.

    Returns:
        NormalizationBatch of normalized listings and skipped inputs.
    """
    if terms is None:
        terms = get_term_lists()

    normalized: list[NormalizedListing] = []
    skipped: list[SkippedListing] = []

    for item in listings:
        source_id = None
        try:
            if isinstance(item, RawListing):
                listing = item
            elif isinstance(item, Mapping):
                raw_id = item.get("id", item.get("source_id"))
                source_id = None if raw_id is None else str(raw_id)
                listing = RawListing.from_payload(item)
            else:
                raise InvalidInput(f"listing must be a mapping, got {type(item).__name__}")
            source_id = listing.source_id
            result = extract_fields(listing.title, terms, grade_policy=grade_policy)
        except InvalidInput as e:
            logger.warning("listing_rejected", source_id=source_id, reason=str(e), source="normalizer")
            skipped.append(SkippedListing(source_id, str(e)))
            continue

        normalized.append(NormalizedListing(listing.source_id, listing.title, result))

    logger.info(
        "listings_normalized",
        normalized=len(normalized),
        skipped=len(skipped),
        needs_review=sum(1 for n in normalized if n.result.needs_review),
        term_list_version=terms.version,
        source="normalizer",
    )
    return NormalizationBatch(normalized, skipped)


def _apply_result(record: CardRecord, listing: NormalizedListing) -> None:
    result = listing.result
    record.title = listing.title
    record.canonical_title = result.canonical_title
    for name in _EXTRACTED_COLUMNS:
        setattr(record, name, getattr(result.fields, name))
    record.needs_review = result.needs_review
    record.review_reasons = ",".join(r.value for r in result.review_reasons) or None
    record.term_list_version = result.term_list_version


async def upsert_card_records(
    session_factory: async_sessionmaker[AsyncSession],
    normalized: Sequence[NormalizedListing],
) -> int:
    """
    Insert or update card records for normalized listings.

    Args:
        session_factory: Async session factory.
        normalized: Output of normalize_listings().

    Returns:
        Number of records written.
    """
    if not normalized:
        return 0

    inserted = 0
    async with session_factory() as session:
        async with session.begin():
            result = await session.execute(
                select(CardRecord).where(
                    CardRecord.source_id.in_([n.source_id for n in normalized])
                )
            )
            existing = {record.source_id: record for record in result.scalars()}

            for listing in normalized:
                record = existing.get(listing.source_id)
                if record is None:
                    record = CardRecord(source_id=listing.source_id)
                    session.add(record)
                    existing[listing.source_id] = record
                    inserted += 1
                _apply_result(record, listing)

    logger.info(
        "card_records_upserted",
        written=len(normalized),
        inserted=inserted,
        updated=len(normalized) - inserted,
        source="normalizer",
    )
    return len(normalized)


async def rebuild_canonical_titles(session_factory: async_sessionmaker[AsyncSession]) -> int:
    """
    Re-assemble canonical titles from the stored extracted fields.

    Returns:
        Number of records whose canonical title changed.
    """
    changed = 0
    async with session_factory() as session:
        async with session.begin():
            result = await session.execute(select(CardRecord).order_by(CardRecord.id))
            for record in result.scalars():
                fields = ExtractedFields(
                    **{name: getattr(record, name) for name in _EXTRACTED_COLUMNS}
                )
                title = assemble_title(fields)
                if title != record.canonical_title:
                    record.canonical_title = title
                    changed += 1

    logger.info("canonical_titles_rebuilt", changed=changed, source="normalizer")
    return changed


async def run_maintenance(session_factory: async_sessionmaker[AsyncSession]) -> MaintenanceSummary:
    """Merge duplicates, then correct price anomalies on the survivors."""
    merge = await DuplicateMerger(session_factory).run()
    correction = await PriceAnomalyCorrector(session_factory).run()
    return MaintenanceSummary(merge, correction)
