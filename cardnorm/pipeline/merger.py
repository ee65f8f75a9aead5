"""
Card Normalizer — Duplicate Merger

Collapses card records that share a canonical title. For every group:
- each price field becomes the mean of the group's non-null values;
- the earliest-created record survives and gets a fresh last_updated;
- every other record in the group is deleted.

Records with a blank canonical title or no player name are never grouped;
they stay flagged for review instead of being collapsed into each other.

A group is merged inside one transaction, so the survivor update and the
deletes land together or not at all. A failed group is rolled back and
retried as a whole; if it keeps failing it is reported and left untouched
while the remaining groups proceed.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import NamedTuple, Optional

import structlog
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from cardnorm.config import settings
from cardnorm.engine.prices import PriceFields, merge_price_fields
from cardnorm.models.card_record import CardRecord

logger = structlog.get_logger(__name__)

# Records that can never share a card identity: nothing assembled, or no
# player name (the title then only names a product, e.g. "2024 Panini Prizm")
_MERGEABLE = (
    func.trim(CardRecord.canonical_title) != "",
    CardRecord.player_name.is_not(None),
)


class DuplicateGroup(NamedTuple):
    canonical_title: str
    count: int


class MergeSummary(NamedTuple):
    """Totals for one merge run."""
    groups_merged: int
    records_removed: int
    failed_titles: tuple[str, ...]


def price_fields_of(record: CardRecord) -> PriceFields:
    """Read the price columns of a record into PriceFields."""
    return PriceFields(*(getattr(record, name) for name in PriceFields._fields))


class DuplicateMerger:
    """Merges card records that share an identical canonical title."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        max_attempts: Optional[int] = None,
        retry_backoff_seconds: Optional[float] = None,
    ):
        self.session_factory = session_factory
        self.max_attempts = max_attempts or settings.MERGE_MAX_ATTEMPTS
        self.retry_backoff_seconds = (
            settings.MERGE_RETRY_BACKOFF_SECONDS
            if retry_backoff_seconds is None
            else retry_backoff_seconds
        )

    async def find_duplicate_groups(self) -> list[DuplicateGroup]:
        """Canonical titles held by more than one record, most duplicated first."""
        async with self.session_factory() as session:
            result = await session.execute(
                select(CardRecord.canonical_title, func.count(CardRecord.id).label("n"))
                .where(*_MERGEABLE)
                .group_by(CardRecord.canonical_title)
                .having(func.count(CardRecord.id) > 1)
                .order_by(func.count(CardRecord.id).desc(), CardRecord.canonical_title)
            )
            return [DuplicateGroup(title, n) for title, n in result.all()]

    async def merge_group(self, canonical_title: str) -> int:
        """
        Merge one duplicate group in a single transaction.

        Args:
            canonical_title: The shared canonical title.

        Returns:
            Number of records deleted (0 if the group no longer has
            duplicates).

        Raises:
            SQLAlchemyError: If the transaction fails. Nothing is applied.
        """
        async with self.session_factory() as session:
            async with session.begin():
                result = await session.execute(
                    select(CardRecord)
                    .where(CardRecord.canonical_title == canonical_title)
                    .where(*_MERGEABLE)
                    .order_by(CardRecord.created_at, CardRecord.id)
                    .with_for_update()
                )
                records = list(result.scalars().all())
                if len(records) < 2:
                    return 0

                survivor, duplicates = records[0], records[1:]
                survivor_id = survivor.id
                merged = merge_price_fields(price_fields_of(r) for r in records)
                for name, value in merged._asdict().items():
                    setattr(survivor, name, value)
                survivor.last_updated = datetime.now(timezone.utc)
                await session.flush()

                for duplicate in duplicates:
                    await session.delete(duplicate)

        logger.info(
            "duplicate_group_merged",
            canonical_title=canonical_title,
            survivor_id=survivor_id,
            removed=len(duplicates),
            source="merger",
        )
        return len(duplicates)

    async def _merge_with_retry(self, canonical_title: str) -> Optional[int]:
        for attempt in range(1, self.max_attempts + 1):
            try:
                return await self.merge_group(canonical_title)
            except SQLAlchemyError as e:
                if attempt == self.max_attempts:
                    logger.error(
                        "duplicate_group_merge_failed",
                        canonical_title=canonical_title,
                        attempts=attempt,
                        error=str(e),
                        error_type=type(e).__name__,
                        source="merger",
                    )
                    return None
                logger.warning(
                    "duplicate_group_merge_retry",
                    canonical_title=canonical_title,
                    attempt=attempt,
                    error=str(e),
                    error_type=type(e).__name__,
                    source="merger",
                )
                await asyncio.sleep(self.retry_backoff_seconds * (2 ** (attempt - 1)))
        return None

    async def run(self) -> MergeSummary:
        """
        Merge every duplicate group.

        Returns:
            MergeSummary with the groups merged, records removed and the
            canonical titles whose merge failed permanently.
        """
        groups = await self.find_duplicate_groups()
        logger.info("duplicate_merge_started", groups=len(groups), source="merger")

        merged = removed = 0
        failed: list[str] = []
        for group in groups:
            count = await self._merge_with_retry(group.canonical_title)
            if count is None:
                failed.append(group.canonical_title)
            elif count:
                merged += 1
                removed += count

        summary = MergeSummary(merged, removed, tuple(failed))
        logger.info(
            "duplicate_merge_complete",
            groups_merged=summary.groups_merged,
            records_removed=summary.records_removed,
            groups_failed=len(summary.failed_titles),
            source="merger",
        )
        return summary
