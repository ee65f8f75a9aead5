"""
Card Normalizer — Listing Import Script

Reads scraped listings from a JSON file, extracts fields and canonical
titles, and upserts the results into the cards table. Optionally runs the
maintenance pass (duplicate merge + price-anomaly correction) afterwards.

Input format: a JSON array of {"id": ..., "title": ...} objects.

Usage:
    python scripts/normalize_titles.py --input listings.json
    python scripts/normalize_titles.py --input listings.json --create-tables --maintenance
"""

from __future__ import annotations

import argparse
import asyncio
import json
import os
import sys

# Resolve project root so this script can be run from any working directory
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from cardnorm.config import GradeNumberPolicy, settings
from cardnorm.main import configure_logging, create_db_engine
from cardnorm.models.base import Base
from cardnorm.pipeline.normalizer import normalize_listings, run_maintenance, upsert_card_records
from cardnorm.utils.term_lists import load_term_lists


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Normalize scraped card listing titles and upsert them into the cards table.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python scripts/normalize_titles.py --input listings.json
  python scripts/normalize_titles.py --input listings.json --terms my_terms.json
  python scripts/normalize_titles.py --input listings.json --create-tables --maintenance
""",
    )
    parser.add_argument(
        "--input",
        type=str,
        required=True,
        help='JSON file holding an array of {"id": ..., "title": ...} objects.',
    )
    parser.add_argument(
        "--terms",
        type=str,
        default=None,
        help="Term-list JSON to use instead of the configured one.",
    )
    parser.add_argument(
        "--grade-policy",
        type=str,
        default=settings.GRADE_NUMBER_POLICY.value,
        choices=[p.value for p in GradeNumberPolicy],
        help="How bare numbers that may be grades are handled (default: %(default)s).",
    )
    parser.add_argument(
        "--database-url",
        type=str,
        default=None,
        help="Override DATABASE_URL.",
    )
    parser.add_argument(
        "--create-tables",
        action="store_true",
        help="Create missing tables before importing (local SQLite databases).",
    )
    parser.add_argument(
        "--maintenance",
        action="store_true",
        help="Merge duplicates and correct price anomalies after the import.",
    )
    return parser.parse_args()


async def import_listings(args: argparse.Namespace) -> None:
    with open(args.input, encoding="utf-8") as f:
        listings = json.load(f)
    if not isinstance(listings, list):
        raise ValueError(f"{args.input} must contain a JSON array of listings")

    terms = load_term_lists(args.terms)
    batch = normalize_listings(listings, terms, grade_policy=GradeNumberPolicy(args.grade_policy))

    engine, session_factory = create_db_engine(args.database_url)
    try:
        if args.create_tables:
            async with engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)

        written = await upsert_card_records(session_factory, batch.normalized)

        print(f"Term lists        = {terms.version}")
        print(f"Listings read     = {len(listings)}")
        print(f"Records written   = {written}")
        print(f"Skipped           = {len(batch.skipped)}")
        print(f"Needs review      = {sum(1 for n in batch.normalized if n.result.needs_review)}")
        for skipped in batch.skipped:
            print(f"  skipped {skipped.source_id}: {skipped.reason}")

        if args.maintenance:
            summary = await run_maintenance(session_factory)
            print(f"Groups merged     = {summary.merge.groups_merged}")
            print(f"Records removed   = {summary.merge.records_removed}")
            print(f"Records corrected = {summary.correction.records_corrected}")
            for title in summary.merge.failed_titles:
                print(f"  merge failed: {title}")
    finally:
        await engine.dispose()


async def main() -> None:
    args = parse_args()
    configure_logging(log_level=settings.LOG_LEVEL)

    try:
        await import_listings(args)
    except Exception as e:
        print(f"Import failed: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    asyncio.run(main())
