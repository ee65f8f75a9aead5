"""
Card Normalizer — Extraction Orchestrator

Runs one listing title through every stage and returns the extracted
fields, the canonical title and the review verdict.

Order of operations:
1. validate the title (InvalidInput on empty / non-string)
2. year, from the raw title
3. strip grading noise
4. brand/set on the stripped title without its year
5. variant, print run and card number on what is left after the brand
6. autograph / rookie flags, from the raw title
7. player name
8. assemble the canonical title
"""

from __future__ import annotations

from typing import Any, NamedTuple, Optional

import structlog

from cardnorm.config import GradeNumberPolicy, ReviewReason
from cardnorm.engine.assembler import assemble_title
from cardnorm.engine.attributes import detect_autograph, detect_rookie
from cardnorm.engine.brand import classify_brand, remove_brand
from cardnorm.engine.fields import ExtractedFields, ensure_title
from cardnorm.engine.grading import strip_grading
from cardnorm.engine.numbering import extract_card_number, extract_print_run, remove_print_run
from cardnorm.engine.player import extract_player_name
from cardnorm.engine.variant import detect_variant
from cardnorm.engine.year import extract_year, remove_year
from cardnorm.utils.term_lists import TermLists, get_term_lists

logger = structlog.get_logger(__name__)


class ExtractionResult(NamedTuple):
    """Per-listing output of the extraction pipeline."""
    fields: ExtractedFields
    canonical_title: str
    needs_review: bool
    review_reasons: tuple[ReviewReason, ...]
    term_list_version: str


def extract_fields(
    title: Any,
    terms: Optional[TermLists] = None,
    *,
    grade_policy: Optional[GradeNumberPolicy] = None,
    current_year: Optional[int] = None,
) -> ExtractionResult:
    """
    Extract structured fields and the canonical title from a listing title.

    Args:
        title: Raw listing title.
        terms: Term lists. Defaults to the process-wide lists loaded once
               from configuration.
        grade_policy: Override for GRADE_NUMBER_POLICY.
        current_year: Reference year for the year extractor.

    Returns:
        ExtractionResult.

    Raises:
        InvalidInput: If the title is empty or not a string.
    """
    title = ensure_title(title)
    if terms is None:
        terms = get_term_lists()

    year = extract_year(title, current_year=current_year)

    stripped = strip_grading(title, terms)
    without_year = remove_year(stripped, current_year=current_year)

    brand_match = classify_brand(without_year, terms)
    working = remove_brand(without_year, brand_match)

    variant = detect_variant(working, terms)
    print_run = extract_print_run(working)
    card_number = extract_card_number(remove_print_run(working), title, policy=grade_policy)

    player = extract_player_name(working, terms)

    fields = ExtractedFields(
        year=year,
        brand=brand_match.brand if brand_match else None,
        set_name=brand_match.set_name if brand_match else None,
        variant=variant,
        card_number=card_number,
        print_run=print_run,
        is_autograph=detect_autograph(title, terms),
        is_rookie=detect_rookie(title, terms),
        player_name=player.name,
    )

    reasons: list[ReviewReason] = []
    if brand_match is None:
        reasons.append(ReviewReason.MISSING_BRAND)
    reasons.extend(player.review_reasons)

    canonical_title = assemble_title(fields)
    if reasons:
        logger.info(
            "listing_needs_review",
            title=title,
            canonical_title=canonical_title,
            review_reasons=[r.value for r in reasons],
            source="extractor",
        )

    return ExtractionResult(
        fields=fields,
        canonical_title=canonical_title,
        needs_review=bool(reasons),
        review_reasons=tuple(reasons),
        term_list_version=terms.version,
    )
