"""
Card Normalizer — Brand/Set Classifier

Scans the ordered brand dictionary for the manufacturer and product line.
Specific multi-word products ("Bowman Chrome Sapphire") beat their generic
prefixes ("Bowman Chrome", "Bowman") because the longest matching pattern
wins; ties go to the entry declared first.

Aliases share a label, so "Prizm" and "Panini Prizm" both classify as
"Panini Prizm" and produce the same canonical title.
"""

from __future__ import annotations

from typing import NamedTuple, Optional

import structlog

from cardnorm.utils.term_lists import TermLists, term_index

logger = structlog.get_logger(__name__)


class BrandMatch(NamedTuple):
    """Brand dictionary hit and where it sits in the scanned text."""
    brand: str
    set_name: Optional[str]
    pattern: str
    start: int
    end: int

    @property
    def label(self) -> str:
        """Text the title assembler emits for this match."""
        return self.set_name or self.brand


def classify_brand(text: str, terms: TermLists) -> Optional[BrandMatch]:
    """
    Classify brand and set from a title.

    Args:
        text: Title with the year token removed (grade-stripped is fine).
        terms: Term lists carrying the brand dictionary.

    Returns:
        BrandMatch for the longest matching pattern, or None when no entry
        matches. A miss is not an error; the caller flags the listing for
        review.
    """
    best: Optional[BrandMatch] = None
    best_key: tuple[int, int] = (-1, 0)

    for compiled in term_index(terms).brands:
        match = compiled.regex.search(text)
        if match is None:
            continue
        # Longest pattern first, then earliest declaration
        key = (len(compiled.entry.pattern), -compiled.order)
        if key > best_key:
            best_key = key
            best = BrandMatch(
                brand=compiled.entry.brand,
                set_name=compiled.entry.set_name,
                pattern=compiled.entry.pattern,
                start=match.start(),
                end=match.end(),
            )

    if best is None:
        logger.debug("brand_not_found", text=text, source="brand")
        return None

    logger.debug(
        "brand_classified",
        brand=best.brand,
        set_name=best.set_name,
        pattern=best.pattern,
        source="brand",
    )
    return best


def remove_brand(text: str, match: Optional[BrandMatch]) -> str:
    """Cut the matched brand phrase out of the text it was found in."""
    if match is None:
        return text
    return f"{text[:match.start]} {text[match.end:]}"
