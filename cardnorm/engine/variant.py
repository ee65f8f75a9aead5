"""
Card Normalizer — Variant/Parallel Detector

Finds parallel and color names ("Gold Refractor", "Red", "Cracked Ice").
Overlapping hits resolve to the longest term, so "Gold Refractor" is not
also reported as "Gold" + "Refractor". Surviving terms are joined in title
order with repeated words removed. "Base" means "no parallel" and is never
emitted.
"""

from __future__ import annotations

from typing import NamedTuple, Optional

import structlog

from cardnorm.utils.term_lists import TermLists, term_index

logger = structlog.get_logger(__name__)

BASE_VARIANT = "base"


class VariantHit(NamedTuple):
    label: str
    start: int
    end: int


def find_variant_hits(text: str, terms: TermLists) -> list[VariantHit]:
    """
    Locate non-overlapping variant terms in text, longest term first.

    Returns:
        Hits sorted by position in the text.
    """
    candidates: list[VariantHit] = []
    for compiled in term_index(terms).variants:
        for match in compiled.regex.finditer(text):
            candidates.append(VariantHit(compiled.label, match.start(), match.end()))

    candidates.sort(key=lambda h: (-(h.end - h.start), h.start))
    chosen: list[VariantHit] = []
    for hit in candidates:
        if all(hit.end <= c.start or hit.start >= c.end for c in chosen):
            chosen.append(hit)

    chosen.sort(key=lambda h: h.start)
    return chosen


def detect_variant(text: str, terms: TermLists) -> Optional[str]:
    """
    Detect the parallel/color variant of a card.

    Args:
        text: Working title with the brand phrase already removed, so brand
              words such as "Sapphire" are not read as parallels.
        terms: Term lists carrying the variant vocabulary.

    Returns:
        Canonically-cased variant ("Gold Refractor", "Red") or None.
    """
    words: list[str] = []
    seen: set[str] = set()
    for hit in find_variant_hits(text, terms):
        if hit.label.lower() == BASE_VARIANT:
            continue
        for word in hit.label.split():
            if word.lower() not in seen:
                seen.add(word.lower())
                words.append(word)

    if not words:
        return None

    variant = " ".join(words)
    logger.debug("variant_detected", variant=variant, source="variant")
    return variant
