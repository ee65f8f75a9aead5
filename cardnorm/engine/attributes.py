"""
Card Normalizer — Autograph & Rookie Flags

Both flags are plain vocabulary hits on word boundaries ("AUTO", "Signed";
"RC", "Young Guns", "1st Bowman"). "AUTHENTIC" never counts as an
autograph.
"""

from __future__ import annotations

import structlog

from cardnorm.utils.term_lists import TermLists, term_index

logger = structlog.get_logger(__name__)


def detect_autograph(title: str, terms: TermLists) -> bool:
    """True when the title advertises an autographed card."""
    match = term_index(terms).autograph.search(title)
    if match:
        logger.debug("autograph_detected", term=match.group(0), source="attributes")
    return match is not None


def detect_rookie(title: str, terms: TermLists) -> bool:
    """True when the title marks the card as a rookie card."""
    match = term_index(terms).rookie.search(title)
    if match:
        logger.debug("rookie_detected", term=match.group(0), source="attributes")
    return match is not None
