"""
Card Normalizer — Year Extractor

The first plausible 4-digit year in a title, optionally with an attached
two-digit season suffix ("1994-95"). Tokens glued to letters, '#' or '/'
are card numbers or serials, not years.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Optional

import structlog

from cardnorm.config import settings

logger = structlog.get_logger(__name__)

_YEAR_RE = re.compile(r"(?<![\w#/.])(\d{4})(-\d{2})?(?![\w/])")


def _year_ceiling(current_year: Optional[int]) -> int:
    if current_year is None:
        current_year = datetime.now(timezone.utc).year
    return current_year + settings.YEAR_CEILING_OFFSET


def _find_year(text: str, current_year: Optional[int]) -> Optional[re.Match[str]]:
    ceiling = _year_ceiling(current_year)
    for match in _YEAR_RE.finditer(text):
        if settings.YEAR_FLOOR <= int(match.group(1)) <= ceiling:
            return match
    return None


def extract_year(title: str, *, current_year: Optional[int] = None) -> Optional[str]:
    """
    Extract the card year from a title.

    Args:
        title: Listing title (raw or grade-stripped).
        current_year: Reference year for the upper bound. Defaults to the
                      current UTC year.

    Returns:
        "2024", "1994-95", or None when no plausible year is present.
    """
    match = _find_year(title, current_year)
    if match is None:
        logger.debug("year_not_found", title=title, source="year")
        return None

    year = match.group(0)
    logger.debug("year_extracted", year=year, source="year")
    return year


def remove_year(text: str, *, current_year: Optional[int] = None) -> str:
    """Drop the token extract_year() would return from a working string."""
    match = _find_year(text, current_year)
    if match is None:
        return text
    return f"{text[:match.start()]} {text[match.end():]}"
