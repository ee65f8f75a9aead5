"""
Card Normalizer — Card Number & Print-Run Extractor

Card numbers come from, in order of confidence:
1. a '#'-prefixed token ("#16", "#BDC-168");
2. a Bowman-style prefix code ("BDC-168", "BCP55");
3. a bare 1-3 digit number.

Bare numbers are ambiguous: "Julio Rodriguez 9 PSA 9" repeats the grade.
What to do with them is a GradeNumberPolicy. The default (PSA_MATCH)
treats the number as a grade when the raw title contains "PSA <same
number>" and has no '#' token anywhere.

Print runs are serial denominators: "/5", "12/99" -> "/99".
"""

from __future__ import annotations

import re
from typing import Optional

import structlog

from cardnorm.config import GradeNumberPolicy, settings

logger = structlog.get_logger(__name__)

PRINT_RUN_RE = re.compile(r"(?:(?<![\w/])\d{1,5}\s*/\s*|(?<![\d/])/\s*)(\d{1,5})(?![\w/])")
HASH_NUMBER_RE = re.compile(r"#\s*([A-Za-z0-9]+(?:-[A-Za-z0-9]+)*)")
PREFIX_CODE_RE = re.compile(r"(?<![^\W_])((?:BD[A-Z]?|BCP|BCR|CPA|CDA|BPA)-?[A-Z]*\d+)(?![^\W_])", re.IGNORECASE)
BARE_NUMBER_RE = re.compile(r"(?<![\w#/.$-])(\d{1,3})(?![\w/%$-]|\.\d)")
_ANY_HASH_TOKEN_RE = re.compile(r"#\s*\w")

# '#' tokens that mark scarcity rather than a card number
_NON_NUMBER_HASH_TOKENS = frozenset({"SP", "SSP", "RC"})


def extract_print_run(text: str) -> Optional[str]:
    """
    Extract the print run (serial denominator).

    Args:
        text: Working title.

    Returns:
        "/<m>" for "<n>/<m>" or "/<m>", else None.
    """
    match = PRINT_RUN_RE.search(text)
    if match is None:
        return None
    print_run = f"/{int(match.group(1))}"
    logger.debug("print_run_extracted", print_run=print_run, source="numbering")
    return print_run


def remove_print_run(text: str) -> str:
    """Drop every print-run token from a working string."""
    return PRINT_RUN_RE.sub(" ", text)


def is_grade_number(
    number: str,
    raw_title: str,
    policy: GradeNumberPolicy = GradeNumberPolicy.PSA_MATCH,
) -> bool:
    """
    Decide whether a bare number is really a grade.

    Args:
        number: Candidate digits (e.g. "9").
        raw_title: Original, unstripped listing title.
        policy: Grade-number policy to apply.

    Returns:
        True when the number must not be used as a card number.
    """
    if policy == GradeNumberPolicy.ALWAYS_CARD_NUMBER:
        return False
    if policy == GradeNumberPolicy.NEVER_BARE:
        return True

    has_psa_grade = re.search(rf"\bPSA\s*{re.escape(number)}\b", raw_title, re.IGNORECASE)
    has_hash_token = _ANY_HASH_TOKEN_RE.search(raw_title)
    return bool(has_psa_grade) and not has_hash_token


def extract_card_number(
    text: str,
    raw_title: str,
    *,
    policy: Optional[GradeNumberPolicy] = None,
) -> Optional[str]:
    """
    Extract the card number.

    Args:
        text: Working title: grade-stripped, with year, brand and print run
              removed.
        raw_title: Original listing title, used by the grade-number policy.
        policy: Grade-number policy. Defaults to GRADE_NUMBER_POLICY.

    Returns:
        Card number without '#' ("16", "BDC-168"), or None.
    """
    if policy is None:
        policy = settings.GRADE_NUMBER_POLICY

    for match in HASH_NUMBER_RE.finditer(text):
        token = match.group(1)
        if token.upper() in _NON_NUMBER_HASH_TOKENS:
            continue
        logger.debug("card_number_extracted", card_number=token, kind="hash", source="numbering")
        return token

    match = PREFIX_CODE_RE.search(text)
    if match is not None:
        token = match.group(1).upper()
        logger.debug("card_number_extracted", card_number=token, kind="prefix_code", source="numbering")
        return token

    for match in BARE_NUMBER_RE.finditer(text):
        number = match.group(1)
        if is_grade_number(number, raw_title, policy):
            logger.debug(
                "bare_number_treated_as_grade",
                number=number,
                policy=policy.value,
                source="numbering",
            )
            continue
        logger.debug("card_number_extracted", card_number=number, kind="bare", source="numbering")
        return number

    return None
