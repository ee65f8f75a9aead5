"""
Card Normalizer — Grade/Certification Stripper

Removes grading-company tokens, numeric grades, certification numbers,
population counts and grade words so they never leak into the player name
or the canonical title.

The ladder runs in a fixed order (authentication services, cert numbers,
company + grade, label + grade, population, grade words, bare company
names, cleanup) and is re-applied until nothing changes, which makes
strip_grading() idempotent.
"""

from __future__ import annotations

import re
from functools import lru_cache

import structlog

from cardnorm.utils.rules import Rule, apply_until_stable, compile_rule
from cardnorm.utils.term_lists import TermLists

logger = structlog.get_logger(__name__)

_GRADE = r"(?:10|[1-9](?:\.5)?)"
_LABEL = r"(?:GEM\s*-?\s*(?:MINT|MT)|MINT|MT|NM\s*-\s*MT|NM|PRISTINE|AUTH(?:ENTIC)?)"


@lru_cache(maxsize=8)
def _grading_rules_for(companies: tuple[str, ...]) -> tuple[Rule, ...]:
    company = "|".join(re.escape(c) for c in sorted(companies, key=len, reverse=True))
    return (
        compile_rule(
            "authentication_service",
            r"\b(?:PSA\s*/\s*DNA(?:\s+(?:AUTH(?:ENTIC(?:ATED)?)?|CERTIFIED))?"
            r"|JSA\s+(?:AUTH(?:ENTIC(?:ATED)?)?|COA|LOA|CERTIFIED)"
            r"|BECKETT\s+(?:AUTH(?:ENTIC(?:ATED)?)?|BAS))(?![^\W_])",
        ),
        compile_rule(
            "cert_number",
            r"\bCERT(?:IFICATION|IFICATE)?\.?(?:\s*(?:NO\.?|NUMBER|#))?\s*[:#]?\s*\d{6,}\b",
        ),
        compile_rule(
            "company_grade",
            rf"\b(?:{company})\s*-?\s*(?:{_LABEL}\s*)?{_GRADE}\b(?:\s+#?\d{{7,}}\b)?",
        ),
        compile_rule(
            "label_grade",
            rf"\b(?:GEM\s*-?\s*(?:MINT|MT)|MINT|NM\s*-\s*MT|NM|MT)\s*{_GRADE}\b",
        ),
        compile_rule(
            "population",
            r"\b(?:POP(?:ULATION)?(?:\s*REPORT)?\s*:?\s*\d+\b|NONE\s+HIGHER\b|LOW\s+POP\b)",
        ),
        compile_rule(
            "grade_words",
            r"\b(?:GEM\s*-?\s*(?:MINT|MT)|NM\s*-\s*MT|MINT|PRISTINE)\b|(?<!SP\s)\bAUTHENTIC\b",
        ),
        compile_rule(
            "company_name",
            rf"\b(?:{company}|GRADED)\b",
        ),
        compile_rule("empty_brackets", r"\(\s*\)|\[\s*\]|\{\s*\}"),
        compile_rule("collapse_whitespace", r"\s{2,}"),
        compile_rule("trim_separators", r"^[\s\-|,;:]+|[\s\-|,;:]+$", replacement=""),
    )


def grading_rules(terms: TermLists) -> tuple[Rule, ...]:
    """
    Ordered stripping rules for the grading companies in the term lists.

    Each rule can be fetched with cardnorm.utils.rules.rule_by_name() and
    exercised on its own.
    """
    return _grading_rules_for(tuple(terms.grading_companies))


def strip_grading(title: str, terms: TermLists) -> str:
    """
    Remove grading and certification noise from a title.

    Args:
        title: Listing title.
        terms: Term lists carrying the grading-company tokens.

    Returns:
        Title without grade/cert/population tokens, single-spaced and
        trimmed. strip_grading(strip_grading(t)) == strip_grading(t).
    """
    stripped = apply_until_stable(title, grading_rules(terms))
    if stripped != title:
        logger.debug("grading_stripped", before=title, after=stripped, source="grading")
    return stripped
