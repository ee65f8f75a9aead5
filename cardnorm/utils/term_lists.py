"""
Card Normalizer — Term Lists

Brand dictionary, variant vocabulary, grading companies and the
non-player-name denylist. The lists live in a versioned JSON document
(cardnorm/data/term_lists.json by default) so they can be audited and
changed without touching code.

TermLists is frozen: extraction functions receive it explicitly and never
mutate it. Compiled regexes derived from a TermLists value are cached per
value via term_index().
"""

from __future__ import annotations

import json
import re
from functools import lru_cache
from pathlib import Path
from typing import NamedTuple, Optional

import structlog
from pydantic import BaseModel, ConfigDict, field_validator

from cardnorm.config import settings

logger = structlog.get_logger(__name__)

DEFAULT_TERM_LISTS_PATH = Path(__file__).resolve().parent.parent / "data" / "term_lists.json"

# Characters that split a title into tokens. Apostrophes, hyphens and periods
# stay inside tokens (Ja'Marr, Smith-Njigba, J.J.).
TOKEN_SPLIT_RE = re.compile(r"[\s,;:!?()\[\]{}|*\"+&/\\]+")


class BrandEntry(BaseModel):
    """One row of the brand dictionary."""

    model_config = ConfigDict(frozen=True)

    pattern: str
    brand: str
    set_name: Optional[str] = None

    @field_validator("pattern")
    @classmethod
    def _pattern_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("brand pattern must not be blank")
        return value.strip().lower()


class TermLists(BaseModel):
    """Immutable term-list configuration shared by every extraction stage."""

    model_config = ConfigDict(frozen=True)

    version: str
    brands: tuple[BrandEntry, ...]
    variants: tuple[str, ...]
    grading_companies: tuple[str, ...]
    autograph_terms: tuple[str, ...]
    rookie_terms: tuple[str, ...]
    card_terms: tuple[str, ...]
    team_names: tuple[str, ...]
    city_names: tuple[str, ...]
    ambiguous_surnames: tuple[str, ...] = ()


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------


def load_term_lists(path: Path | str | None = None) -> TermLists:
    """
    Read and validate a term-list JSON document.

    Args:
        path: JSON file to read. Defaults to TERM_LISTS_PATH from settings,
              or the packaged term_lists.json when that is empty.

    Returns:
        Validated TermLists.

    Raises:
        OSError: If the file cannot be read.
        pydantic.ValidationError: If the document does not match the schema.
    """
    if path is None:
        path = settings.TERM_LISTS_PATH or DEFAULT_TERM_LISTS_PATH
    path = Path(path)

    with open(path, encoding="utf-8") as f:
        payload = json.load(f)

    terms = TermLists.model_validate(payload)
    logger.info(
        "term_lists_loaded",
        path=str(path),
        version=terms.version,
        brands=len(terms.brands),
        variants=len(terms.variants),
        source="term_lists",
    )
    return terms


@lru_cache(maxsize=1)
def get_term_lists() -> TermLists:
    """Process-wide term lists, loaded once on first use."""
    return load_term_lists()


# ---------------------------------------------------------------------------
# Derived index
# ---------------------------------------------------------------------------


class CompiledBrand(NamedTuple):
    entry: BrandEntry
    regex: re.Pattern[str]
    order: int


class CompiledVariant(NamedTuple):
    label: str
    regex: re.Pattern[str]


class TermIndex(NamedTuple):
    """Regexes and lookup sets compiled from one TermLists value."""
    brands: tuple[CompiledBrand, ...]
    variants: tuple[CompiledVariant, ...]
    autograph: re.Pattern[str]
    rookie: re.Pattern[str]
    denylist: dict[int, frozenset[tuple[str, ...]]]  # phrase length -> phrases
    ambiguous_surnames: frozenset[str]


def token_key(token: str) -> str:
    """Comparison key for a token: lower case, straight apostrophes, no edge dots."""
    return token.lower().replace("’", "'").strip(".")


def tokenize(text: str) -> list[str]:
    """Split text into raw tokens (empty strings removed)."""
    return [t for t in TOKEN_SPLIT_RE.split(text) if t]


def phrase_regex(phrase: str) -> re.Pattern[str]:
    """
    Compile a multi-word phrase into a case-insensitive, word-bounded regex.

    Runs of spaces and hyphens between words are tolerated, so
    "bowman chrome" also matches "BOWMAN - CHROME" and "Bowman-Chrome".
    """
    words = [re.escape(w) for w in phrase.split()]
    body = r"[\s\-]+".join(words)
    return re.compile(rf"(?<![^\W_]){body}(?![^\W_])", re.IGNORECASE)


def _alternation(terms: tuple[str, ...]) -> re.Pattern[str]:
    ordered = sorted({t.strip() for t in terms if t.strip()}, key=len, reverse=True)
    if not ordered:
        return re.compile(r"(?!x)x")
    body = "|".join(r"[\s\-]+".join(re.escape(w) for w in t.split()) for t in ordered)
    return re.compile(rf"(?<![^\W_])(?:{body})(?![^\W_])", re.IGNORECASE)


@lru_cache(maxsize=8)
def term_index(terms: TermLists) -> TermIndex:
    """
    Compile the regex index for a TermLists value.

    Cached per (hashable, frozen) TermLists so the cost is paid once per
    term-list version.
    """
    brands = tuple(
        CompiledBrand(entry=entry, regex=phrase_regex(entry.pattern), order=i)
        for i, entry in enumerate(terms.brands)
    )
    variants = tuple(
        CompiledVariant(label=label.strip(), regex=phrase_regex(label))
        for label in terms.variants
        if label.strip()
    )

    denylist: dict[int, set[tuple[str, ...]]] = {}
    for term in (*terms.card_terms, *terms.team_names, *terms.city_names):
        key = tuple(token_key(t) for t in tokenize(term))
        if key:
            denylist.setdefault(len(key), set()).add(key)

    logger.debug(
        "term_index_compiled",
        version=terms.version,
        denylist_phrases=sum(len(v) for v in denylist.values()),
        source="term_lists",
    )
    return TermIndex(
        brands=brands,
        variants=variants,
        autograph=_alternation(terms.autograph_terms),
        rookie=_alternation(terms.rookie_terms),
        denylist={n: frozenset(v) for n, v in denylist.items()},
        ambiguous_surnames=frozenset(token_key(t) for t in terms.ambiguous_surnames),
    )
