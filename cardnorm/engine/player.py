"""
Card Normalizer — Player-Name Extractor

Player names are whatever capitalized words are left once everything we
can name has been ruled out. The working text arrives grade-stripped with
year and brand removed. Tokens that are card vocabulary, teams, cities or
variant terms (the denylist) break the text into candidate spans, as do
tokens that carry digits or do not start with a capital. The longest
candidate is the name.

Denylist collisions ("Gold", "King", "Jazz" are also real names) are not
guessed around; they are reported as review reasons.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import NamedTuple, Optional

import structlog

from cardnorm.config import ReviewReason, settings
from cardnorm.engine.variant import find_variant_hits
from cardnorm.utils.term_lists import TermLists, term_index, token_key

logger = structlog.get_logger(__name__)

_TOKEN_RE = re.compile(r"[^\s,;:!?()\[\]{}|*\"+&/\\]+")
_NAME_SHAPE_RE = re.compile(r"^[^\W\d_](?:[^\W\d_]|['’.\-])*$")
_INITIALS_RE = re.compile(r"^(?:[^\W\d_]\.){1,3}$")
_WORD_PART_RE = re.compile(r"[^\W\d_]+")
_SUFFIXES = {"jr": "Jr.", "sr": "Sr.", "ii": "II", "iii": "III", "iv": "IV"}


class TokenKind(str, Enum):
    NAME = "name"
    DENIED = "denied"
    OTHER = "other"


class _Token(NamedTuple):
    text: str
    start: int
    end: int
    kind: TokenKind


class PlayerNameResult(NamedTuple):
    """Outcome of player-name extraction."""
    name: Optional[str]
    candidates: tuple[str, ...]
    review_reasons: tuple[ReviewReason, ...]


def _raw_tokens(text: str) -> list[tuple[str, int, int]]:
    tokens = []
    for match in _TOKEN_RE.finditer(text):
        word = match.group(0)
        trimmed = word.lstrip("'’-.").rstrip("'’-")
        if trimmed:
            tokens.append((trimmed, match.start(), match.end()))
    return tokens


def _classify(text: str, terms: TermLists) -> list[_Token]:
    index = term_index(terms)
    raw = _raw_tokens(text)
    keys = [token_key(t) for t, _, _ in raw]

    denied = [False] * len(raw)
    lengths = sorted(index.denylist, reverse=True)
    i = 0
    while i < len(raw):
        for n in lengths:
            if i + n <= len(raw) and tuple(keys[i:i + n]) in index.denylist[n]:
                for j in range(i, i + n):
                    denied[j] = True
                i += n
                break
        else:
            i += 1

    for hit in find_variant_hits(text, terms):
        for j, (_, start, end) in enumerate(raw):
            if start < hit.end and end > hit.start:
                denied[j] = True

    tokens = []
    for j, (word, start, end) in enumerate(raw):
        if denied[j]:
            kind = TokenKind.DENIED
        elif _NAME_SHAPE_RE.match(word) and word[0].isupper():
            kind = TokenKind.NAME
        else:
            kind = TokenKind.OTHER
        tokens.append(_Token(word, start, end, kind))
    return tokens


def _spans(tokens: list[_Token]) -> list[tuple[int, int]]:
    spans = []
    start = None
    for i, token in enumerate(tokens):
        if token.kind == TokenKind.NAME:
            if start is None:
                start = i
        elif start is not None:
            spans.append((start, i))
            start = None
    if start is not None:
        spans.append((start, len(tokens)))

    kept = []
    for s, e in spans:
        if e - s == 1:
            word = tokens[s].text.rstrip(".")
            if word.isupper() and len(word) <= 2:
                continue
        kept.append((s, e))
    return kept


def format_name_token(token: str) -> str:
    """
    Normalize the casing of one name word.

    All-caps words are capitalized per apostrophe/hyphen segment
    ("JA'MARR" -> "Ja'Marr", "SMITH-NJIGBA" -> "Smith-Njigba"). Mixed-case
    words are kept as written ("LaMelo"). Initials and 2-letter all-caps
    words stay upper case ("J.J.", "CJ").
    """
    key = token.lower().rstrip(".")
    if key in _SUFFIXES:
        return _SUFFIXES[key]
    if _INITIALS_RE.match(token):
        return token.upper()
    if not token.isupper():
        return token
    if len(token) <= 2:
        return token

    def _cap(match: re.Match[str]) -> str:
        part = match.group(0)
        if len(part) > 3 and part[:2].lower() == "mc":
            return "Mc" + part[2:].capitalize()
        return part.capitalize()

    return _WORD_PART_RE.sub(_cap, token)


def format_player_name(words: list[str]) -> str:
    """Format name words and drop consecutive duplicates ("DANIELS DANIELS")."""
    formatted: list[str] = []
    for word in words:
        pretty = format_name_token(word)
        if formatted and formatted[-1].lower() == pretty.lower():
            continue
        formatted.append(pretty)
    return " ".join(formatted)


def extract_player_name(
    text: str,
    terms: TermLists,
    *,
    max_tokens: Optional[int] = None,
) -> PlayerNameResult:
    """
    Extract the player name from a working title.

    Args:
        text: Grade-stripped title with the year and brand phrase removed.
        terms: Term lists carrying the denylist and variant vocabulary.
        max_tokens: Names longer than this are kept but flagged for review.
                    Defaults to MAX_PLAYER_NAME_TOKENS.

    Returns:
        PlayerNameResult with the chosen name (or None), every surviving
        candidate, and review reasons. Never raises.
    """
    if max_tokens is None:
        max_tokens = settings.MAX_PLAYER_NAME_TOKENS

    tokens = _classify(text, terms)
    spans = _spans(tokens)
    candidates = tuple(format_player_name([t.text for t in tokens[s:e]]) for s, e in spans)

    if not spans:
        logger.debug("player_name_not_found", text=text, source="player")
        return PlayerNameResult(None, (), (ReviewReason.MISSING_PLAYER_NAME,))

    # Longest by word count, then characters; max() keeps the earliest on ties
    best = max(spans, key=lambda span: (span[1] - span[0], tokens[span[1] - 1].end - tokens[span[0]].start))
    best_len = best[1] - best[0]
    name = candidates[spans.index(best)]

    reasons: list[ReviewReason] = []
    if sum(1 for s, e in spans if e - s == best_len) > 1:
        reasons.append(ReviewReason.AMBIGUOUS_PLAYER_NAME)
    if best_len == 1:
        reasons.append(ReviewReason.SINGLE_TOKEN_PLAYER_NAME)

    neighbours = []
    if best[0] > 0:
        neighbours.append(tokens[best[0] - 1])
    if best[1] < len(tokens):
        neighbours.append(tokens[best[1]])
    ambiguous = term_index(terms).ambiguous_surnames
    if any(t.kind == TokenKind.DENIED and token_key(t.text) in ambiguous for t in neighbours):
        reasons.append(ReviewReason.POSSIBLE_SURNAME_COLLISION)

    if best_len > max_tokens:
        reasons.append(ReviewReason.LONG_PLAYER_NAME)

    logger.debug(
        "player_name_extracted",
        player_name=name,
        candidates=len(candidates),
        review_reasons=[r.value for r in reasons],
        source="player",
    )
    return PlayerNameResult(name, candidates, tuple(reasons))
