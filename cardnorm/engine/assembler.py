"""
Card Normalizer — Title Assembler

Builds the canonical title from extracted fields in a fixed order:

    year, brand/set, variant, player, "auto", #card_number, print_run

Identical fields always give a byte-identical title; that title is the
duplicate-merge key.
"""

from __future__ import annotations

from typing import Optional

import structlog

from cardnorm.engine.fields import ExtractedFields

logger = structlog.get_logger(__name__)

AUTOGRAPH_MARKER = "auto"


def _clean(value: Optional[str]) -> str:
    if value is None:
        return ""
    return " ".join(str(value).split())


def assemble_title(fields: ExtractedFields) -> str:
    """
    Assemble the canonical title for a card.

    Args:
        fields: Extracted fields.

    Returns:
        Single-spaced canonical title. Missing fields are skipped; a
        "Base" variant is never emitted.
    """
    parts: list[str] = []

    year = _clean(fields.year)
    if year:
        parts.append(year)

    label = _clean(fields.set_name) or _clean(fields.brand)
    if label:
        parts.append(label)

    variant = _clean(fields.variant)
    if variant and variant.lower() != "base":
        parts.append(variant)

    player = _clean(fields.player_name)
    if player:
        parts.append(player)

    if fields.is_autograph:
        parts.append(AUTOGRAPH_MARKER)

    card_number = _clean(fields.card_number).lstrip("#").strip()
    if card_number:
        parts.append(f"#{card_number}")

    print_run = _clean(fields.print_run)
    if print_run:
        parts.append(print_run if print_run.startswith("/") else f"/{print_run}")

    title = " ".join(parts)
    logger.debug("title_assembled", canonical_title=title, source="assembler")
    return title
