"""
Card Normalizer — Card Record Model

One row per listing: the extracted fields, the canonical title used as the
duplicate-merge key, and the price aggregates maintained by the pricing
side. The merger collapses rows that share a canonical title; the anomaly
corrector repairs inconsistent prices in place.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import BOOLEAN, DECIMAL, INTEGER, TIMESTAMP, Index, String, func
from sqlalchemy.orm import Mapped, mapped_column

from cardnorm.models.base import Base


class CardRecord(Base):
    """
    A normalized card listing.

    Invariant (after anomaly correction): multiplier == psa10_price /
    raw_average_price whenever both are present and raw > 0, and no record
    has raw_average_price > psa10_price.
    """

    __tablename__ = "cards"

    id: Mapped[int] = mapped_column(INTEGER, primary_key=True, autoincrement=True)
    source_id: Mapped[str] = mapped_column(
        String, nullable=False, unique=True, comment="Stable listing identifier from the scraping side"
    )
    title: Mapped[str] = mapped_column(String, nullable=False, comment="Raw listing title")
    canonical_title: Mapped[str] = mapped_column(
        String, nullable=False, comment="Assembled title; duplicate-merge key"
    )

    # Extracted fields
    year: Mapped[str | None] = mapped_column(String, nullable=True, comment="'2024' or '1994-95'")
    brand: Mapped[str | None] = mapped_column(String, nullable=True, comment="Manufacturer (e.g., 'Bowman')")
    set_name: Mapped[str | None] = mapped_column(
        String, nullable=True, comment="Product line (e.g., 'Bowman Chrome Sapphire')"
    )
    variant: Mapped[str | None] = mapped_column(String, nullable=True, comment="Parallel/color (e.g., 'Gold Refractor')")
    card_number: Mapped[str | None] = mapped_column(String, nullable=True, comment="Card number without '#'")
    print_run: Mapped[str | None] = mapped_column(String, nullable=True, comment="Serial denominator (e.g., '/99')")
    player_name: Mapped[str | None] = mapped_column(String, nullable=True)
    is_autograph: Mapped[bool] = mapped_column(BOOLEAN, nullable=False, default=False)
    is_rookie: Mapped[bool] = mapped_column(BOOLEAN, nullable=False, default=False)

    # Review
    needs_review: Mapped[bool] = mapped_column(BOOLEAN, nullable=False, default=False)
    review_reasons: Mapped[str | None] = mapped_column(
        String, nullable=True, comment="Comma-separated review reason codes"
    )
    term_list_version: Mapped[str | None] = mapped_column(
        String, nullable=True, comment="Term-list version that produced the extracted fields"
    )

    # Prices
    raw_average_price: Mapped[Decimal | None] = mapped_column(
        DECIMAL(10, 2), nullable=True, comment="Average ungraded sale price (USD)"
    )
    psa9_average_price: Mapped[Decimal | None] = mapped_column(
        DECIMAL(10, 2), nullable=True, comment="Average PSA 9 sale price (USD)"
    )
    psa10_price: Mapped[Decimal | None] = mapped_column(
        DECIMAL(10, 2), nullable=True, comment="Most recent PSA 10 sale price (USD)"
    )
    psa10_average_price: Mapped[Decimal | None] = mapped_column(
        DECIMAL(10, 2), nullable=True, comment="Average PSA 10 sale price (USD)"
    )
    multiplier: Mapped[Decimal | None] = mapped_column(
        DECIMAL(10, 2), nullable=True, comment="psa10_price / raw_average_price"
    )

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now(), nullable=False
    )
    last_updated: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
        comment="Last time this record was written",
    )

    __table_args__ = (
        Index("ix_cards_canonical_title", "canonical_title"),
        Index("ix_cards_needs_review", "needs_review"),
    )

    def __repr__(self) -> str:
        return (
            f"<CardRecord id={self.id} source_id={self.source_id!r} "
            f"canonical_title={self.canonical_title!r}>"
        )
