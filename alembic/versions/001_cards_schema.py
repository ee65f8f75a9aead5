"""Cards schema — normalized listings with extracted fields and price aggregates

Revision ID: 001_cards_schema
Revises: None
Create Date: 2026-10-18
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001_cards_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "cards",
        sa.Column("id", sa.INTEGER(), primary_key=True, autoincrement=True),
        sa.Column("source_id", sa.String(), nullable=False, comment="Stable listing identifier from the scraping side"),
        sa.Column("title", sa.String(), nullable=False, comment="Raw listing title"),
        sa.Column("canonical_title", sa.String(), nullable=False, comment="Assembled title; duplicate-merge key"),
        # --- extracted fields ---
        sa.Column("year", sa.String(), nullable=True),
        sa.Column("brand", sa.String(), nullable=True),
        sa.Column("set_name", sa.String(), nullable=True),
        sa.Column("variant", sa.String(), nullable=True),
        sa.Column("card_number", sa.String(), nullable=True),
        sa.Column("print_run", sa.String(), nullable=True),
        sa.Column("player_name", sa.String(), nullable=True),
        sa.Column("is_autograph", sa.BOOLEAN(), nullable=False, server_default=sa.false()),
        sa.Column("is_rookie", sa.BOOLEAN(), nullable=False, server_default=sa.false()),
        # --- review ---
        sa.Column("needs_review", sa.BOOLEAN(), nullable=False, server_default=sa.false()),
        sa.Column("review_reasons", sa.String(), nullable=True),
        sa.Column("term_list_version", sa.String(), nullable=True),
        # --- prices ---
        sa.Column("raw_average_price", sa.DECIMAL(10, 2), nullable=True),
        sa.Column("psa9_average_price", sa.DECIMAL(10, 2), nullable=True),
        sa.Column("psa10_price", sa.DECIMAL(10, 2), nullable=True),
        sa.Column("psa10_average_price", sa.DECIMAL(10, 2), nullable=True),
        sa.Column("multiplier", sa.DECIMAL(10, 2), nullable=True),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column(
            "last_updated",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.UniqueConstraint("source_id", name="uq_cards_source_id"),
    )
    op.create_index("ix_cards_canonical_title", "cards", ["canonical_title"])
    op.create_index("ix_cards_needs_review", "cards", ["needs_review"])


def downgrade() -> None:
    op.drop_index("ix_cards_needs_review", table_name="cards")
    op.drop_index("ix_cards_canonical_title", table_name="cards")
    op.drop_table("cards")
