"""
Card Normalizer — Shared pytest Fixtures & Configuration

Provides common fixtures for all test modules:
- Packaged term lists
- In-memory aiosqlite database with the cards table
- Helpers for seeding card records
- Async test support via pytest-asyncio
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import AsyncGenerator, Awaitable, Callable, Optional

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from cardnorm.models.base import Base
from cardnorm.models.card_record import CardRecord
from cardnorm.utils.term_lists import TermLists, load_term_lists


# ---------------------------------------------------------------------------
# Term lists
# ---------------------------------------------------------------------------


@pytest.fixture(scope="session")
def terms() -> TermLists:
    """Packaged term lists (cardnorm/data/term_lists.json)."""
    return load_term_lists()


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------


@pytest.fixture
async def session_factory() -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    """
    Session factory bound to a fresh in-memory aiosqlite database.

    StaticPool keeps a single connection so every session sees the same
    in-memory database.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    yield factory

    await engine.dispose()


SeedCard = Callable[..., Awaitable[CardRecord]]


@pytest.fixture
def seed_card(session_factory: async_sessionmaker[AsyncSession]) -> SeedCard:
    """
    Insert one card record and return it.

    created_offset_minutes orders records by creation time relative to a
    fixed base timestamp. player_name defaults to a real name; pass None
    for records the extractor could not name.
    """
    base_time = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)
    counter = {"n": 0}

    async def _seed(
        canonical_title: str,
        *,
        raw: Optional[str] = None,
        psa9: Optional[str] = None,
        psa10: Optional[str] = None,
        psa10_avg: Optional[str] = None,
        multiplier: Optional[str] = None,
        created_offset_minutes: int = 0,
        source_id: Optional[str] = None,
        player_name: Optional[str] = "Caleb Williams",
    ) -> CardRecord:
        counter["n"] += 1
        record = CardRecord(
            source_id=source_id or f"listing-{counter['n']}",
            title=canonical_title,
            canonical_title=canonical_title,
            player_name=player_name,
            raw_average_price=Decimal(raw) if raw is not None else None,
            psa9_average_price=Decimal(psa9) if psa9 is not None else None,
            psa10_price=Decimal(psa10) if psa10 is not None else None,
            psa10_average_price=Decimal(psa10_avg) if psa10_avg is not None else None,
            multiplier=Decimal(multiplier) if multiplier is not None else None,
            created_at=base_time + timedelta(minutes=created_offset_minutes),
            last_updated=base_time + timedelta(minutes=created_offset_minutes),
        )
        async with session_factory() as session:
            session.add(record)
            await session.commit()
        return record

    return _seed
