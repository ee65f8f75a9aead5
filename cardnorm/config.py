"""
Card Normalizer — Configuration & Constants

Every threshold, ratio and policy switch used by the extraction pipeline,
the duplicate merger and the price-anomaly corrector lives here. No
hardcoded values in business logic.

Usage:
    from cardnorm.config import settings
"""

from __future__ import annotations

from decimal import Decimal
from enum import Enum

from pydantic_settings import BaseSettings


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class GradeNumberPolicy(str, Enum):
    """How a bare 1-3 digit number is treated when it could be a grade."""
    PSA_MATCH = "psa_match"                    # Grade if "PSA <n>" in title and no '#'
    ALWAYS_CARD_NUMBER = "always_card_number"  # Never discard bare numbers
    NEVER_BARE = "never_bare"                  # Only '#'-prefixed / coded numbers count


class ReviewReason(str, Enum):
    """Machine-readable reasons attached to a listing flagged for review."""
    MISSING_BRAND = "missing_brand"
    MISSING_PLAYER_NAME = "missing_player_name"
    AMBIGUOUS_PLAYER_NAME = "ambiguous_player_name"
    SINGLE_TOKEN_PLAYER_NAME = "single_token_player_name"
    POSSIBLE_SURNAME_COLLISION = "possible_surname_collision"
    LONG_PLAYER_NAME = "long_player_name"


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------

class Settings(BaseSettings):
    """
    Central configuration for the card normalizer.

    Loads from environment variables (or .env) with fallback defaults.
    """

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    # -----------------------------------------------------------------------
    # Database
    # -----------------------------------------------------------------------
    DATABASE_URL: str = "sqlite+aiosqlite:///./data/cards.db"

    # -----------------------------------------------------------------------
    # Logging
    # -----------------------------------------------------------------------
    LOG_LEVEL: str = "INFO"

    # -----------------------------------------------------------------------
    # Term lists
    # Empty path means the packaged cardnorm/data/term_lists.json
    # -----------------------------------------------------------------------
    TERM_LISTS_PATH: str = ""

    # -----------------------------------------------------------------------
    # Extraction
    # -----------------------------------------------------------------------
    GRADE_NUMBER_POLICY: GradeNumberPolicy = GradeNumberPolicy.PSA_MATCH
    YEAR_FLOOR: int = 1900
    YEAR_CEILING_OFFSET: int = 1          # Accept up to current year + 1 (pre-release product)
    MAX_PLAYER_NAME_TOKENS: int = 4       # Longer spans are kept but flagged for review

    # -----------------------------------------------------------------------
    # Price-anomaly correction
    # raw > psa10        -> raw  = psa10 × RAW_TO_PSA10_RATIO
    # psa9 > psa10       -> psa9 = psa10 × PSA9_TO_PSA10_RATIO
    # raw > psa10_avg    -> raw  = psa10_avg × RAW_TO_PSA10_RATIO
    # -----------------------------------------------------------------------
    RAW_TO_PSA10_RATIO: Decimal = Decimal("0.30")
    PSA9_TO_PSA10_RATIO: Decimal = Decimal("0.70")
    PRICE_QUANTUM: Decimal = Decimal("0.01")

    # -----------------------------------------------------------------------
    # Duplicate merge
    # -----------------------------------------------------------------------
    MERGE_MAX_ATTEMPTS: int = 3
    MERGE_RETRY_BACKOFF_SECONDS: float = 0.1


# Singleton instance
settings = Settings()
