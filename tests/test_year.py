"""
Card Normalizer — Year Extractor Tests

First plausible 4-digit year, season suffixes kept, card numbers and serials
ignored.
"""

from __future__ import annotations

import pytest

from cardnorm.engine.year import extract_year, remove_year


class TestExtractYear:
    """Plausible years are found, implausible tokens are not."""

    @pytest.mark.parametrize(
        "title,expected",
        [
            ("2024 Bowman U Chrome #16 Cooper Flagg", "2024"),
            ("PAUL SKENES 2024 BOWMAN CHROME SAPPHIRE", "2024"),
            ("1994-95 Fleer Ultra Michael Jordan", "1994-95"),
            ("1986 Fleer Michael Jordan #57", "1986"),
            ("2027 Topps Chrome Preview", "2027"),
        ],
    )
    def test_year_found(self, title: str, expected: str) -> None:
        """The first plausible year token is returned as written."""
        assert extract_year(title, current_year=2026) == expected

    def test_year_above_ceiling_ignored(self) -> None:
        """Years more than one past the current year are not years."""
        assert extract_year("2031 Topps Chrome", current_year=2026) is None

    def test_year_below_floor_ignored(self) -> None:
        """Four-digit numbers below 1900 are skipped."""
        assert extract_year("Lot of 1500 cards 1999 Topps", current_year=2026) == "1999"

    def test_hash_number_not_year(self) -> None:
        """'#2024' is a card number, not a year."""
        assert extract_year("Topps Now #2024 Shohei Ohtani", current_year=2026) is None

    def test_serial_denominator_not_year(self) -> None:
        """'/1999' is a print run, not a year."""
        assert extract_year("Gold Refractor 12/1999", current_year=2026) is None

    def test_cert_number_not_year(self) -> None:
        """Eight-digit cert numbers do not yield a year."""
        assert extract_year("Cooper Flagg PSA 10 12345678", current_year=2026) is None

    def test_no_year(self) -> None:
        """Titles without a year return None."""
        assert extract_year("Topps Chrome Caleb Williams", current_year=2026) is None


class TestRemoveYear:
    """remove_year() drops exactly the token extract_year() returns."""

    def test_removes_season_token(self) -> None:
        """The season suffix goes with the year."""
        assert remove_year("1994-95 Fleer Ultra", current_year=2026).split() == ["Fleer", "Ultra"]

    def test_no_year_unchanged(self) -> None:
        """Text without a year comes back unchanged."""
        assert remove_year("Topps Chrome", current_year=2026) == "Topps Chrome"
