"""
Card Normalizer — Term List Loading & Index Tests
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from cardnorm.utils.term_lists import (
    BrandEntry,
    TermLists,
    load_term_lists,
    phrase_regex,
    term_index,
    token_key,
    tokenize,
)


class TestLoadTermLists:
    """Packaged and custom term-list documents."""

    def test_packaged_lists(self, terms: TermLists) -> None:
        """The packaged document loads with every list populated."""
        assert terms.version
        assert terms.brands
        assert "Red" in terms.variants
        assert "PSA" in terms.grading_companies
        assert "duke" in terms.team_names

    def test_custom_path(self, tmp_path: Path) -> None:
        """A document at any path can replace the packaged lists."""
        doc = {
            "version": "test-1",
            "brands": [{"pattern": "Topps Chrome", "brand": "Topps", "set_name": "Topps Chrome"}],
            "variants": ["Red"],
            "grading_companies": ["PSA"],
            "autograph_terms": ["auto"],
            "rookie_terms": ["rc"],
            "card_terms": ["rookie"],
            "team_names": ["bears"],
            "city_names": ["chicago"],
        }
        path = tmp_path / "terms.json"
        path.write_text(json.dumps(doc), encoding="utf-8")

        loaded = load_term_lists(path)

        assert loaded.version == "test-1"
        assert loaded.brands[0].pattern == "topps chrome"
        assert loaded.ambiguous_surnames == ()

    def test_invalid_document(self, tmp_path: Path) -> None:
        """Missing lists fail validation."""
        path = tmp_path / "terms.json"
        path.write_text(json.dumps({"version": "x"}), encoding="utf-8")

        with pytest.raises(ValidationError):
            load_term_lists(path)

    def test_missing_file(self, tmp_path: Path) -> None:
        """Unreadable paths raise OSError."""
        with pytest.raises(OSError):
            load_term_lists(tmp_path / "absent.json")

    def test_blank_brand_pattern_rejected(self) -> None:
        """Brand patterns must have content."""
        with pytest.raises(ValidationError):
            BrandEntry(pattern="  ", brand="Topps")

    def test_frozen(self, terms: TermLists) -> None:
        """Term lists cannot be mutated after loading."""
        with pytest.raises(ValidationError):
            terms.version = "changed"


class TestTokens:
    def test_tokenize(self) -> None:
        """Punctuation splits tokens; apostrophes and hyphens do not."""
        assert tokenize("JA'MARR CHASE (Bengals) /5, Smith-Njigba") == [
            "JA'MARR", "CHASE", "Bengals", "5", "Smith-Njigba",
        ]

    def test_token_key(self) -> None:
        """Keys are lower case with curly apostrophes straightened."""
        assert token_key("Ja’Marr") == "ja'marr"
        assert token_key("St.") == "st"


class TestTermIndex:
    def test_phrase_regex_tolerates_separators(self) -> None:
        """Spaces and hyphens between words are interchangeable."""
        regex = phrase_regex("topps chrome")

        assert regex.search("TOPPS-CHROME") is not None
        assert regex.search("Topps   Chrome") is not None
        assert regex.search("ToppsChrome") is None

    def test_index_is_cached(self, terms: TermLists) -> None:
        """The same TermLists value compiles once."""
        assert term_index(terms) is term_index(terms)

    def test_denylist_groups_by_phrase_length(self, terms: TermLists) -> None:
        """Multi-word phrases are stored as token tuples."""
        index = term_index(terms)

        assert ("new", "york") in index.denylist[2]
        assert ("duke",) in index.denylist[1]

    def test_flags(self, terms: TermLists) -> None:
        """Autograph and rookie alternations match on word boundaries."""
        index = term_index(terms)

        assert index.autograph.search("Flagg AUTO") is not None
        assert index.autograph.search("Flagg Autumn") is None
        assert index.rookie.search("1st Bowman Chrome") is not None
