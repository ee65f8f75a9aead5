"""
Card Normalizer — Grade/Certification Stripper Tests

Each stripping rule is exercised on its own, then the full ladder is
checked end to end and for idempotence.
"""

from __future__ import annotations

import pytest

from cardnorm.engine.grading import grading_rules, strip_grading
from cardnorm.utils.rules import apply_rules, rule_by_name
from cardnorm.utils.term_lists import TermLists


def _apply(terms: TermLists, name: str, text: str) -> str:
    return " ".join(apply_rules(text, [rule_by_name(grading_rules(terms), name)]).split())


class TestIndividualRules:
    """Every rule does its one job."""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("Ohtani Auto PSA/DNA Authenticated", "Ohtani Auto"),
            ("Ohtani Auto PSA/DNA", "Ohtani Auto"),
            ("Ohtani Signed JSA AUTH", "Ohtani Signed"),
            ("Ohtani Signed Beckett BAS", "Ohtani Signed"),
        ],
    )
    def test_authentication_service(self, terms: TermLists, text: str, expected: str) -> None:
        """Authentication services are removed with their qualifier."""
        assert _apply(terms, "authentication_service", text) == expected

    @pytest.mark.parametrize(
        "text",
        ["Flagg CERT #87654321", "Flagg Cert: 87654321", "Flagg CERT NO. 1234567"],
    )
    def test_cert_number(self, terms: TermLists, text: str) -> None:
        """Cert numbers go with their label."""
        assert _apply(terms, "cert_number", text) == "Flagg"

    @pytest.mark.parametrize(
        "text",
        [
            "Flagg PSA 10",
            "Flagg PSA10",
            "Flagg BGS 9.5",
            "Flagg SGC 9",
            "Flagg PSA GEM MT 10",
            "Flagg PSA 10 87654321",
        ],
    )
    def test_company_grade(self, terms: TermLists, text: str) -> None:
        """Company, optional label, grade and trailing cert are removed together."""
        assert _apply(terms, "company_grade", text) == "Flagg"

    def test_company_grade_keeps_ordinals(self, terms: TermLists) -> None:
        """'PSA 1st' is not a grade."""
        assert _apply(terms, "company_grade", "PSA 1st Bowman") == "PSA 1st Bowman"

    @pytest.mark.parametrize("text", ["Flagg GEM MT 10", "Flagg MINT 9", "Flagg NM-MT 8"])
    def test_label_grade(self, terms: TermLists, text: str) -> None:
        """Grade labels with a number but no company are removed."""
        assert _apply(terms, "label_grade", text) == "Flagg"

    @pytest.mark.parametrize("text", ["Flagg POP 3", "Flagg Pop: 12", "Flagg NONE HIGHER", "Flagg LOW POP"])
    def test_population(self, terms: TermLists, text: str) -> None:
        """Population counts are removed."""
        assert _apply(terms, "population", text) == "Flagg"

    @pytest.mark.parametrize("text", ["Flagg GEM MINT", "Flagg MINT", "Flagg Pristine", "Flagg AUTHENTIC"])
    def test_grade_words(self, terms: TermLists, text: str) -> None:
        """Standalone grade words are removed."""
        assert _apply(terms, "grade_words", text) == "Flagg"

    def test_grade_words_keep_sp_authentic(self, terms: TermLists) -> None:
        """'SP Authentic' is a product, not a grade."""
        assert _apply(terms, "grade_words", "Upper Deck SP Authentic") == "Upper Deck SP Authentic"

    def test_company_name(self, terms: TermLists) -> None:
        """Bare company tokens and 'graded' are removed."""
        assert _apply(terms, "company_name", "Flagg PSA Graded") == "Flagg"

    def test_trim_separators(self, terms: TermLists) -> None:
        """Dangling separators at either end are removed."""
        rule = rule_by_name(grading_rules(terms), "trim_separators")

        assert apply_rules(" - Flagg | ", [rule]) == "Flagg"


class TestStripGrading:
    """Full ladder."""

    def test_fixture_title(self, terms: TermLists) -> None:
        """Grade and grade words leave no trace."""
        title = "2024 Bowman U Chrome #16 Cooper Flagg Duke RC Rookie AUTO PSA 10 GEM MINT"

        assert strip_grading(title, terms) == "2024 Bowman U Chrome #16 Cooper Flagg Duke RC Rookie AUTO"

    def test_cert_and_grade(self, terms: TermLists) -> None:
        """Grade, label and cert number all go."""
        title = "2024 TOPPS CHROME CALEB WILLIAMS ROOKIE #74 PSA 9 MINT CERT #87654321"

        assert strip_grading(title, terms) == "2024 TOPPS CHROME CALEB WILLIAMS ROOKIE #74"

    def test_card_number_survives(self, terms: TermLists) -> None:
        """'#16' is not a grade."""
        assert "#16" in strip_grading("Flagg #16 BGS 9.5 PRISTINE", terms)

    def test_untouched_title(self, terms: TermLists) -> None:
        """Titles without grading noise are only whitespace-normalized."""
        assert strip_grading("  Topps Chrome   Caleb Williams ", terms) == "Topps Chrome Caleb Williams"

    @pytest.mark.parametrize(
        "title",
        [
            "2024 Bowman U Chrome #16 Cooper Flagg Duke RC Rookie AUTO PSA 10 GEM MINT",
            "PAUL SKENES 2024 BOWMAN CHROME SAPPHIRE ROOKIE RC RED /5 PSA 10 GEM MINT PIRATES",
            "PSA PSA 10 10 GEM GEM MINT MINT",
            "Ohtani PSA/DNA PSA 10 Auto 10 POP 1 - ",
            "( PSA 9 ) [ BGS ] Caleb Williams",
        ],
    )
    def test_idempotent(self, terms: TermLists, title: str) -> None:
        """Stripping twice is the same as stripping once."""
        once = strip_grading(title, terms)

        assert strip_grading(once, terms) == once
