"""
Card Normalizer — Title Assembler Tests
"""

from __future__ import annotations

from cardnorm.engine.assembler import assemble_title
from cardnorm.engine.fields import ExtractedFields


class TestAssembleTitle:
    """Fixed field order, skipped blanks, deterministic output."""

    def test_full_order(self) -> None:
        """year, set, variant, player, auto, #number, print run."""
        fields = ExtractedFields(
            year="2024",
            brand="Bowman",
            set_name="Bowman Chrome Sapphire",
            variant="Red",
            card_number="16",
            print_run="/5",
            is_autograph=True,
            player_name="Paul Skenes",
        )

        assert assemble_title(fields) == "2024 Bowman Chrome Sapphire Red Paul Skenes auto #16 /5"

    def test_brand_used_without_set(self) -> None:
        """The manufacturer stands in when there is no product line."""
        fields = ExtractedFields(year="2024", brand="Bowman", player_name="Paul Skenes")

        assert assemble_title(fields) == "2024 Bowman Paul Skenes"

    def test_missing_fields_skipped(self) -> None:
        """No double spaces where fields are absent."""
        fields = ExtractedFields(player_name="Caleb Williams", card_number="74")

        assert assemble_title(fields) == "Caleb Williams #74"

    def test_base_variant_omitted(self) -> None:
        """'Base' is never written."""
        fields = ExtractedFields(year="2024", set_name="Topps Chrome", variant="Base", player_name="Caleb Williams")

        assert assemble_title(fields) == "2024 Topps Chrome Caleb Williams"

    def test_number_and_print_run_prefixes_normalized(self) -> None:
        """'#' and '/' appear exactly once."""
        fields = ExtractedFields(card_number="#74", print_run="99")

        assert assemble_title(fields) == "#74 /99"

    def test_rookie_flag_not_in_title(self) -> None:
        """Only the autograph flag is part of the title."""
        fields = ExtractedFields(set_name="Topps Chrome", player_name="Caleb Williams", is_rookie=True)

        assert assemble_title(fields) == "Topps Chrome Caleb Williams"

    def test_empty_fields(self) -> None:
        """Nothing extracted gives an empty title."""
        assert assemble_title(ExtractedFields()) == ""

    def test_deterministic(self) -> None:
        """Equal fields give byte-identical titles."""
        a = ExtractedFields(year="2024", set_name="Topps Chrome", player_name="Caleb Williams", card_number="74")
        b = ExtractedFields(**a.model_dump())

        assert assemble_title(a) == assemble_title(b) == assemble_title(a)
