from cardnorm.engine.assembler import assemble_title
from cardnorm.engine.attributes import detect_autograph, detect_rookie
from cardnorm.engine.brand import BrandMatch, classify_brand
from cardnorm.engine.extractor import ExtractionResult, extract_fields
from cardnorm.engine.fields import ExtractedFields, InvalidInput, RawListing, ensure_title
from cardnorm.engine.grading import grading_rules, strip_grading
from cardnorm.engine.numbering import extract_card_number, extract_print_run, is_grade_number
from cardnorm.engine.player import PlayerNameResult, extract_player_name
from cardnorm.engine.variant import detect_variant
from cardnorm.engine.year import extract_year

__all__ = [
    "BrandMatch",
    "ExtractedFields",
    "ExtractionResult",
    "InvalidInput",
    "PlayerNameResult",
    "RawListing",
    "assemble_title",
    "classify_brand",
    "detect_autograph",
    "detect_rookie",
    "detect_variant",
    "ensure_title",
    "extract_card_number",
    "extract_fields",
    "extract_player_name",
    "extract_print_run",
    "extract_year",
    "grading_rules",
    "is_grade_number",
    "strip_grading",
]
