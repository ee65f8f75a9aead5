"""
Card Normalizer — Listing & Extracted-Field Types

RawListing is what the scraping side hands us: a free-text title plus a
stable source identifier. ExtractedFields is the structured result of one
pass through the extraction stages. Both are frozen value objects.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator


class InvalidInput(ValueError):
    """Raised when a listing cannot enter the pipeline (empty or non-string title, no id)."""


def ensure_title(title: Any) -> str:
    """
    Validate a raw listing title.

    Args:
        title: Value supplied as the listing title.

    Returns:
        The title, unchanged.

    Raises:
        InvalidInput: If the title is not a string or is blank.
    """
    if not isinstance(title, str):
        raise InvalidInput(f"title must be a string, got {type(title).__name__}")
    if not title.strip():
        raise InvalidInput("title must not be empty")
    return title


class RawListing(BaseModel):
    """A scraped marketplace listing, before any extraction."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    title: str
    source_id: str = Field(alias="id")
    scrape_timestamp: Optional[datetime] = None

    @field_validator("title", mode="before")
    @classmethod
    def _validate_title(cls, value: Any) -> str:
        return ensure_title(value)

    @field_validator("source_id", mode="before")
    @classmethod
    def _coerce_source_id(cls, value: Any) -> str:
        if value is None or (isinstance(value, str) and not value.strip()):
            raise ValueError("listing id must not be empty")
        return str(value).strip()

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "RawListing":
        """
        Build a RawListing from an external {title, id} mapping.

        Accepts either "id" or "source_id" as the identifier key.

        Raises:
            InvalidInput: If the payload fails validation.
        """
        data = dict(payload)
        if "id" not in data and "source_id" in data:
            data["id"] = data.pop("source_id")
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise InvalidInput(
                "; ".join(f"{'.'.join(map(str, err['loc']))}: {err['msg']}" for err in e.errors())
            ) from e


class ExtractedFields(BaseModel):
    """Structured fields derived from one listing title."""

    model_config = ConfigDict(frozen=True)

    year: Optional[str] = None
    brand: Optional[str] = None
    set_name: Optional[str] = None
    variant: Optional[str] = None
    card_number: Optional[str] = None
    print_run: Optional[str] = None
    is_autograph: bool = False
    is_rookie: bool = False
    player_name: Optional[str] = None
