"""
Interpretation of the free-form `note` column on inventory rows.

The item editor stores one of two things in `note`:
- plain text written by staff
- a JSON payload listing per-size stock for items that were entered as a
  single row with several sizes:
  {"kind": "sizeVariations", "variations": [{"size": "S", "stock": 4}, ...]}

Older editor builds wrote the same payload as
{"_type": "sizeVariations", "sizeVariations": [...]}; both shapes parse to
SizeVariationsNote.
"""

import json
import logging
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, field_validator

from .parsers import to_int, to_text

logger = logging.getLogger(__name__)

SIZE_VARIATIONS_KIND = "sizeVariations"


class EmbeddedVariation(BaseModel):
    """One size listed inside a size-variations note."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    size: str | None = None
    stock: int = 0

    @field_validator("size", mode="before")
    @classmethod
    def coerce_size(cls, value: Any) -> str | None:
        return to_text(value)

    @field_validator("stock", mode="before")
    @classmethod
    def coerce_stock(cls, value: Any) -> int:
        return to_int(value)


class PlainNote(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["plain"] = "plain"
    text: str = ""


class SizeVariationsNote(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    kind: Literal["sizeVariations"] = SIZE_VARIATIONS_KIND
    variations: list[EmbeddedVariation]

    @field_validator("variations", mode="before")
    @classmethod
    def drop_non_mappings(cls, value: Any) -> Any:
        if isinstance(value, list):
            return [v for v in value if isinstance(v, (dict, EmbeddedVariation))]
        return value


ItemNote = Annotated[Union[PlainNote, SizeVariationsNote], Field(discriminator="kind")]

_note_adapter = TypeAdapter(ItemNote)


def _upgrade_legacy_payload(payload: dict) -> dict:
    if payload.get("_type") == SIZE_VARIATIONS_KIND and "kind" not in payload:
        return {"kind": SIZE_VARIATIONS_KIND, "variations": payload.get("sizeVariations")}
    return payload


def parse_note(raw: Any) -> PlainNote | SizeVariationsNote:
    """
    Parse a note into PlainNote or SizeVariationsNote.

    Anything that isn't a well-formed size-variations payload (plain text,
    broken JSON, JSON of another shape, a payload with a non-list
    `variations`) is a PlainNote carrying the original text.
    """
    if raw is None:
        return PlainNote()
    if isinstance(raw, (PlainNote, SizeVariationsNote)):
        return raw

    if isinstance(raw, dict):
        payload = raw
        text = json.dumps(raw, default=str)
    else:
        text = str(raw)
        try:
            payload = json.loads(text)
        except (json.JSONDecodeError, ValueError, RecursionError):
            return PlainNote(text=text)

    if not isinstance(payload, dict):
        return PlainNote(text=text)
    if payload.get("kind") == "plain":
        return PlainNote(text=to_text(payload.get("text")) or "")

    payload = _upgrade_legacy_payload(payload)
    if payload.get("kind") != SIZE_VARIATIONS_KIND:
        return PlainNote(text=text)

    try:
        return _note_adapter.validate_python(payload)
    except ValidationError as e:
        logger.debug("Malformed size-variations note treated as text: %s", e.error_count())
        return PlainNote(text=text)


def embedded_variations(raw: Any) -> list[EmbeddedVariation]:
    """Variations carried by a note; empty for plain notes."""
    note = parse_note(raw)
    if isinstance(note, SizeVariationsNote):
        return list(note.variations)
    return []
