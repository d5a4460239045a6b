"""Structured JSON caption export, schema-validated.

WHY: The UI, the persistence layer, and the render pipeline all exchange
captions as JSON. The export must be exactly the structured data — no
re-timing, no reordering — so parsing it back yields the same list.

HOW: Each caption becomes its to_dict() wire shape. The list is validated
against CAPTION_LIST_SCHEMA with jsonschema before serializing with
2-space indentation.

RULES:
- Keys: startTime, endTime, text, language, wordCount, and confidence
  when present
- Non-ASCII text (Devanagari) is written as-is, not \\u-escaped
- Raises jsonschema.ValidationError if a caption drifts from the schema
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from typing import Any

import jsonschema

from video_captioner.core.ir import CaptionLanguage, ProcessedCaption
from video_captioner.formatters.base import BaseFormatter, FormatterOutput

CAPTION_LIST_SCHEMA: dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "type": "array",
    "items": {
        "type": "object",
        "required": ["startTime", "endTime", "text", "language", "wordCount"],
        "additionalProperties": False,
        "properties": {
            "startTime": {"type": "number", "minimum": 0},
            "endTime": {"type": "number", "minimum": 0},
            "text": {"type": "string", "minLength": 1},
            "language": {"enum": [language.value for language in CaptionLanguage]},
            "wordCount": {"type": "integer", "minimum": 0},
            "confidence": {"type": "number"},
        },
    },
}


def captions_to_data(captions: Sequence[ProcessedCaption]) -> list[dict[str, Any]]:
    """The structured form of a caption list, validated against the schema."""
    data = [caption.to_dict() for caption in captions]
    jsonschema.validate(instance=data, schema=CAPTION_LIST_SCHEMA)
    return data


def export_to_json(captions: Sequence[ProcessedCaption]) -> str:
    return json.dumps(captions_to_data(captions), indent=2, ensure_ascii=False)


class JSONFormatter(BaseFormatter):
    """Formatter that produces a single .json file."""

    @property
    def name(self) -> str:
        return "Caption JSON"

    def format(self, captions: Sequence[ProcessedCaption]) -> list[FormatterOutput]:
        return [
            FormatterOutput(
                suffix=".json",
                content=export_to_json(captions),
                media_type="application/json",
            )
        ]
