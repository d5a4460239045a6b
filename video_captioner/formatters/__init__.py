"""Export formatter registry and format dispatch.

WHY: The CLI and the HTTP API need a single lookup to find the right
formatter by name, and the caption endpoints need the "all formats at
once" bundle the editor downloads. A central dict makes adding a format
one import and one line.

HOW: FORMATTERS maps string keys to formatter *classes* (not instances).
export_captions() dispatches on a format name; export_all_formats()
returns an ExportBundle with both subtitle texts and the structured data.

RULES:
- Keys are the format names used in CLI flags and API paths
- Values are BaseFormatter subclasses (not instances)
- export_captions() raises ValueError for unknown formats
- ExportBundle.json is the structured list, not a JSON string
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Union

from video_captioner.core.ir import ProcessedCaption
from video_captioner.formatters.json_export import JSONFormatter, captions_to_data, export_to_json
from video_captioner.formatters.srt import SRTFormatter, export_to_srt
from video_captioner.formatters.vtt import VTTFormatter, export_to_vtt

if TYPE_CHECKING:
    from video_captioner.formatters.base import BaseFormatter

FORMATTERS: dict[str, type[BaseFormatter]] = {
    "srt": SRTFormatter,
    "vtt": VTTFormatter,
    "json": JSONFormatter,
}


@dataclass
class ExportBundle:
    """All export formats for one caption list."""

    srt: str
    vtt: str
    json: list[dict[str, Any]]


def export_all_formats(captions: Sequence[ProcessedCaption]) -> ExportBundle:
    return ExportBundle(
        srt=export_to_srt(captions),
        vtt=export_to_vtt(captions),
        json=captions_to_data(captions),
    )


def export_captions(
    captions: Sequence[ProcessedCaption],
    fmt: str,
) -> Union[str, ExportBundle]:
    """Export captions in one named format, or all of them.

    Args:
        captions: Processed captions in display order.
        fmt: "srt", "vtt", "json", or "all".

    Returns:
        The serialized text, or an ExportBundle for "all".

    Raises:
        ValueError: If fmt is not a supported format.
    """
    if fmt == "all":
        return export_all_formats(captions)
    if fmt == "srt":
        return export_to_srt(captions)
    if fmt == "vtt":
        return export_to_vtt(captions)
    if fmt == "json":
        return export_to_json(captions)
    raise ValueError("Unsupported export format: {}".format(fmt))


__all__ = [
    "FORMATTERS",
    "ExportBundle",
    "export_all_formats",
    "export_captions",
    "export_to_json",
    "export_to_srt",
    "export_to_vtt",
]
