"""Render-consumer input for processed captions.

WHY: The render pipeline is a black box that takes a cue list, a style,
and composition settings. Before handing captions over, the service must
build those props consistently: cues sorted, duration derived from the
last cue, style validated.

HOW: Small pure functions over ProcessedCaption lists.

RULES:
- composition_duration() falls back to a default for empty lists
- build_render_props() never mutates the caption list
- Each rendered cue carries its wrapped overlay lines and script class
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from typing import Any

from video_captioner.core.ir import ProcessedCaption
from video_captioner.core.styles import (
    CaptionStyle,
    classify_script,
    overlay_lines,
    parse_caption_style,
)

DEFAULT_COMPOSITION_SECONDS = 10.0


def _overlay_cue(caption: ProcessedCaption, style: CaptionStyle) -> dict[str, Any]:
    cue = caption.to_dict()
    cue["lines"] = overlay_lines(caption.text, style)
    cue["script"] = classify_script(caption.text)
    return cue


def composition_duration(
    captions: Sequence[ProcessedCaption],
    default: float = DEFAULT_COMPOSITION_SECONDS,
) -> float:
    if not captions:
        return default
    return max(max(caption.end_time for caption in captions), default)


def build_render_props(
    video_path: str,
    captions: Sequence[ProcessedCaption],
    style: CaptionStyle | str,
    width: int = 1920,
    height: int = 1080,
    fps: int = 30,
) -> dict[str, Any]:
    """Build the input props for the video-composition renderer.

    Args:
        video_path: Source video location as the renderer sees it.
        captions: Processed captions, in any order.
        style: CaptionStyle or its string value.
        width: Output width in pixels.
        height: Output height in pixels.
        fps: Output frame rate.

    Returns:
        A JSON-serializable props dict.

    Raises:
        ValueError: If style is not a known caption style.
    """
    if not isinstance(style, CaptionStyle):
        style = parse_caption_style(style)

    ordered = sorted(captions, key=lambda caption: caption.start_time)
    duration = composition_duration(ordered)

    return {
        "videoPath": video_path,
        "captions": [_overlay_cue(caption, style) for caption in ordered],
        "style": style.value,
        "width": width,
        "height": height,
        "fps": fps,
        "durationInFrames": math.ceil(duration * fps),
    }
