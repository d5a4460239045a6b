"""Video Captioner — caption segmentation, timing normalization, and export.

WHY: Speech-recognition services return timed segments with no guarantees
on text cleanliness, segment length, or display duration. Burned-in and
sidecar captions need short, readable cues that stay on screen long enough
to be read. This package turns raw segments into display-ready cues and
serializes them for subtitle files and the render pipeline.

HOW: Three-stage pipeline — ingest (recognition client + adapter), process
(core: clean, classify, split, adjust, validate), export (pluggable
formatters). Each stage is independently testable.

RULES:
- The core is pure: no I/O, no shared state, safe to call concurrently
- Malformed input is dropped, never raised
- All formatters consume the same ProcessedCaption list
"""

__version__ = "0.1.0"
