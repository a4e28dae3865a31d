from __future__ import annotations

"""
overlay_filter.py

Drop watermark / overlay text objects from one PDF page before reflow.

Each page object arrives as (raw text, vertical mid position). Two patterns
mark an object as untrusted overlay:

- the same normalized text on the same vertical band repeats 4+ times
  on the page (stamped "CONFIDENTIAL" rows, repeated footers)
- a tiled single-word watermark: 6+ space separated tokens, all but at most
  one identical short token ("DRAFT DRAFT DRAFT DRAFT DRAFT DRAFT")

Survivors are joined in page order into line-oriented text.
"""

import logging
import math
import re
from collections import Counter
from dataclasses import dataclass
from typing import Iterable, List, Sequence, Tuple

logger = logging.getLogger(__name__)

DEFAULT_BAND_STEP = 8.0
DEFAULT_LINE_TOLERANCE = 1

REPEAT_THRESHOLD = 4
TILED_MIN_TOKENS = 6
TILED_MAX_TOKEN_LEN = 16

_WS_RE = re.compile(r"\s+")


@dataclass(frozen=True)
class TextObjectFragment:
    text: str
    normalized: str
    y_bucket: int

    @classmethod
    def from_object(cls, text: str, y_mid: float, band_step: float = DEFAULT_BAND_STEP) -> "TextObjectFragment":
        return cls(text, normalize_fragment_text(text), y_bucket_of(y_mid, band_step))


def normalize_fragment_text(text: str) -> str:
    """Collapse whitespace runs to one space and trim."""
    return _WS_RE.sub(" ", text or "").strip()


def y_bucket_of(y_mid: float, band_step: float = DEFAULT_BAND_STEP) -> int:
    if band_step <= 0:
        band_step = DEFAULT_BAND_STEP
    return int(math.floor(y_mid / band_step))


def is_tiled_watermark(normalized: str) -> bool:
    tokens = normalized.split(" ")
    if len(tokens) < TILED_MIN_TOKENS:
        return False

    (token, count), = Counter(tokens).most_common(1)
    if len(token) > TILED_MAX_TOKEN_LEN:
        return False
    return count >= len(tokens) - 1


def filter_overlay_fragments(fragments: Sequence[TextObjectFragment]) -> List[TextObjectFragment]:
    """Return the fragments of one page that are not overlay/watermark objects."""
    freq = Counter(
        (f.normalized, f.y_bucket) for f in fragments if f.normalized
    )

    kept: List[TextObjectFragment] = []
    dropped = 0

    for f in fragments:
        if f.normalized and (
                freq[(f.normalized, f.y_bucket)] >= REPEAT_THRESHOLD
                or is_tiled_watermark(f.normalized)
        ):
            dropped += 1
            continue
        kept.append(f)

    if dropped:
        logger.debug("Overlay filter dropped %d of %d fragments", dropped, len(fragments))

    return kept


def join_fragments(fragments: Iterable[TextObjectFragment], line_tolerance: int = DEFAULT_LINE_TOLERANCE) -> str:
    """
    Concatenate fragments in page order. A line break is inserted only when
    the bucket gap to the previous fragment exceeds line_tolerance, so glyph
    jitter on punctuation/quotes does not split a line.
    """
    parts: List[str] = []
    prev_bucket = None

    for f in fragments:
        if prev_bucket is not None and abs(f.y_bucket - prev_bucket) > line_tolerance:
            parts.append("\n")
        parts.append(f.text)
        prev_bucket = f.y_bucket

    return "".join(parts)


def filter_page_objects(
        objects: Iterable[Tuple[str, float]],
        band_step: float = DEFAULT_BAND_STEP,
        line_tolerance: int = DEFAULT_LINE_TOLERANCE,
) -> str:
    """(raw text, y_mid) objects of one page → filtered line-oriented text."""
    fragments = [TextObjectFragment.from_object(text, y, band_step) for text, y in objects]
    return join_fragments(filter_overlay_fragments(fragments), line_tolerance)
