"""CJK-aware paragraph reflow for text extracted from PDFs and OCR."""

from .line_classifier import LineKind, ShortHeadingSettings, classify_line
from .overlay_filter import TextObjectFragment, filter_overlay_fragments, filter_page_objects
from .reflow_helper import (
    ReflowOptions,
    Segment,
    collapse_consecutive_duplicate_lines,
    reflow_cjk_paragraphs_core,
    reflow_text,
    segment_paragraphs,
)

__version__ = "0.1.0"

__all__ = [
    "LineKind",
    "ReflowOptions",
    "Segment",
    "ShortHeadingSettings",
    "TextObjectFragment",
    "classify_line",
    "collapse_consecutive_duplicate_lines",
    "filter_overlay_fragments",
    "filter_page_objects",
    "reflow_cjk_paragraphs_core",
    "reflow_text",
    "segment_paragraphs",
]
