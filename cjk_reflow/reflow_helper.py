from __future__ import annotations

"""
reflow_helper.py

CJK paragraph reflow for PDF/plain text extraction pipelines.

Design notes
------------
- Independent from PDF extraction backends: input is one line-oriented string.
- Lines are classified first (line_classifier), then a small state machine
  decides per line whether to flush the paragraph buffer or keep merging.
- The dialog gate wins over every soft boundary: while a quote is open the
  paragraph is never split on blank lines, sentence ends, indentation,
  dialog starters or short headings.
- Keep the rules deterministic and easy to tune.

The public entry point is:
    reflow_cjk_paragraphs_core(text, add_pdf_page_header=..., compact=...)
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Pattern

from .boundaries import (
    DEFAULT_SENTENCE_BOUNDARY_LEVEL,
    clamp_sentence_boundary_level,
    ends_with_cjk_bracket_boundary,
    ends_with_sentence_boundary,
)
from .cjk_text import has_paragraph_indent, is_all_cjk_ignoring_whitespace
from .dialog_state import DialogState
from .line_classifier import (
    DEFAULT_SHORT_HEADING,
    Line,
    LineKind,
    ShortHeadingSettings,
    classify_line,
    compile_custom_title_pattern,
    split_lines,
)
from .punct_sets import (
    begins_with_dialog_opener,
    ends_with_colon_like,
    has_unclosed_bracket,
    is_clause_or_end_punct,
    is_comma_like,
    is_strong_sentence_end,
    last_non_whitespace,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Optional cleanup helpers (kept outside extraction)
# =============================================================================

def collapse_consecutive_duplicate_lines(text: str) -> str:
    """
    Collapse consecutive duplicate *non-empty* lines (whitespace-insensitive).

    Useful for removing repeated headers/footers that occasionally leak into
    extracted text streams.
    """
    out: List[str] = []
    prev: Optional[str] = None

    for line in text.splitlines():
        key = line.strip()
        if not key:
            out.append(line)
            prev = None
            continue
        if prev is not None and key == prev:
            continue
        out.append(line)
        prev = key

    return "\n".join(out)


# =============================================================================
# Options / output types
# =============================================================================

@dataclass(frozen=True)
class ReflowOptions:
    add_pdf_page_header: bool = False
    compact: bool = False
    short_heading: ShortHeadingSettings = field(default=DEFAULT_SHORT_HEADING)
    sentence_boundary_level: int = DEFAULT_SENTENCE_BOUNDARY_LEVEL
    custom_title_pattern: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "sentence_boundary_level", clamp_sentence_boundary_level(self.sentence_boundary_level)
        )

    @property
    def custom_title_regex(self) -> Optional[Pattern[str]]:
        rx = compile_custom_title_pattern(self.custom_title_pattern)
        return rx if rx is not None else self.short_heading.custom_title_regex


@dataclass(frozen=True)
class Segment:
    """A finished output unit: a structural line or a flushed paragraph."""
    text: str
    kind: LineKind = LineKind.PROSE

    @property
    def is_structural(self) -> bool:
        return self.kind is not LineKind.PROSE


# =============================================================================
# Paragraph state (buffer + dialog counters)
# =============================================================================

class _ParagraphState:
    """
    The paragraph being assembled. Owned by one segmentation call only.

    pending_heading marks a buffer that holds a just-confirmed short heading:
    it is emitted as its own segment unless the very next line turns out to
    finish the same sentence.
    """
    __slots__ = ("buffer", "dialog", "pending_heading")

    def __init__(self) -> None:
        self.buffer = ""
        self.dialog = DialogState()
        self.pending_heading = False

    def reset(self) -> None:
        self.buffer = ""
        self.dialog.reset()
        self.pending_heading = False

    def start(self, text: str, pending_heading: bool = False) -> None:
        self.buffer = text
        self.dialog.reset()
        self.dialog.update(text)
        self.pending_heading = pending_heading

    def append(self, text: str) -> None:
        self.buffer += text
        self.dialog.update(text)
        self.pending_heading = False

    def flush_into(self, segments: List[Segment]) -> None:
        # never emit empty segments
        if self.buffer:
            kind = LineKind.SHORT_HEADING if self.pending_heading else LineKind.PROSE
            segments.append(Segment(self.buffer, kind))
        self.reset()

    @property
    def last_char(self) -> Optional[str]:
        return last_non_whitespace(self.buffer)

    @property
    def is_enclosed(self) -> bool:
        """Inside an unclosed dialog quote or bracket."""
        return self.dialog.is_unclosed or has_unclosed_bracket(self.buffer)


# =============================================================================
# Reflow rule helpers (kept out of the main loop)
# =============================================================================

def _blank_line_is_soft(state: _ParagraphState, add_pdf_page_header: bool) -> bool:
    """A blank line that is a page-layout artifact rather than a paragraph end."""
    if state.dialog.is_unclosed:
        return True
    if add_pdf_page_header or state.pending_heading:
        return False
    if has_unclosed_bracket(state.buffer):
        return True
    last = state.last_char
    return last is None or not is_clause_or_end_punct(last)


def _buffer_is_mid_sentence(state: _ParagraphState) -> bool:
    """Comma-like ending or open enclosure: the sentence is not finished."""
    if state.is_enclosed:
        return True
    last = state.last_char
    return last is not None and is_comma_like(last)


def _heading_may_split(state: _ParagraphState, stripped: str) -> bool:
    """
    Whether a short heading candidate may flush a non-empty buffer.

    Only the buffer's last character is consulted.
    """
    if _buffer_is_mid_sentence(state):
        return False
    last = state.last_char
    if last is None:
        return True
    if (is_all_cjk_ignoring_whitespace(stripped) or ends_with_colon_like(stripped)) \
            and not is_clause_or_end_punct(last):
        return False
    return True


def _continues_pending_heading(state: _ParagraphState, line: Line, options: ReflowOptions) -> bool:
    """
    A tentative all-CJK heading is really a wrapped sentence start when the
    next line is a short fragment that completes the sentence, e.g.
    "今天天氣" + "很好。".
    """
    if state.dialog.is_unclosed:
        return True
    if not is_all_cjk_ignoring_whitespace(state.buffer):
        return False
    if begins_with_dialog_opener(line.probe) or has_paragraph_indent(line.raw):
        return False
    last = last_non_whitespace(line.stripped)
    return (last is not None
            and is_strong_sentence_end(last)
            and len(line.probe) <= options.short_heading.max_len)


def _buffer_ends_at_boundary(state: _ParagraphState, level: int) -> bool:
    if not has_unclosed_bracket(state.buffer) and ends_with_sentence_boundary(state.buffer, level):
        return True
    return ends_with_cjk_bracket_boundary(state.buffer)


# =============================================================================
# Segmentation engine
# =============================================================================

def segment_paragraphs(text: str, options: Optional[ReflowOptions] = None) -> List[Segment]:
    """
    Split line-oriented extracted text into ordered paragraph segments.
    """
    if options is None:
        options = ReflowOptions()

    if not text or not text.strip():
        return []

    lines = split_lines(text)
    custom_title = options.custom_title_regex
    level = options.sentence_boundary_level

    segments: List[Segment] = []
    state = _ParagraphState()

    for source in lines:
        kind, line = classify_line(source, options.short_heading, custom_title)
        stripped = line.stripped

        # Page markers are only kept when page headers are requested;
        # otherwise they are layout noise, like a blank line.
        if kind is LineKind.PAGE_MARKER and not options.add_pdf_page_header:
            kind = LineKind.EMPTY

        # 1) Empty line
        if kind is LineKind.EMPTY:
            if state.buffer and _blank_line_is_soft(state, options.add_pdf_page_header):
                continue
            state.flush_into(segments)
            continue

        # 2) Divider / page marker / titles / metadata: always standalone
        if kind.is_hard_structural:
            state.flush_into(segments)
            text_out = line.probe if kind is LineKind.DIVIDER else stripped
            segments.append(Segment(text_out, kind))
            continue

        # 3) Bracket-wrapped structural line: （完） / 【番外】 / 《後記》
        if kind is LineKind.BRACKET_STRUCTURAL:
            if state.buffer and _buffer_is_mid_sentence(state):
                state.append(stripped)
                continue
            state.flush_into(segments)
            segments.append(Segment(stripped, kind))
            continue

        # 4) Short heading, unless the buffer is mid-sentence
        if kind is LineKind.SHORT_HEADING:
            # a held heading is never the prose that a following heading continues
            if state.pending_heading:
                state.flush_into(segments)
            if state.buffer and not _heading_may_split(state, stripped):
                state.append(stripped)
                continue
            state.flush_into(segments)
            state.start(stripped, pending_heading=True)
            continue

        # 5) Prose
        if not state.buffer:
            state.start(stripped)
            continue

        opens_dialog = begins_with_dialog_opener(line.probe)

        # Colon + dialog continuation: "他說：" + "「你好」"
        if opens_dialog and ends_with_colon_like(state.buffer):
            state.append(stripped)
            continue

        if state.pending_heading:
            if _continues_pending_heading(state, line, options):
                state.append(stripped)
            else:
                state.flush_into(segments)
                state.start(stripped)
            continue

        # Dialog starter → new paragraph, unless still mid-sentence
        if opens_dialog:
            if _buffer_is_mid_sentence(state):
                state.append(stripped)
            else:
                state.flush_into(segments)
                state.start(stripped)
            continue

        # Dialog gate: never split an open quotation
        if state.dialog.is_unclosed:
            state.append(stripped)
            continue

        if _buffer_ends_at_boundary(state, level) or has_paragraph_indent(line.raw):
            state.flush_into(segments)
            state.start(stripped)
            continue

        # Default merge (soft line break)
        state.append(stripped)

    state.flush_into(segments)

    logger.debug("Reflowed %d lines into %d segments", len(lines), len(segments))
    return segments


def join_segments(segments: List[Segment], compact: bool) -> str:
    """compact → "p1\\np2"; novel → "p1\\n\\np2"."""
    texts = [seg.text for seg in segments]
    return "\n".join(texts) if compact else "\n\n".join(texts)


# =============================================================================
# Reflow core (public entry)
# =============================================================================

def reflow_cjk_paragraphs_core(
        text: str,
        *,
        add_pdf_page_header: bool,
        compact: bool,
        short_heading: Optional[ShortHeadingSettings] = None,
        sentence_boundary_level: int = DEFAULT_SENTENCE_BOUNDARY_LEVEL,
        custom_title_pattern: Optional[str] = None,
) -> str:
    """
    Reflow extracted text into CJK-friendly paragraphs.

    Parameters
    ----------
    text:
        Extracted text (already Unicode), line oriented.
    add_pdf_page_header:
        If True, page markers like "=== [Page 1/20] ===" are kept as hard
        boundaries and blank lines always end a paragraph. If False, page
        markers are dropped and blank lines only end a paragraph after
        clause/sentence punctuation.
    compact:
        If True, join segments with single newlines; otherwise join
        paragraphs with blank lines (double newlines).
    short_heading:
        Short heading settings; defaults to ShortHeadingSettings().
    sentence_boundary_level:
        1 (very lenient) .. 3 (strict), default 2.
    custom_title_pattern:
        Optional regex for extra title headings (same tier as built-in).

    Returns
    -------
    str:
        Reflowed text; empty string for empty/whitespace-only input.
    """
    options = ReflowOptions(
        add_pdf_page_header=add_pdf_page_header,
        compact=compact,
        short_heading=short_heading if short_heading is not None else DEFAULT_SHORT_HEADING,
        sentence_boundary_level=sentence_boundary_level,
        custom_title_pattern=custom_title_pattern,
    )
    return reflow_text(text, options)


def reflow_text(text: str, options: ReflowOptions) -> str:
    return join_segments(segment_paragraphs(text, options), options.compact)
