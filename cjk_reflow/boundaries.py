from __future__ import annotations

"""
boundaries.py

Sentence / bracket boundary detection on a paragraph buffer.

Sentence boundary levels
------------------------
3 (strict)       strong enders only, plus OCR ASCII '.' / ':' standing in for
                 a CJK terminator at the end of a mostly-CJK line.
2 (default)      adds closer-after-strong-end (“。” / 。」 / 。）), OCR dot
                 before closers (.」), full-width colon in a mostly-CJK
                 line, and ellipsis (… or OCR "...").
1 (very lenient) also treats bare ；：;: as boundaries.
"""

from .cjk_text import contains_any_cjk, is_cjk, is_mostly_cjk
from .punct_sets import (
    find_last_non_whitespace_index,
    find_prev_non_whitespace_index,
    is_bracket_closer,
    is_bracket_type_balanced,
    is_dialog_closer,
    is_matching_bracket,
    is_soft_clause_end,
    is_strong_sentence_end,
)

MIN_SENTENCE_BOUNDARY_LEVEL = 1
MAX_SENTENCE_BOUNDARY_LEVEL = 3
DEFAULT_SENTENCE_BOUNDARY_LEVEL = 2

_ALLOWED_POSTFIX_CLOSERS = {")", "）"}


def clamp_sentence_boundary_level(level: int) -> int:
    return max(MIN_SENTENCE_BOUNDARY_LEVEL, min(MAX_SENTENCE_BOUNDARY_LEVEL, int(level)))


def is_allowed_postfix_closer(ch: str) -> bool:
    return ch in _ALLOWED_POSTFIX_CLOSERS


# -------------------------------
# Sentence Boundary start
# -------------------------------

def ends_with_sentence_boundary(s: str, level: int = DEFAULT_SENTENCE_BOUNDARY_LEVEL) -> bool:
    if not s or not s.strip():
        return False

    level = clamp_sentence_boundary_level(level)

    last_i = find_last_non_whitespace_index(s)
    if last_i is None:
        return False
    last = s[last_i]

    # ---- STRICT rules (level >= 3) ----

    # 1) Strong sentence enders.
    if is_strong_sentence_end(last):
        return True

    # 2) OCR '.' / ':' at line end (mostly-CJK).
    if last in (".", ":") and is_ocr_cjk_ascii_punct_at_line_end(s, last_i):
        return True

    if level >= 3:
        return False

    # ---- LENIENT rules (level == 2) ----

    # 3) Quote closers + allowed postfix closer after strong end,
    #    plus OCR artifact `.”` / `.」` / `.）`.
    prev_i = find_prev_non_whitespace_index(s, last_i)
    if prev_i is not None and (is_dialog_closer(last) or is_allowed_postfix_closer(last)):
        prev = s[prev_i]
        if is_strong_sentence_end(prev):
            return True
        if prev == "." and is_ocr_cjk_ascii_punct_before_closers(s, prev_i):
            return True

    # 4) Full-width colon as a weak boundary ("他说：" then dialog next line)
    if last == "：" and is_mostly_cjk(s):
        return True

    # 5) Ellipsis as weak boundary.
    if ends_with_ellipsis(s):
        return True

    if level >= 2:
        return False

    # ---- VERY LENIENT rules (level == 1) ----
    return is_soft_clause_end(last)


def is_ocr_cjk_ascii_punct_at_line_end(s: str, punct_index: int) -> bool:
    """
    Strict OCR: punct itself is at end-of-line (only whitespace after it),
    and preceded by CJK in a mostly-CJK line.
    """
    if punct_index <= 0:
        return False
    if not is_at_line_end_ignoring_whitespace(s, punct_index):
        return False
    return is_cjk(s[punct_index - 1]) and is_mostly_cjk(s)


def is_ocr_cjk_ascii_punct_before_closers(s: str, punct_index: int) -> bool:
    """
    Relaxed OCR: after punct, allow only whitespace and closers (quote/bracket).
    """
    if punct_index <= 0:
        return False
    if not is_at_end_allowing_closers(s, punct_index):
        return False

    prev_i = find_prev_non_whitespace_index(s, punct_index)
    if prev_i is None:
        return False
    return is_cjk(s[prev_i]) and is_mostly_cjk(s)


def is_at_line_end_ignoring_whitespace(s: str, index: int) -> bool:
    return not s[index + 1:].strip()


def is_at_end_allowing_closers(s: str, index: int) -> bool:
    for ch in s[index + 1:]:
        if ch.isspace() or is_dialog_closer(ch) or is_bracket_closer(ch):
            continue
        return False
    return True


def ends_with_ellipsis(s: str) -> bool:
    """Unicode '…' or OCR '...' at the end of a mostly-CJK span."""
    if not s or not is_mostly_cjk(s):
        return False
    t = s.rstrip()
    return t.endswith("…") or t.endswith("...")


# -------------------------------
# Sentence Boundary end
# -------------------------------


# ------ Bracket Boundary start ------

def ends_with_cjk_bracket_boundary(s: str) -> bool:
    """
    True if the trimmed span is exactly one balanced CJK-style bracket unit,
    e.g. （完）, 【番外】, 《後記》.
    """
    t = s.strip()
    if len(t) < 2:
        return False

    open_ch = t[0]
    close_ch = t[-1]

    # 1) Must be one of our known pairs.
    if not is_matching_bracket(open_ch, close_ch):
        return False

    inner = t[1:-1].strip()
    if not inner:
        return False

    # 2) Must be mostly CJK (reject "(test)", "[1.2]" etc.)
    if not is_mostly_cjk(inner):
        return False

    # ASCII bracket pairs are suspicious → require at least one CJK inside
    if open_ch in ("(", "[") and not contains_any_cjk(inner):
        return False

    # 3) This bracket type must be balanced inside the text, and the outer
    #    opener must be the one closed by the final character.
    return is_bracket_type_balanced(t, open_ch) and _outer_pair_spans_whole(t, open_ch, close_ch)


def _outer_pair_spans_whole(t: str, open_ch: str, close_ch: str) -> bool:
    depth = 0
    last = len(t) - 1
    for i, ch in enumerate(t):
        if ch == open_ch:
            depth += 1
        elif ch == close_ch:
            depth -= 1
            if depth == 0 and i != last:
                return False
    return depth == 0

# ------ Bracket Boundary end ------
