from __future__ import annotations

"""
punct_sets.py

Fixed punctuation / bracket tables and the small primitives built on them.
Nothing in here is configurable.
"""

from typing import Dict, List, Optional, Tuple

# =============================================================================
# Dialog quotes
# =============================================================================

DIALOG_OPEN_TO_CLOSE: Dict[str, str] = {
    "“": "”",
    "‘": "’",
    "「": "」",
    "『": "』",
    "﹁": "﹂",
    "﹃": "﹄",
}

DIALOG_CLOSE_TO_OPEN: Dict[str, str] = {
    v: k for k, v in DIALOG_OPEN_TO_CLOSE.items()
}

DIALOG_OPENERS = tuple(DIALOG_OPEN_TO_CLOSE.keys())
DIALOG_CLOSERS = tuple(DIALOG_CLOSE_TO_OPEN.keys())

_DIALOG_OPENER_SET = set(DIALOG_OPENERS)
_DIALOG_CLOSER_SET = set(DIALOG_CLOSERS)


def is_dialog_opener(ch: str) -> bool:
    """Return True if character is a dialog opening mark."""
    return ch in _DIALOG_OPENER_SET


def is_dialog_closer(ch: str) -> bool:
    """Return True if character is a dialog closing mark."""
    return ch in _DIALOG_CLOSER_SET


def begins_with_dialog_opener(s: str) -> bool:
    """True if the first non-whitespace character is a dialog opener."""
    for ch in s:
        if ch.isspace():
            continue
        return is_dialog_opener(ch)
    return False


# =============================================================================
# Sentence / clause punctuation
# =============================================================================

_STRONG_SENTENCE_END = {"。", "！", "？", "!", "?"}

# Tuple definition (readable)
CLAUSE_OR_END_PUNCT = (
    "。", "！", "？", "；", "：", "…", "—",
    "”", "」", "’", "』",
    "）", "】", "》", "〗", "〕", "］", "｝", "＞", "〉", ">",
    ".", ")", ":", "!", "?",
)

# Precompute for O(1) membership
_CLAUSE_OR_END_SET = set(CLAUSE_OR_END_PUNCT)

_COMMA_LIKE = {"，", ",", "、"}

_COLON_LIKE = {"：", ":"}

_SOFT_CLAUSE_END = {"；", "：", ";", ":"}


def is_strong_sentence_end(ch: str) -> bool:
    return ch in _STRONG_SENTENCE_END


def contains_strong_sentence_end(s: str) -> bool:
    return any(ch in _STRONG_SENTENCE_END for ch in s)


def is_clause_or_end_punct(ch: str) -> bool:
    """Return True if character is clause-ending or sentence-ending punctuation."""
    return ch in _CLAUSE_OR_END_SET


def is_comma_like(ch: str) -> bool:
    return ch in _COMMA_LIKE


def contains_any_comma_like(s: str) -> bool:
    return any(ch in _COMMA_LIKE for ch in s)


def is_colon_like(ch: str) -> bool:
    return ch in _COLON_LIKE


def ends_with_colon_like(s: str) -> bool:
    last = last_non_whitespace(s)
    return last is not None and last in _COLON_LIKE


def is_soft_clause_end(ch: str) -> bool:
    return ch in _SOFT_CLAUSE_END


# =============================================================================
# Brackets (open → close), single source of truth
# =============================================================================

BRACKET_PAIRS: Tuple[Tuple[str, str], ...] = (
    # Parentheses
    ("（", "）"),
    ("(", ")"),
    # Square brackets
    ("［", "］"),
    ("[", "]"),
    # Curly braces
    ("｛", "｝"),
    ("{", "}"),
    # Angle brackets
    ("＜", "＞"),
    ("<", ">"),
    ("〈", "〉"),
    # CJK brackets
    ("【", "】"),
    ("《", "》"),
    ("〔", "〕"),
    ("〖", "〗"),
)

_BRACKET_OPEN_TO_CLOSE = dict(BRACKET_PAIRS)
_BRACKET_CLOSE_TO_OPEN = {close: open_ for open_, close in BRACKET_PAIRS}


def is_bracket_closer(ch: str) -> bool:
    return ch in _BRACKET_CLOSE_TO_OPEN


def is_matching_bracket(open_ch: str, close_ch: str) -> bool:
    return _BRACKET_OPEN_TO_CLOSE.get(open_ch) == close_ch


def try_get_matching_closer(open_ch: str) -> Optional[str]:
    return _BRACKET_OPEN_TO_CLOSE.get(open_ch)


def has_unclosed_bracket(s: str) -> bool:
    """
    Strict bracket safety check.

    - Track openers on a stack.
    - A closer with no opener => unsafe => True.
    - An opener/closer mismatch => unsafe => True.
    - At end: True if any bracket was seen and the stack is not empty.
    """
    if not s:
        return False

    stack: List[str] = []
    seen_bracket = False

    for ch in s:
        if ch in _BRACKET_OPEN_TO_CLOSE:
            seen_bracket = True
            stack.append(ch)
            continue

        if ch in _BRACKET_CLOSE_TO_OPEN:
            seen_bracket = True

            # stray closer
            if not stack:
                return True

            open_ch = stack.pop()
            if not is_matching_bracket(open_ch, ch):
                return True

    return seen_bracket and bool(stack)


def is_bracket_type_balanced(s: str, open_ch: str) -> bool:
    """
    Depth check for a single bracket type; a closer before its opener fails.
    Unknown openers count as balanced.
    """
    close_ch = try_get_matching_closer(open_ch)
    if close_ch is None:
        return True

    depth = 0
    for ch in s:
        if ch == open_ch:
            depth += 1
        elif ch == close_ch:
            depth -= 1
            if depth < 0:
                return False

    return depth == 0


# =============================================================================
# Metadata separators / visual dividers
# =============================================================================

METADATA_SEPARATORS = ("：", ":", "　", "·", "・")

_METADATA_SEPARATOR_SET = set(METADATA_SEPARATORS)

_ASCII_DIVIDER_CHARS = set("-=_~～")
_STAR_DIVIDER_CHARS = set("*＊★☆·•")


def is_metadata_separator(ch: str) -> bool:
    return ch in _METADATA_SEPARATOR_SET


def is_visual_divider_line(s: str, min_visual_chars: int = 3) -> bool:
    """
    Detect visual divider lines (box drawing / dash / star separators).

    Whitespace is ignored. If True, the caller forces a paragraph break.
    """
    if not s:
        return False

    total = 0
    for ch in s:
        if ch.isspace():
            continue

        if not ("─" <= ch <= "╿"
                or ch in _ASCII_DIVIDER_CHARS
                or ch in _STAR_DIVIDER_CHARS):
            return False

        total += 1

    return total >= min_visual_chars


# =============================================================================
# Whitespace-aware positional helpers
# =============================================================================

def last_non_whitespace(s: str) -> Optional[str]:
    """Return the last non-whitespace character, or None."""
    i = len(s) - 1
    while i >= 0:
        ch = s[i]
        if not ch.isspace():
            return ch
        i -= 1
    return None


def find_last_non_whitespace_index(s: str) -> Optional[int]:
    i = len(s) - 1
    while i >= 0:
        if not s[i].isspace():
            return i
        i -= 1
    return None


def find_prev_non_whitespace_index(s: str, end_exclusive: int) -> Optional[int]:
    """
    Return the index of the previous non-whitespace char strictly before
    end_exclusive, or None.
    """
    i = min(end_exclusive, len(s)) - 1
    while i >= 0:
        if not s[i].isspace():
            return i
        i -= 1
    return None
