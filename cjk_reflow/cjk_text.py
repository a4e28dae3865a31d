from __future__ import annotations

"""
cjk_text.py

Character-level predicates used by the reflow heuristics.

All predicates are BMP focused and total: unexpected code points simply
answer "not CJK / not recognized".
"""

import re

IDEOGRAPHIC_SPACE = "　"

# Paragraph indentation (raw line based)
_INDENT_RE = re.compile(r"^[\s　]{2,}")

_MIXED_NEUTRAL_ASCII = (" ", "-", "/", ":", ".")


# =============================================================================
# Single character classification
# =============================================================================

def is_cjk(ch: str) -> bool:
    """
    Minimal CJK checker (BMP focused).
    Designed for reflow heuristics, not full Unicode linguistics.
    """
    if len(ch) != 1:
        return False
    c = ord(ch)
    if 0x3400 <= c <= 0x4DBF:  # Extension A
        return True
    if 0x4E00 <= c <= 0x9FFF:  # Unified Ideographs
        return True
    return 0xF900 <= c <= 0xFAFF  # Compatibility Ideographs


def is_digit_ascii_or_fullwidth(ch: str) -> bool:
    return "0" <= ch <= "9" or "０" <= ch <= "９"


def is_ascii_letter(ch: str) -> bool:
    return ("A" <= ch <= "Z") or ("a" <= ch <= "z")


# =============================================================================
# Span classification
# =============================================================================

def contains_any_cjk(s: str) -> bool:
    return any(is_cjk(ch) for ch in s)


def is_all_ascii(s: str) -> bool:
    if not s:
        return False
    for ch in s:
        if ord(ch) > 0x7F:
            return False
    return True


def is_all_ascii_digits(s: str) -> bool:
    """
    - ASCII space ' ' is neutral (allowed)
    - ASCII digits '0'..'9' and FULLWIDTH digits '０'..'９' allowed
    - Anything else rejects
    - Must contain at least one digit
    """
    has_digit = False
    for ch in s:
        if ch == " ":
            continue
        if is_digit_ascii_or_fullwidth(ch):
            has_digit = True
            continue
        return False
    return has_digit


def is_mixed_cjk_ascii(s: str) -> bool:
    """
    True when the span holds both CJK and ASCII letters/digits and nothing else.

    - Neutral ASCII allowed but not counted: ' ', '-', '/', ':', '.'
    - ASCII letters/digits and FULLWIDTH digits count as ASCII content
    - Other ASCII punctuation, or any other non-CJK character, rejects
    """
    has_cjk = False
    has_ascii = False

    for ch in s:
        if ch in _MIXED_NEUTRAL_ASCII:
            continue

        o = ord(ch)
        if o <= 0x7F:
            if ("0" <= ch <= "9") or is_ascii_letter(ch):
                has_ascii = True
            else:
                return False
        elif "０" <= ch <= "９":
            has_ascii = True
        elif is_cjk(ch):
            has_cjk = True
        else:
            return False

        if has_cjk and has_ascii:
            return True

    return False


def is_mostly_cjk(s: str) -> bool:
    """
    CJK density check.

    Whitespace, digits (ASCII or full-width) and punctuation are neutral;
    only CJK ideographs and ASCII letters are counted.
    """
    cjk = 0
    ascii_ = 0

    for ch in s:
        if ch.isspace():
            continue
        if is_digit_ascii_or_fullwidth(ch):
            continue
        if is_cjk(ch):
            cjk += 1
        elif is_ascii_letter(ch):
            ascii_ += 1
        # else: symbols / punctuation → neutral

    return cjk > 0 and cjk >= ascii_


def is_all_cjk(s: str, allow_whitespace: bool = False) -> bool:
    """Return True if every non-whitespace character is CJK (and at least one is)."""
    seen = False
    for ch in s:
        if ch.isspace():
            if not allow_whitespace:
                return False
            continue
        seen = True
        if not is_cjk(ch):
            return False
    return seen


def is_all_cjk_no_whitespace(s: str) -> bool:
    return is_all_cjk(s, allow_whitespace=False)


def is_all_cjk_ignoring_whitespace(s: str) -> bool:
    return is_all_cjk(s, allow_whitespace=True)


# =============================================================================
# Indentation forms
# =============================================================================

def strip_half_width_indent_keep_fullwidth(s: str) -> str:
    """
    Strip ASCII/half-width indentation, but keep full-width IDEOGRAPHIC_SPACE.
    """
    i = 0
    n = len(s)

    while i < n:
        ch = s[i]
        if ch == IDEOGRAPHIC_SPACE:
            break
        if ch.isspace() and ord(ch) <= 0x7F:
            i += 1
            continue
        break

    return s[i:]


def strip_all_left_indent_for_probe(s: str) -> str:
    """
    Probe indentation stripping: remove both half- and full-width indents.
    """
    return s.lstrip(" \t\r\n　")


def has_paragraph_indent(raw_line: str) -> bool:
    """True if the raw line starts with at least two indentation characters."""
    return bool(_INDENT_RE.match(raw_line))
