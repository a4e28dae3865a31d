from __future__ import annotations

"""
line_classifier.py

Ordered, first-match-wins classification of a single input line.

Order (each step short-circuits):
    1. visual divider
    2. style-repeat collapse (rewrites the line, does not classify)
    3. empty
    4. page marker              "=== [Page X/Y] ==="
    5. custom / built-in title heading
    6. metadata  key:value
    7. short heading
    8. bracket-wrapped structural line
    9. prose
"""

import enum
import logging
import re
from dataclasses import dataclass
from functools import lru_cache
from typing import List, NamedTuple, Optional, Pattern, Sequence

from .boundaries import ends_with_cjk_bracket_boundary
from .cjk_text import (
    is_all_ascii,
    is_all_ascii_digits,
    is_all_cjk_no_whitespace,
    is_mixed_cjk_ascii,
    strip_all_left_indent_for_probe,
    strip_half_width_indent_keep_fullwidth,
)
from .punct_sets import (
    contains_any_comma_like,
    contains_strong_sentence_end,
    has_unclosed_bracket,
    is_clause_or_end_punct,
    is_colon_like,
    is_dialog_opener,
    is_metadata_separator,
    is_visual_divider_line,
)

logger = logging.getLogger(__name__)

# =============================================================================
# Patterns / vocabularies
# =============================================================================

# Chapter / heading patterns (第N章/卷/节/部/回, 前言/序章/楔子/终章/尾声/后记/番外)
TITLE_HEADING_REGEX = re.compile(
    r"""
    ^(?!.*[,，])(?=.{0,50}$)
    (?:
        前言|序章|楔子|终章|終章|尾声|尾聲|后记|後記|番外.{0,15}
      | .{0,10}?第.{0,5}?[章节節部卷回](?:$|[^分合的])
      | [卷章][一二三四五六七八九十](?:$|.{0,20}?)
    )
    """,
    re.VERBOSE,
)

METADATA_MAX_LINE_LEN = 30

METADATA_KEYS = frozenset({
    # Title / author / publishing
    "書名", "书名",
    "作者",
    "原著",
    "譯者", "译者",
    "校訂", "校订",
    "出版社",
    "出版時間", "出版时间",
    "出版日期",

    # Copyright / license
    "版權", "版权",
    "版權頁", "版权页",
    "版權信息", "版权信息",

    # Editor / pricing
    "責任編輯", "责任编辑",
    "編輯", "编辑",
    "責編", "责编",
    "定價", "定价",

    # Descriptions / forewords
    "簡介", "简介",
    "前言",
    "序章",
    "終章", "终章",
    "尾聲", "尾声",
    "後記", "后记",

    # Digital publishing
    "品牌方",
    "出品方",
    "授權方", "授权方",
    "電子版權", "数字版权",
    "掃描", "扫描",
    "發行", "发行",
    "OCR",

    # CIP / cataloging
    "CIP",
    "在版編目", "在版编目",
    "分類號", "分类号",
    "主題詞", "主题词",
    "類型", "类型",
    "標簽", "标签",
    "内容標簽", "内容标签",
    "系列",

    # Publishing cycle
    "發行日", "发行日",
    "初版",

    "ISBN",
})

MAX_METADATA_KEY_LEN = max(len(k) for k in METADATA_KEYS)

PAGE_MARKER_PREFIX = "=== "
PAGE_MARKER_SUFFIX = "==="


# =============================================================================
# Types
# =============================================================================

class LineKind(enum.Enum):
    EMPTY = "empty"
    DIVIDER = "divider"
    PAGE_MARKER = "page_marker"
    TITLE_HEADING = "title_heading"
    CUSTOM_TITLE_HEADING = "custom_title_heading"
    METADATA = "metadata"
    SHORT_HEADING = "short_heading"
    BRACKET_STRUCTURAL = "bracket_structural"
    PROSE = "prose"

    @property
    def is_hard_structural(self) -> bool:
        """Kinds that always end the current paragraph and stand alone."""
        return self in _HARD_STRUCTURAL_KINDS


_HARD_STRUCTURAL_KINDS = frozenset({
    LineKind.DIVIDER,
    LineKind.PAGE_MARKER,
    LineKind.TITLE_HEADING,
    LineKind.CUSTOM_TITLE_HEADING,
    LineKind.METADATA,
})


@dataclass(frozen=True)
class ShortHeadingSettings:
    """
    Per-run short heading configuration.

    max_len is clamped to 3..30. ASCII-only or mixed CJK/ASCII candidates get
    twice that (clamped 10..30) when their pattern class is enabled.
    """
    max_len: int = 8
    all_cjk: bool = True
    all_ascii: bool = True
    all_ascii_digits: bool = True
    mixed_cjk_ascii: bool = False
    custom_title_pattern: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "max_len", max(3, min(30, int(self.max_len))))

    @property
    def custom_title_regex(self) -> Optional[Pattern[str]]:
        return compile_custom_title_pattern(self.custom_title_pattern)


DEFAULT_SHORT_HEADING = ShortHeadingSettings()


@lru_cache(maxsize=32)
def compile_custom_title_pattern(pattern: Optional[str]) -> Optional[Pattern[str]]:
    """Compile a user title pattern; blank or invalid patterns yield None."""
    if not pattern or not pattern.strip():
        return None
    try:
        return re.compile(pattern)
    except re.error as e:
        logger.warning("Ignoring invalid custom title pattern %r: %s", pattern, e)
        return None


@dataclass(frozen=True)
class Line:
    """
    One input row in its three forms.

    stripped: trailing whitespace and half-width indent removed, full-width
              ideographic indent kept (this is what gets emitted)
    probe:    all leading indentation removed, classification only
    """
    raw: str
    stripped: str
    probe: str

    @classmethod
    def from_raw(cls, raw: str) -> "Line":
        stripped = strip_half_width_indent_keep_fullwidth(raw.rstrip())
        return cls(raw, stripped, strip_all_left_indent_for_probe(stripped))

    def with_stripped(self, stripped: str) -> "Line":
        if stripped == self.stripped:
            return self
        return Line(self.raw, stripped, strip_all_left_indent_for_probe(stripped))


class ClassifiedLine(NamedTuple):
    kind: LineKind
    line: Line


def split_lines(text: str) -> List[Line]:
    """Normalize \\r\\n / \\r to \\n and split into Line records."""
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    return [Line.from_raw(raw) for raw in text.split("\n")]


# =============================================================================
# Style-layer repeat collapse
# =============================================================================

_TOKEN_SPLIT_RE = re.compile(r"[ \t]+")


def collapse_repeated_segments(line: str) -> str:
    """
    Collapse repeated word sequences and repeated tokens (styled PDF headings).

    Tokens are split on ASCII space / tab only, so a full-width indent stays
    attached to the first token. Lines without repeats are returned untouched.
    """
    if not line:
        return line
    parts = [p for p in _TOKEN_SPLIT_RE.split(line) if p]
    if not parts:
        return line
    collapsed = collapse_repeated_word_sequences(parts)
    collapsed = [collapse_repeated_token(tok) for tok in collapsed]
    if collapsed == parts:
        return line
    return " ".join(collapsed)


def collapse_repeated_word_sequences(parts: Sequence[str]) -> List[str]:
    """
    Collapse the first phrase (1..8 tokens) repeated 3+ times consecutively,
    keeping prefix and suffix tokens.
    """
    min_repeats = 3
    max_phrase_len = 8

    n = len(parts)
    if n < min_repeats:
        return list(parts)

    for start in range(n):
        for phrase_len in range(1, max_phrase_len + 1):
            if start + phrase_len > n:
                break

            phrase = list(parts[start:start + phrase_len])
            count = 1
            while True:
                next_start = start + count * phrase_len
                if next_start + phrase_len > n:
                    break
                if list(parts[next_start:next_start + phrase_len]) != phrase:
                    break
                count += 1

            if count >= min_repeats:
                tail_start = start + count * phrase_len
                return list(parts[:start]) + phrase + list(parts[tail_start:])

    return list(parts)


def collapse_repeated_token(token: str) -> str:
    """
    Collapse a token made of one unit (4..10 chars) repeated 3+ times, e.g.
    'AbcdAbcdAbcd' → 'Abcd'.

    Units of a single repeated character (哈哈哈哈…) are natural text and
    are left alone.
    """
    length = len(token)
    if length < 4 or length > 200:
        return token

    for unit_len in range(4, 11):
        if unit_len > length // 3:
            break
        if length % unit_len != 0:
            continue

        unit = token[:unit_len]
        if len(set(unit)) == 1:
            continue

        if unit * (length // unit_len) == token:
            return unit

    return token


# =============================================================================
# Individual rules
# =============================================================================

def is_page_marker(s: str) -> bool:
    s = s.strip()
    return s.startswith(PAGE_MARKER_PREFIX) and s.endswith(PAGE_MARKER_SUFFIX) and len(s) > 6


def is_title_heading(probe: str) -> bool:
    return TITLE_HEADING_REGEX.match(probe) is not None


def is_metadata_line(line: str) -> bool:
    """
    Short `key<sep>value` line whose key is a known publishing / CIP term.
    Caller should pass the probe (left indent removed).
    """
    if not line or not line.strip():
        return False

    s = line.strip()
    if len(s) > METADATA_MAX_LINE_LEN:
        return False

    # earliest separator
    idx = -1
    for i, ch in enumerate(s):
        if is_metadata_separator(ch):
            idx = i
            break

    if idx <= 0 or idx > MAX_METADATA_KEY_LEN:
        return False

    key = s[:idx].strip()
    if key not in METADATA_KEYS:
        return False

    # Skip whitespace after separator
    n = len(s)
    j = idx + 1
    while j < n and s[j].isspace():
        j += 1
    if j >= n:
        return False

    # Reject dialog opener right after "Key: "
    return not is_dialog_opener(s[j])


def is_heading_like(s: str, settings: ShortHeadingSettings = DEFAULT_SHORT_HEADING) -> bool:
    """
    Short heading heuristic (buffer context is handled by the engine).

    Absolute rejections come first: page markers, unbalanced brackets,
    clause/sentence punctuation at the end, comma-like separators, over-length
    and embedded strong enders. A trailing colon on an all-CJK prefix
    ("物品准备：") is accepted outright.
    """
    if s is None:
        return False

    s = s.strip()
    if len(s) < 2:
        return False

    if is_page_marker(s):
        return False

    if has_unclosed_bracket(s):
        return False

    last = s[-1]

    # Item-title like: "物品准备："
    if is_colon_like(last) and is_all_cjk_no_whitespace(s[:-1]):
        return True

    if is_clause_or_end_punct(last):
        return False

    if contains_any_comma_like(s):
        return False

    effective_max = settings.max_len
    all_ascii = is_all_ascii(s)
    mixed = is_mixed_cjk_ascii(s)
    if (settings.all_ascii and all_ascii) or (settings.mixed_cjk_ascii and mixed):
        effective_max = max(10, min(30, settings.max_len * 2))

    if len(s) > effective_max:
        return False

    if contains_strong_sentence_end(s):
        return False

    return ((settings.all_ascii and all_ascii)
            or (settings.all_cjk and is_all_cjk_no_whitespace(s))
            or (settings.all_ascii_digits and is_all_ascii_digits(s))
            or (settings.mixed_cjk_ascii and mixed))


# =============================================================================
# Ordered classification
# =============================================================================

def classify_line(
        line: Line,
        settings: ShortHeadingSettings = DEFAULT_SHORT_HEADING,
        custom_title: Optional[Pattern[str]] = None,
) -> ClassifiedLine:
    """
    Assign exactly one LineKind. The returned Line may differ from the input
    when style-repeat collapse rewrote it.
    """
    if is_visual_divider_line(line.probe):
        return ClassifiedLine(LineKind.DIVIDER, line)

    line = line.with_stripped(collapse_repeated_segments(line.stripped))
    probe = line.probe

    if not line.stripped.strip():
        return ClassifiedLine(LineKind.EMPTY, line)

    if is_page_marker(probe):
        return ClassifiedLine(LineKind.PAGE_MARKER, line)

    if custom_title is None:
        custom_title = settings.custom_title_regex
    if custom_title is not None and custom_title.search(probe):
        return ClassifiedLine(LineKind.CUSTOM_TITLE_HEADING, line)

    if is_title_heading(probe):
        return ClassifiedLine(LineKind.TITLE_HEADING, line)

    if is_metadata_line(probe):
        return ClassifiedLine(LineKind.METADATA, line)

    if is_heading_like(probe, settings):
        return ClassifiedLine(LineKind.SHORT_HEADING, line)

    if ends_with_cjk_bracket_boundary(probe):
        return ClassifiedLine(LineKind.BRACKET_STRUCTURAL, line)

    return ClassifiedLine(LineKind.PROSE, line)
