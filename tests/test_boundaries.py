import pytest

from cjk_reflow.boundaries import (
    clamp_sentence_boundary_level,
    ends_with_cjk_bracket_boundary,
    ends_with_ellipsis,
    ends_with_sentence_boundary,
)


@pytest.mark.parametrize("level", [1, 2, 3])
def test_strong_enders_at_every_level(level: int) -> None:
    assert ends_with_sentence_boundary("他走了。", level)
    assert ends_with_sentence_boundary("真的嗎？  ", level)
    assert not ends_with_sentence_boundary("他走了，", level)
    assert not ends_with_sentence_boundary("", level)


def test_ocr_ascii_period_after_cjk_is_strict_boundary() -> None:
    assert ends_with_sentence_boundary("這是一句話.", 3)
    assert not ends_with_sentence_boundary("This is English.", 3)
    assert not ends_with_sentence_boundary("This is English.", 2)


def test_closer_after_strong_end_needs_lenient_level() -> None:
    assert ends_with_sentence_boundary("「你好。」", 2)
    assert not ends_with_sentence_boundary("「你好。」", 3)
    assert ends_with_sentence_boundary("（完了。）", 2)
    assert ends_with_sentence_boundary("「你好.」", 2)


def test_colon_and_ellipsis_are_lenient_boundaries() -> None:
    assert ends_with_sentence_boundary("他說：", 2)
    assert not ends_with_sentence_boundary("他說：", 3)
    assert ends_with_sentence_boundary("很久以前……", 2)
    assert ends_with_sentence_boundary("很久以前...", 2)
    assert not ends_with_sentence_boundary("很久以前……", 3)


def test_semicolon_only_at_very_lenient_level() -> None:
    assert ends_with_sentence_boundary("他說；", 1)
    assert not ends_with_sentence_boundary("他說；", 2)


def test_level_is_clamped() -> None:
    assert clamp_sentence_boundary_level(0) == 1
    assert clamp_sentence_boundary_level(9) == 3
    assert ends_with_sentence_boundary("他說；", 0)


def test_ellipsis_requires_mostly_cjk() -> None:
    assert ends_with_ellipsis("等等…")
    assert not ends_with_ellipsis("wait...")


@pytest.mark.parametrize("text", ["（完）", "【番外】", "《後記》", "  〔附錄一〕  ", "(註釋)"])
def test_bracket_boundary_accepts_single_cjk_unit(text: str) -> None:
    assert ends_with_cjk_bracket_boundary(text)


@pytest.mark.parametrize("text", [
    "(test)",     # ASCII content
    "（完",        # unclosed
    "（（完）",     # unbalanced inside
    "（上）與（下）",  # outer opener closed early
    "（完】",       # mismatched pair
    "（）",
    "完",
])
def test_bracket_boundary_rejects_unbalanced_or_foreign(text: str) -> None:
    assert not ends_with_cjk_bracket_boundary(text)
