from cjk_reflow.cjk_text import (
    has_paragraph_indent,
    is_all_ascii,
    is_all_ascii_digits,
    is_all_cjk_ignoring_whitespace,
    is_all_cjk_no_whitespace,
    is_cjk,
    is_mixed_cjk_ascii,
    is_mostly_cjk,
    strip_all_left_indent_for_probe,
    strip_half_width_indent_keep_fullwidth,
)


def test_is_cjk_covers_bmp_ideograph_blocks() -> None:
    assert is_cjk("中")
    assert is_cjk("㐀")  # Extension A
    assert is_cjk("豈")  # Compatibility Ideographs
    assert not is_cjk("A")
    assert not is_cjk("。")
    assert not is_cjk("")
    assert not is_cjk("中文")


def test_is_mostly_cjk_ignores_digits_and_punctuation() -> None:
    assert is_mostly_cjk("第12章。")
    assert is_mostly_cjk("中文 abc 中文")
    assert not is_mostly_cjk("hello 中")
    assert not is_mostly_cjk("12345")
    assert not is_mostly_cjk("")


def test_ascii_and_digit_classes() -> None:
    assert is_all_ascii("Chapter 1")
    assert not is_all_ascii("")
    assert not is_all_ascii("Chapter 一")

    assert is_all_ascii_digits("2024")
    assert is_all_ascii_digits("１２ 3")
    assert not is_all_ascii_digits("   ")
    assert not is_all_ascii_digits("12a")


def test_mixed_cjk_ascii_requires_both_sides() -> None:
    assert is_mixed_cjk_ascii("第3集")
    assert is_mixed_cjk_ascii("Vol.2 上")
    assert not is_mixed_cjk_ascii("上下")
    assert not is_mixed_cjk_ascii("ABC")
    assert not is_mixed_cjk_ascii("第！3集")


def test_all_cjk_whitespace_variants() -> None:
    assert is_all_cjk_no_whitespace("雪夜")
    assert not is_all_cjk_no_whitespace("雪 夜")
    assert is_all_cjk_ignoring_whitespace("雪 夜")
    assert not is_all_cjk_ignoring_whitespace("雪夜：")
    assert not is_all_cjk_ignoring_whitespace("   ")


def test_indent_forms() -> None:
    assert strip_half_width_indent_keep_fullwidth("  \t　　正文") == "　　正文"
    assert strip_all_left_indent_for_probe("　 　正文") == "正文"
    assert has_paragraph_indent("　　正文")
    assert has_paragraph_indent("    text")
    assert not has_paragraph_indent(" text")
