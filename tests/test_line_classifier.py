import logging

import pytest

from cjk_reflow.line_classifier import (
    Line,
    LineKind,
    ShortHeadingSettings,
    classify_line,
    collapse_repeated_segments,
    collapse_repeated_token,
    compile_custom_title_pattern,
    is_heading_like,
    is_metadata_line,
    is_title_heading,
)


def kind_of(raw: str, settings: ShortHeadingSettings = ShortHeadingSettings(), custom=None) -> LineKind:
    return classify_line(Line.from_raw(raw), settings, custom).kind


@pytest.mark.parametrize("text", [
    "第一章", "第十二章 風起", "第3卷", "  第一回　初見", "序章", "楔子", "番外 雪夜", "卷三 江湖",
])
def test_title_headings(text: str) -> None:
    assert is_title_heading(text.strip())


@pytest.mark.parametrize("text", [
    "第一部分",          # 部 followed by 分
    "第一章，他來了",       # comma anywhere rejects
    "他在第三章的時候",      # 章 followed by 的
    "今天天氣",
])
def test_not_title_headings(text: str) -> None:
    assert not is_title_heading(text)


def test_metadata_lines() -> None:
    assert is_metadata_line("作者：金庸")
    assert is_metadata_line("ISBN: 978-7-02")
    assert is_metadata_line("出版社　人民文學出版社")
    assert not is_metadata_line("作者：「你好」")
    assert not is_metadata_line("作者：")
    assert not is_metadata_line("他說：你好")
    assert not is_metadata_line("作者：" + "很" * 40)


def test_heading_like_rules() -> None:
    assert is_heading_like("今天天氣")
    assert is_heading_like("Chapter One")
    assert is_heading_like("2024")
    assert is_heading_like("物品准备：")
    assert not is_heading_like("很好。")
    assert not is_heading_like("他來了，")
    assert not is_heading_like("一二三四五六七八九")  # over max_len 8
    assert not is_heading_like("（未完")
    assert not is_heading_like("第3集")  # mixed class disabled by default
    assert is_heading_like("第3集", ShortHeadingSettings(mixed_cjk_ascii=True))
    assert not is_heading_like("今天天氣", ShortHeadingSettings(all_cjk=False))


def test_short_heading_max_len_is_clamped() -> None:
    assert ShortHeadingSettings(max_len=1).max_len == 3
    assert ShortHeadingSettings(max_len=99).max_len == 30


def test_classification_order() -> None:
    assert kind_of("") is LineKind.EMPTY
    assert kind_of("　　 ") is LineKind.EMPTY
    assert kind_of("──────") is LineKind.DIVIDER
    assert kind_of("=== [Page 1/3] ===") is LineKind.PAGE_MARKER
    assert kind_of("第一章") is LineKind.TITLE_HEADING
    assert kind_of("作者：金庸") is LineKind.METADATA
    assert kind_of("雪夜") is LineKind.SHORT_HEADING
    assert kind_of("（完）") is LineKind.BRACKET_STRUCTURAL
    assert kind_of("他慢慢地走進了房間。") is LineKind.PROSE


def test_custom_title_pattern_is_structural() -> None:
    custom = compile_custom_title_pattern(r"^Part\s+\d+")
    assert kind_of("Part 3 The Return of Everything", custom=custom) is LineKind.CUSTOM_TITLE_HEADING

    settings = ShortHeadingSettings(custom_title_pattern=r"^【.+】$")
    assert kind_of("【正文開始啦】", settings) is LineKind.CUSTOM_TITLE_HEADING


def test_invalid_custom_pattern_is_ignored(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING):
        assert compile_custom_title_pattern("([unclosed") is None
    assert "invalid custom title pattern" in caplog.text
    assert compile_custom_title_pattern("   ") is None


def test_style_repeat_collapse() -> None:
    assert collapse_repeated_segments("標題 標題 標題 正文") == "標題 正文"
    assert collapse_repeated_token("AbcdAbcdAbcd") == "Abcd"
    assert collapse_repeated_token("哈哈哈哈哈哈哈哈哈哈哈哈") == "哈哈哈哈哈哈哈哈哈哈哈哈"
    assert collapse_repeated_segments("　　他說  你好") == "　　他說  你好"


def test_classify_returns_collapsed_line() -> None:
    classified = classify_line(Line.from_raw("序幕 序幕 序幕"))
    assert classified.line.stripped == "序幕"
    assert classified.kind is LineKind.SHORT_HEADING
