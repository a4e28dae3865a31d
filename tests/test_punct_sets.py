from cjk_reflow.dialog_state import DialogState
from cjk_reflow.punct_sets import (
    begins_with_dialog_opener,
    ends_with_colon_like,
    has_unclosed_bracket,
    is_bracket_type_balanced,
    is_clause_or_end_punct,
    is_visual_divider_line,
    last_non_whitespace,
)


def test_has_unclosed_bracket_is_strict() -> None:
    assert not has_unclosed_bracket("")
    assert not has_unclosed_bracket("沒有括號")
    assert not has_unclosed_bracket("（注：見上文）")
    assert has_unclosed_bracket("（注：見上文")
    assert has_unclosed_bracket("見上文）")  # stray closer
    assert has_unclosed_bracket("（見上文]")  # mismatch
    assert not has_unclosed_bracket("《書名》與【標籤】")


def test_bracket_type_balance() -> None:
    assert is_bracket_type_balanced("（a）（b）", "（")
    assert not is_bracket_type_balanced("）a（", "（")
    assert not is_bracket_type_balanced("（（a）", "（")
    assert is_bracket_type_balanced("anything", "?")


def test_visual_divider_lines() -> None:
    assert is_visual_divider_line("────────")
    assert is_visual_divider_line("- - -")
    assert is_visual_divider_line("＊＊＊")
    assert is_visual_divider_line("☆☆☆☆")
    assert not is_visual_divider_line("--")
    assert not is_visual_divider_line("---a")
    assert not is_visual_divider_line("")


def test_punctuation_predicates() -> None:
    assert is_clause_or_end_punct("。")
    assert is_clause_or_end_punct("」")
    assert not is_clause_or_end_punct("，")
    assert ends_with_colon_like("他說：  ")
    assert begins_with_dialog_opener("  「你好」")
    assert not begins_with_dialog_opener("你好")
    assert last_non_whitespace("abc \t") == "c"
    assert last_non_whitespace("   ") is None


def test_dialog_state_counts_per_family() -> None:
    state = DialogState()
    state.update("「你好，『朋友』")
    assert state.is_unclosed

    state.update("。」")
    assert not state.is_unclosed


def test_dialog_state_never_goes_negative() -> None:
    state = DialogState()
    state.update("」」")
    assert not state.is_unclosed

    state.update("「")
    assert state.is_unclosed

    state.reset()
    assert not state.is_unclosed
