import json
from pathlib import Path

import pytest

pytest.importorskip("opencc_purepy")

from cjk_reflow.cli import build_parser, main, resolve_options  # noqa: E402
from cjk_reflow.settings import PdfSettings  # noqa: E402


def write(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8")
    return path


def test_reflow_text_file_to_output(tmp_path: Path) -> None:
    src = write(tmp_path / "in.txt", "第一章\n他走進來，\n然後坐下。\n")
    out = tmp_path / "out.txt"

    assert main([str(src), "-o", str(out)]) == 0
    assert out.read_text(encoding="utf-8") == "第一章\n\n他走進來，然後坐下。"


def test_compact_to_stdout(tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
    src = write(tmp_path / "in.txt", "第一章\n他走進來，\n然後坐下。\n")

    assert main([str(src), "--compact"]) == 0
    assert capsys.readouterr().out == "第一章\n他走進來，然後坐下。\n"


def test_no_reflow_and_dedupe(tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
    src = write(tmp_path / "in.txt", "頁眉\n頁眉\n正文")

    assert main([str(src), "--no-reflow", "--dedupe-lines"]) == 0
    assert capsys.readouterr().out == "頁眉\n正文\n"


def test_convert_with_opencc(tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
    src = write(tmp_path / "in.txt", "汉字。")

    assert main([str(src), "--convert", "s2t"]) == 0
    assert capsys.readouterr().out == "漢字。\n"


def test_missing_input_exits_with_error(tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
    assert main([str(tmp_path / "missing.txt")]) == 1
    assert "missing.txt" in capsys.readouterr().err


def test_bad_settings_file_exits_with_error(tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
    src = write(tmp_path / "in.txt", "正文。")
    bad = write(tmp_path / "settings.json", "{oops")

    assert main([str(src), "--settings", str(bad)]) == 1
    assert "Invalid settings file" in capsys.readouterr().err


def test_command_line_overrides_settings(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"pdfOptions": {"compactPdfText": 1, "sentenceBoundaryLevel": 3}}), encoding="utf-8")
    settings = PdfSettings.load(path)

    args = build_parser().parse_args(["in.txt", "--no-compact", "--max-len", "12", "--title-regex", "^Part"])
    options = resolve_options(args, settings)

    assert not options.compact
    assert options.sentence_boundary_level == 3
    assert options.short_heading.max_len == 12
    assert options.custom_title_pattern == "^Part"


def test_pdf_input(make_pdf, capsys: pytest.CaptureFixture) -> None:
    path = make_pdf(["Hello world."])

    assert main([str(path), "--page-header", "--compact"]) == 0
    assert capsys.readouterr().out == "=== [Page 1/1] ===\nHello world.\n"


def test_wrongly_typed_settings_exit_with_error(tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
    src = write(tmp_path / "in.txt", "正文。")
    bad = write(tmp_path / "settings.json", json.dumps({"pdfOptions": {"shortHeadingSettings": [1]}}))

    assert main([str(src), "--settings", str(bad)]) == 1
    assert "shortHeadingSettings" in capsys.readouterr().err
