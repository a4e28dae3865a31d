from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import List, Optional

from opencc_purepy import OpenCC

from .pdf_helper import build_progress_bar, load_pdf_text, sanitize_invisible
from .reflow_helper import ReflowOptions, collapse_consecutive_duplicate_lines, reflow_text
from .settings import PdfSettings, SettingsError

logger = logging.getLogger(__name__)

OPENCC_CONFIGS = (
    "s2t", "t2s", "s2tw", "tw2s", "s2twp", "tw2sp",
    "s2hk", "hk2s", "t2tw", "tw2t", "t2twp", "tw2tp",
    "t2hk", "hk2t", "t2jp", "jp2t",
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cjk-reflow",
        description="Reflow CJK text (plain text or PDF) into paragraphs.",
    )
    parser.add_argument("input", type=Path, help="Input .txt or .pdf file")
    parser.add_argument("-o", "--output", type=Path, help="Write result to this file instead of stdout")
    parser.add_argument("--settings", type=Path, help="JSON settings file (pdfOptions)")

    group = parser.add_argument_group("reflow")
    group.add_argument("--page-header", action=argparse.BooleanOptionalAction, default=None,
                       help="Keep '=== [Page X/Y] ===' markers (PDF input)")
    group.add_argument("--compact", action=argparse.BooleanOptionalAction, default=None,
                       help="Join paragraphs with single newlines instead of blank lines")
    group.add_argument("--level", type=int, choices=(1, 2, 3), default=None,
                       help="Sentence boundary level: 1 lenient, 2 default, 3 strict")
    group.add_argument("--max-len", type=int, default=None, help="Short heading max length (3-30)")
    group.add_argument("--title-regex", default=None, help="Extra title heading regex")
    group.add_argument("--no-reflow", action="store_true", help="Output extracted text as is")
    group.add_argument("--dedupe-lines", action="store_true",
                       help="Collapse consecutive duplicate lines before reflow")

    pdf = parser.add_argument_group("pdf")
    pdf.add_argument("--overlay", action="store_true",
                     help="Drop watermark / overlay text objects while extracting")
    pdf.add_argument("--progress", action="store_true", help="Show extraction progress on stderr")

    conv = parser.add_argument_group("conversion")
    conv.add_argument("--convert", choices=OPENCC_CONFIGS, default=None,
                      help="Convert the result with OpenCC (e.g. s2t, t2s)")
    conv.add_argument("--punct", action="store_true", help="Also convert punctuation")

    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def resolve_options(args: argparse.Namespace, settings: PdfSettings) -> ReflowOptions:
    """File settings first, then command line overrides."""
    options = settings.to_reflow_options()
    sh = options.short_heading

    if args.max_len is not None:
        sh = replace(sh, max_len=args.max_len)
    if args.title_regex is not None:
        sh = replace(sh, custom_title_pattern=args.title_regex)

    return replace(
        options,
        add_pdf_page_header=options.add_pdf_page_header if args.page_header is None else args.page_header,
        compact=options.compact if args.compact is None else args.compact,
        sentence_boundary_level=options.sentence_boundary_level if args.level is None else args.level,
        short_heading=sh,
        custom_title_pattern=sh.custom_title_pattern,
    )


def _print_progress(percent: int) -> None:
    bar = build_progress_bar(percent, 100, width=20)
    print(f"\r{bar} {percent}%", end="", file=sys.stderr, flush=True)


def read_input(path: Path, options: ReflowOptions, overlay: bool, progress: bool) -> str:
    if path.suffix.lower() == ".pdf":
        result = load_pdf_text(
            str(path),
            add_pdf_page_header=options.add_pdf_page_header,
            on_progress=_print_progress if progress else None,
            filter_overlays=overlay,
        )
        if progress:
            print(file=sys.stderr)
        if not result.success:
            raise RuntimeError(result.message)
        return result.text

    if not path.is_file():
        raise FileNotFoundError(f"File not found: {path}")
    return sanitize_invisible(path.read_text(encoding="utf-8-sig"))


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        settings = PdfSettings.load(args.settings) if args.settings else PdfSettings()
        options = resolve_options(args, settings)

        text = read_input(args.input, options, args.overlay, args.progress)

        if args.dedupe_lines:
            text = collapse_consecutive_duplicate_lines(text)

        is_pdf = args.input.suffix.lower() == ".pdf"
        reflow = not args.no_reflow and (settings.auto_reflow_pdf_text or not is_pdf)
        if reflow:
            text = reflow_text(text, options)

        if args.convert:
            converter = OpenCC(args.convert)
            text = converter.convert(text, args.punct)

        if args.output:
            args.output.write_text(text, encoding="utf-8")
            logger.info("Wrote %s", args.output)
        else:
            sys.stdout.write(text)
            if text and not text.endswith("\n"):
                sys.stdout.write("\n")

    except (OSError, RuntimeError, SettingsError) as e:
        print(f"cjk-reflow: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
