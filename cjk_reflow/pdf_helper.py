from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterator, List, Optional, Tuple

import pymupdf

from .overlay_filter import DEFAULT_BAND_STEP, DEFAULT_LINE_TOLERANCE, filter_page_objects

logger = logging.getLogger(__name__)

# =============================================================================
# Types
# =============================================================================

ProgressCallback = Callable[[int], None]  # percent 0..100
CancelCallback = Callable[[], bool]  # return True => cancel requested

PAGE_MARKER_TEMPLATE = "=== [Page {current}/{total}] ==="


@dataclass(frozen=True)
class PdfLoadResult:
    """Outcome of one extraction; the reflow only runs on success."""
    success: bool
    text: str = ""
    page_count: int = 0
    message: str = ""
    cancelled: bool = False


# =============================================================================
# Extraction helpers (top)
# =============================================================================

def get_progress_block(total_pages: int) -> int:
    """Adaptive progress update interval (pages between reports)."""
    if total_pages <= 20:
        return 1  # every page
    if total_pages <= 100:
        return 3
    if total_pages <= 300:
        return 5
    # large PDFs: ~5% intervals
    return max(1, total_pages // 20)


def build_progress_bar(current: int, total: int, width: int = 10) -> str:
    if total <= 0:
        return "[" + "🟨" * width + "]"
    filled = current * width // total
    filled = max(0, min(width, filled))
    return "[" + "🟩" * filled + "🟨" * (width - filled) + "]"


def page_marker(current: int, total: int) -> str:
    return PAGE_MARKER_TEMPLATE.format(current=current, total=total)


# -----------------------------------------------
# Remove Invisible Chars from extracted PDF text
# -----------------------------------------------

INVISIBLE_CHARS = (
    "\u200b",  # ZERO WIDTH SPACE
    "\ufeff",  # BOM / ZERO WIDTH NO-BREAK SPACE
    "\u200e",  # LEFT-TO-RIGHT MARK
    "\u200f",  # RIGHT-TO-LEFT MARK
    "\u202a",  # LRE
    "\u202b",  # RLE
    "\u202c",  # PDF
    "\u202d",  # LRO
    "\u202e",  # RLO
)


def sanitize_invisible(text: str) -> str:
    for ch in INVISIBLE_CHARS:
        text = text.replace(ch, "")
    return text


# ---------------------------------------------------------------------------
# Core PDF extraction (no Qt, reusable for batch)
# ---------------------------------------------------------------------------

def _open_document(filename: str):
    path = Path(filename)
    if not path.is_file():
        raise FileNotFoundError(f"PDF not found: {path}")

    try:
        return pymupdf.open(str(path))
    except Exception as e:  # noqa: BLE001
        raise RuntimeError(f"Failed to load PDF: {path} ({e})") from e


def _iter_pages(
        doc,
        on_progress: Optional[ProgressCallback],
        is_cancelled: Optional[CancelCallback],
) -> Iterator[Tuple[int, int, object]]:
    """Yield (index, total, page); cancellation is checked before each page."""
    total = doc.page_count
    block = get_progress_block(total)

    for i in range(total):
        if is_cancelled is not None and is_cancelled():
            logger.info("PDF extraction cancelled at page %d/%d", i + 1, total)
            return

        yield i, total, doc[i]

        current = i + 1
        if on_progress is not None and (current % block == 0 or current == 1 or current == total):
            on_progress(current * 100 // total)


def _append_page(parts: List[str], text: str, index: int, total: int, add_pdf_page_header: bool) -> None:
    if add_pdf_page_header:
        parts.append(f"\n\n{page_marker(index + 1, total)}\n\n")

    # blank pages still contribute a layout blank line
    if not text.strip():
        parts.append("\n")
        return

    parts.append(text)
    if not text.endswith("\n"):
        parts.append("\n")


def _plain_page_text(page) -> str:
    return page.get_text("text") or ""  # type: ignore


def _extract_pages(
        filename: str,
        page_text: Callable[[object], str],
        add_pdf_page_header: bool,
        on_progress: Optional[ProgressCallback],
        is_cancelled: Optional[CancelCallback],
) -> Tuple[str, int, bool]:
    """
    Shared page loop. Returns (text, page_count, stopped_early); the last
    flag is True only when pages were left unread.
    """
    doc = _open_document(filename)

    try:
        total = doc.page_count
        if total <= 0:
            return "", 0, False

        parts: List[str] = []
        pages_read = 0
        for i, total, page in _iter_pages(doc, on_progress, is_cancelled):
            _append_page(parts, sanitize_invisible(page_text(page)), i, total, add_pdf_page_header)
            pages_read += 1

        return "".join(parts), total, pages_read < total

    finally:
        doc.close()


def extract_pdf_text_core(
        filename: str,
        add_pdf_page_header: bool = False,
        on_progress: Optional[ProgressCallback] = None,
        is_cancelled: Optional[CancelCallback] = None,
) -> Tuple[str, int]:
    """
    Extract plain page text with pymupdf.

    Returns (text, page_count). Raises FileNotFoundError / RuntimeError for
    missing or unreadable documents. A cancelled run returns the pages read
    so far.
    """
    text, total, _ = _extract_pages(
        filename, _plain_page_text, add_pdf_page_header, on_progress, is_cancelled
    )
    return text, total


def page_text_objects(page) -> List[Tuple[str, float]]:
    """
    Text objects of one page as (text, y_mid), in page order.
    One object per text line of pymupdf's "dict" output.
    """
    objects: List[Tuple[str, float]] = []
    data = page.get_text("dict")

    for block in data.get("blocks", []):
        if block.get("type", 0) != 0:  # image block
            continue
        for line in block.get("lines", []):
            text = "".join(span.get("text", "") for span in line.get("spans", []))
            if not text:
                continue
            x0, y0, x1, y1 = line.get("bbox", (0.0, 0.0, 0.0, 0.0))
            objects.append((text, (y0 + y1) / 2.0))

    return objects


def _filtered_page_text(band_step: float, line_tolerance: int) -> Callable[[object], str]:
    def page_text(page) -> str:
        return filter_page_objects(page_text_objects(page), band_step, line_tolerance)
    return page_text


def extract_pdf_objects_core(
        filename: str,
        add_pdf_page_header: bool = False,
        on_progress: Optional[ProgressCallback] = None,
        is_cancelled: Optional[CancelCallback] = None,
        band_step: float = DEFAULT_BAND_STEP,
        line_tolerance: int = DEFAULT_LINE_TOLERANCE,
) -> Tuple[str, int]:
    """
    Object-level extraction: per page, text objects pass through the overlay
    filter (watermarks / tiled stamps dropped) before being joined into
    line-oriented text. Same contract as extract_pdf_text_core.
    """
    text, total, _ = _extract_pages(
        filename, _filtered_page_text(band_step, line_tolerance),
        add_pdf_page_header, on_progress, is_cancelled,
    )
    return text, total


def load_pdf_text(
        filename: str,
        add_pdf_page_header: bool = False,
        on_progress: Optional[ProgressCallback] = None,
        is_cancelled: Optional[CancelCallback] = None,
        filter_overlays: bool = False,
) -> PdfLoadResult:
    """
    Extraction wrapped into a PdfLoadResult; document faults never raise.
    cancelled is True only when the page loop actually stopped early.
    """
    if filter_overlays:
        page_text = _filtered_page_text(DEFAULT_BAND_STEP, DEFAULT_LINE_TOLERANCE)
    else:
        page_text = _plain_page_text

    try:
        text, page_count, cancelled = _extract_pages(
            filename, page_text, add_pdf_page_header, on_progress, is_cancelled
        )
    except (FileNotFoundError, RuntimeError) as e:
        logger.error("%s", e)
        return PdfLoadResult(success=False, message=str(e))

    message = "Cancelled" if cancelled else f"Loaded {page_count} page(s)"
    return PdfLoadResult(
        success=True,
        text=text,
        page_count=page_count,
        message=message,
        cancelled=cancelled,
    )
