from __future__ import annotations

import logging
from typing import Optional

from PySide6.QtCore import QObject, Signal, Slot

from .pdf_helper import load_pdf_text
from .reflow_helper import ReflowOptions, reflow_text

logger = logging.getLogger(__name__)


class PdfExtractWorker(QObject):
    """
    Worker object that runs in a background QThread, extracts text from a
    PDF with pymupdf and optionally reflows it.

    The reflow runs only for a successful, non-cancelled extraction.
    """

    progress = Signal(int)              # percent 0..100
    finished = Signal(str, str, bool)   # (text, filename, cancelled)
    error = Signal(str)                 # error message

    def __init__(
            self,
            filename: str,
            options: Optional[ReflowOptions] = None,
            auto_reflow: bool = True,
            filter_overlays: bool = False,
            parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._filename = filename
        self._options = options if options is not None else ReflowOptions()
        self._auto_reflow = auto_reflow
        self._filter_overlays = filter_overlays
        self._cancel_requested = False

    @Slot()
    def run(self) -> None:
        """
        Main worker entry point. Runs entirely in the worker thread.
        """
        try:
            result = load_pdf_text(
                self._filename,
                add_pdf_page_header=self._options.add_pdf_page_header,
                on_progress=self.progress.emit,
                is_cancelled=self.is_cancel_requested,
                filter_overlays=self._filter_overlays,
            )

            if not result.success:
                self.error.emit(result.message)
                return

            text = result.text
            if result.cancelled:
                # partial text is handed back untouched
                self.finished.emit(text, self._filename, True)
                return

            if self._auto_reflow:
                text = reflow_text(text, self._options)

            logger.info("Extracted %s (%d pages)", self._filename, result.page_count)
            self.finished.emit(text, self._filename, False)

        except Exception as e:
            logger.exception("PDF worker failed for %s", self._filename)
            self.error.emit(str(e))

    @Slot()
    def request_cancel(self) -> None:
        """
        Called (indirectly) from the GUI thread to ask the worker to stop.
        Checked once per page, before the page is read.
        """
        self._cancel_requested = True

    def is_cancel_requested(self) -> bool:
        return self._cancel_requested
