from pathlib import Path
from typing import Callable, Sequence

import pytest


@pytest.fixture
def make_pdf(tmp_path: Path) -> Callable[..., Path]:
    """Build a small PDF with one text line per page (pymupdf required)."""
    pymupdf = pytest.importorskip("pymupdf")

    def _make(pages: Sequence[str], name: str = "sample.pdf") -> Path:
        path = tmp_path / name
        doc = pymupdf.open()
        for text in pages:
            page = doc.new_page()
            if text:
                page.insert_text((72, 72), text)
        doc.save(str(path))
        doc.close()
        return path

    return _make
