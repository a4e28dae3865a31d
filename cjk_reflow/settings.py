from __future__ import annotations

"""
settings.py

PDF / reflow settings stored as JSON.

Layout (0/1 integer flags, camelCase keys):

    {
      "pdfOptions": {
        "addPdfPageHeader": 0,
        "compactPdfText": 0,
        "autoReflowPdfText": 1,
        "sentenceBoundaryLevel": 2,
        "shortHeadingSettings": {
          "maxLen": 8, "allCjk": 1, "allAscii": 1,
          "allAsciiDigits": 1, "mixedCjkAscii": 0,
          "customTitleHeadingRegex": ""
        }
      }
    }

Older files kept the flags at top level (addPdfPageHeader, compactPdfText,
autoReflowPdfText, shortHeadingMaxLen); those are migrated when pdfOptions
is absent.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Union

from .boundaries import DEFAULT_SENTENCE_BOUNDARY_LEVEL, clamp_sentence_boundary_level
from .line_classifier import ShortHeadingSettings
from .reflow_helper import ReflowOptions

logger = logging.getLogger(__name__)

_LEGACY_KEYS = ("addPdfPageHeader", "compactPdfText", "autoReflowPdfText", "shortHeadingMaxLen")


class SettingsError(ValueError):
    """Settings file exists but cannot be parsed."""


def _flag(value: Any, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    try:
        return int(value) > 0
    except (TypeError, ValueError):
        return default


def _int(value: Any, default: int) -> int:
    if value is None:
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _short_heading_dict(value: Any) -> Dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise SettingsError("'shortHeadingSettings' must be a JSON object")
    return value


def short_heading_from_dict(data: Optional[Dict[str, Any]]) -> ShortHeadingSettings:
    data = _short_heading_dict(data)
    defaults = ShortHeadingSettings()
    pattern = data.get("customTitleHeadingRegex") or None
    if pattern is not None and not isinstance(pattern, str):
        raise SettingsError("'customTitleHeadingRegex' must be a string")
    return ShortHeadingSettings(
        max_len=_int(data.get("maxLen"), defaults.max_len),
        all_cjk=_flag(data.get("allCjk"), defaults.all_cjk),
        all_ascii=_flag(data.get("allAscii"), defaults.all_ascii),
        all_ascii_digits=_flag(data.get("allAsciiDigits"), defaults.all_ascii_digits),
        mixed_cjk_ascii=_flag(data.get("mixedCjkAscii"), defaults.mixed_cjk_ascii),
        custom_title_pattern=pattern,
    )


def short_heading_to_dict(sh: ShortHeadingSettings) -> Dict[str, Any]:
    return {
        "maxLen": sh.max_len,
        "allCjk": int(sh.all_cjk),
        "allAscii": int(sh.all_ascii),
        "allAsciiDigits": int(sh.all_ascii_digits),
        "mixedCjkAscii": int(sh.mixed_cjk_ascii),
        "customTitleHeadingRegex": sh.custom_title_pattern or "",
    }


@dataclass
class PdfSettings:
    add_pdf_page_header: bool = False
    compact_pdf_text: bool = False
    auto_reflow_pdf_text: bool = True
    sentence_boundary_level: int = DEFAULT_SENTENCE_BOUNDARY_LEVEL
    short_heading: ShortHeadingSettings = field(default_factory=ShortHeadingSettings)

    def __post_init__(self) -> None:
        self.sentence_boundary_level = clamp_sentence_boundary_level(self.sentence_boundary_level)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PdfSettings":
        if not isinstance(data, dict):
            raise SettingsError("Settings root must be a JSON object")

        opts = data.get("pdfOptions")
        if opts is None and any(k in data for k in _LEGACY_KEYS):
            opts = _migrate_legacy(data)
        if opts is None:
            opts = {}
        if not isinstance(opts, dict):
            raise SettingsError("'pdfOptions' must be a JSON object")

        return cls(
            add_pdf_page_header=_flag(opts.get("addPdfPageHeader"), False),
            compact_pdf_text=_flag(opts.get("compactPdfText"), False),
            auto_reflow_pdf_text=_flag(opts.get("autoReflowPdfText"), True),
            sentence_boundary_level=_int(opts.get("sentenceBoundaryLevel"), DEFAULT_SENTENCE_BOUNDARY_LEVEL),
            short_heading=short_heading_from_dict(opts.get("shortHeadingSettings")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "pdfOptions": {
                "addPdfPageHeader": int(self.add_pdf_page_header),
                "compactPdfText": int(self.compact_pdf_text),
                "autoReflowPdfText": int(self.auto_reflow_pdf_text),
                "sentenceBoundaryLevel": self.sentence_boundary_level,
                "shortHeadingSettings": short_heading_to_dict(self.short_heading),
            }
        }

    @classmethod
    def load(cls, path: Union[str, Path]) -> "PdfSettings":
        """Missing file → defaults. Unreadable JSON → SettingsError."""
        path = Path(path)
        if not path.exists():
            logger.debug("Settings file not found, using defaults: %s", path)
            return cls()

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise SettingsError(f"Invalid settings file {path}: {e}") from e

        settings = cls.from_dict(data)
        logger.debug("Loaded settings from: %s", path)
        return settings

    def save(self, path: Union[str, Path]) -> None:
        path = Path(path)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, ensure_ascii=False, indent=2)

    def to_reflow_options(self) -> ReflowOptions:
        """Immutable per-run options for the reflow engine."""
        return ReflowOptions(
            add_pdf_page_header=self.add_pdf_page_header,
            compact=self.compact_pdf_text,
            short_heading=self.short_heading,
            sentence_boundary_level=self.sentence_boundary_level,
            custom_title_pattern=self.short_heading.custom_title_pattern,
        )


def _migrate_legacy(data: Dict[str, Any]) -> Dict[str, Any]:
    logger.info("Migrating legacy top-level PDF settings into pdfOptions")
    sh = dict(_short_heading_dict(data.get("shortHeadingSettings")))
    legacy_max = _int(data.get("shortHeadingMaxLen"), 0)
    if legacy_max > 0:
        sh["maxLen"] = legacy_max
    return {
        "addPdfPageHeader": data.get("addPdfPageHeader"),
        "compactPdfText": data.get("compactPdfText"),
        "autoReflowPdfText": data.get("autoReflowPdfText"),
        "shortHeadingSettings": sh,
    }
