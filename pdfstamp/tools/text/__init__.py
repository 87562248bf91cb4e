"""Text document adapter exposed through the pdfstamp tools namespace."""

from __future__ import annotations

from .adapter import render_text
from .layout import CONTENT_FIELD, DEFAULT_TEXT_LAYOUT, TextLayout, build_text_template, normalize_text

__all__ = [
    "CONTENT_FIELD",
    "DEFAULT_TEXT_LAYOUT",
    "TextLayout",
    "build_text_template",
    "normalize_text",
    "render_text",
]
