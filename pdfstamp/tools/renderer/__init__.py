"""Overlay renderer exposed through the pdfstamp tools namespace."""

from __future__ import annotations

from .document import render_document
from .fields import Box, draw_field
from .styles import resolve_font_name, wrap_text_to_lines

__all__ = ["render_document", "Box", "draw_field", "resolve_font_name", "wrap_text_to_lines"]
