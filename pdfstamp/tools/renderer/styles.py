"""Font, colour and measurement helpers for the overlay renderer."""

from __future__ import annotations

from itertools import islice
from typing import Any, Iterator, Mapping

from reportlab.lib.colors import Color, HexColor
from reportlab.lib.units import mm
from reportlab.pdfbase import pdfmetrics

from ...core.exceptions import RenderError
from ...core.utils import get_logger

LOGGER = get_logger("pdfstamp.tools.render")

DEFAULT_FONT = "Helvetica"

_BASE14_FONTS = {
    "Courier",
    "Courier-Bold",
    "Courier-Oblique",
    "Courier-BoldOblique",
    "Helvetica",
    "Helvetica-Bold",
    "Helvetica-Oblique",
    "Helvetica-BoldOblique",
    "Times-Roman",
    "Times-Bold",
    "Times-Italic",
    "Times-BoldItalic",
    "Symbol",
    "ZapfDingbats",
}


def _normalize_font_name(name: str) -> str:
    return "".join(ch for ch in name.lower() if ch.isalnum())


def _font_is_available(font_name: str) -> bool:
    if font_name in _BASE14_FONTS:
        return True
    try:
        pdfmetrics.getFont(font_name)
        return True
    except Exception:  # pragma: no cover - reportlab lookup errors vary
        return False


def resolve_font_name(font_name: str | None) -> str:
    """Map ``font_name`` onto a registered font, falling back to Helvetica."""

    if not font_name:
        return DEFAULT_FONT
    if _font_is_available(font_name):
        return font_name

    normalized = _normalize_font_name(font_name)
    for candidate in list(pdfmetrics.getRegisteredFontNames()) + sorted(_BASE14_FONTS):
        if _normalize_font_name(candidate) == normalized and _font_is_available(candidate):
            return candidate

    LOGGER.debug("Font '%s' is unavailable, falling back to '%s'", font_name, DEFAULT_FONT)
    return DEFAULT_FONT


def parse_color(value: Any, *, field: str, page: int, key: str) -> Color | None:
    """Parse a ``#RRGGBB``/``#RGB`` colour attribute; empty values mean "none"."""

    if value is None or value == "":
        return None
    if not isinstance(value, str):
        raise RenderError(f"Attribute '{key}' of field '{field}' must be a hex colour", field=field, page=page)
    text = value.strip()
    if len(text) == 4 and text.startswith("#"):
        text = "#" + "".join(ch * 2 for ch in text[1:])
    try:
        return HexColor(text)
    except (ValueError, TypeError) as exc:
        raise RenderError(
            f"Attribute '{key}' of field '{field}' is not a valid colour: {value!r}",
            field=field,
            page=page,
        ) from exc


def number(attributes: Mapping[str, Any], key: str, default: float, *, field: str, page: int) -> float:
    """Read a numeric layout attribute, raising :class:`RenderError` when malformed."""

    raw = attributes.get(key, default)
    if raw is None:
        return default
    if isinstance(raw, bool):
        raise RenderError(f"Attribute '{key}' of field '{field}' must be a number", field=field, page=page)
    try:
        return float(raw)
    except (TypeError, ValueError) as exc:
        raise RenderError(
            f"Attribute '{key}' of field '{field}' must be a number, got {raw!r}",
            field=field,
            page=page,
        ) from exc


def padding(attributes: Mapping[str, Any], *, field: str, page: int) -> tuple[float, float, float, float]:
    """Return ``(top, right, bottom, left)`` padding in points."""

    raw = attributes.get("padding", 0)
    if isinstance(raw, (list, tuple)):
        if len(raw) != 4:
            raise RenderError(
                f"Attribute 'padding' of field '{field}' must have four values", field=field, page=page
            )
        values = [number({"padding": item}, "padding", 0.0, field=field, page=page) for item in raw]
    else:
        values = [number(attributes, "padding", 0.0, field=field, page=page)] * 4
    top, right, bottom, left = (value * mm for value in values)
    return top, right, bottom, left


def line_width(text: str, font_name: str, size: float, char_space: float) -> float:
    return pdfmetrics.stringWidth(text, font_name, size) + char_space * len(text)


def _iter_wrapped(text: str, font_name: str, size: float, max_width: float, char_space: float) -> Iterator[str]:
    for paragraph in text.split("\n"):
        if not paragraph:
            yield ""
            continue
        current = ""
        for word in paragraph.split(" "):
            candidate = f"{current} {word}" if current else word
            if line_width(candidate, font_name, size, char_space) <= max_width:
                current = candidate
                continue
            if current:
                yield current
            current = ""
            for char in word:
                if current and line_width(current + char, font_name, size, char_space) > max_width:
                    yield current
                    current = char
                else:
                    current += char
        yield current


def wrap_text_to_lines(
    text: str,
    font_name: str,
    size: float,
    max_width: float,
    char_space: float = 0.0,
    max_lines: int | None = None,
) -> list[str]:
    """Break ``text`` into lines that each fit within ``max_width`` points.

    Explicit newlines are preserved. A single word wider than ``max_width``
    is broken at character level. With ``max_lines`` wrapping stops once that
    many lines exist, so only the visible part of a long text is measured.
    """

    lines = _iter_wrapped(text, font_name, size, max_width, char_space)
    result = list(islice(lines, max_lines)) if max_lines is not None else list(lines)
    return result or [""]


__all__ = [
    "DEFAULT_FONT",
    "resolve_font_name",
    "parse_color",
    "number",
    "padding",
    "line_width",
    "wrap_text_to_lines",
]
