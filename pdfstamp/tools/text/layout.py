"""Fixed layout of the synthetic single-field text template."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from ...core.model import BlankPdf, Field, Page, Template

CONTENT_FIELD = "content"

_LINE_BREAK = re.compile(r"\r\n|\r|\n")


@dataclass(frozen=True)
class TextLayout:
    """Page and text box settings used by :func:`build_text_template`.

    Geometry is in millimetres, font sizes in points. The defaults place a
    180x260 mm auto-fitting text box on a blank A4 page.
    """

    page_width: float = 210.0
    page_height: float = 297.0
    x: float = 15.0
    y: float = 20.0
    width: float = 180.0
    height: float = 260.0
    font_name: str = "Helvetica"
    font_color: str = "#000000"
    font_size: float = 10.0
    min_font_size: float = 6.0
    max_font_size: float = 11.0
    line_height: float = 1.2
    character_spacing: float = 0.0
    padding: float = 10.0
    alignment: str = "left"
    vertical_alignment: str = "top"
    auto_fit: bool = True
    wrap_text: bool = True
    extra: dict[str, Any] = field(default_factory=dict)

    def field_attributes(self) -> dict[str, Any]:
        attributes: dict[str, Any] = {
            "position": {"x": self.x, "y": self.y},
            "width": self.width,
            "height": self.height,
            "fontName": self.font_name,
            "fontColor": self.font_color,
            "alignment": self.alignment,
            "verticalAlignment": self.vertical_alignment,
            "lineHeight": self.line_height,
            "characterSpacing": self.character_spacing,
            "opacity": 1,
            "rotate": 0,
            "padding": self.padding,
            "autoFit": self.auto_fit,
            "fontSize": self.font_size,
            "maxFontSize": self.max_font_size,
            "minFontSize": self.min_font_size,
            "wrapText": self.wrap_text,
        }
        attributes.update(self.extra)
        return attributes


DEFAULT_TEXT_LAYOUT = TextLayout()


def normalize_text(text: str) -> str:
    """Split on any line ending, strip every line and rejoin with ``\\n``."""

    return "\n".join(line.strip() for line in _LINE_BREAK.split(text))


def build_text_template(layout: TextLayout = DEFAULT_TEXT_LAYOUT) -> Template:
    """Return a one-page template holding a single ``content`` text field."""

    content = Field(
        name=CONTENT_FIELD,
        type="text",
        content="",
        attributes=MappingProxyType(layout.field_attributes()),
    )
    return Template(
        base_pdf=BlankPdf(width=layout.page_width, height=layout.page_height),
        pages=(Page(fields=(content,)),),
    )


__all__ = [
    "CONTENT_FIELD",
    "DEFAULT_TEXT_LAYOUT",
    "TextLayout",
    "build_text_template",
    "normalize_text",
]
