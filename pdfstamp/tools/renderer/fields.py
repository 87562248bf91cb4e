"""Draw individual template fields onto a reportlab canvas."""

from __future__ import annotations

import io
from dataclasses import dataclass
from typing import Callable, Mapping

from reportlab.graphics import renderPDF
from reportlab.graphics.barcode import createBarcodeDrawing
from reportlab.lib.colors import black
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen.canvas import Canvas

from ...core.exceptions import RenderError
from ...core.model import BARCODE_TYPES, Field
from ...core.utils import decode_inline_data, is_remote_reference
from .styles import line_width, number, padding, parse_color, resolve_font_name, wrap_text_to_lines

_BARCODE_NAMES = {
    "qrcode": "QR",
    "code128": "Code128",
    "code39": "Standard39",
    "ean13": "EAN13",
    "ean8": "EAN8",
}
_ALIGNMENTS = {"left", "center", "right", "justify"}
_VERTICAL_ALIGNMENTS = {"top", "middle", "bottom"}
_FONT_STEP = 0.25


@dataclass(frozen=True, slots=True)
class Box:
    """Field rectangle in points, origin bottom-left."""

    x: float
    y: float
    width: float
    height: float

    @property
    def top(self) -> float:
        return self.y + self.height

    @property
    def center(self) -> tuple[float, float]:
        return self.x + self.width / 2, self.y + self.height / 2


def field_box(item: Field, page_height: float, *, page: int) -> Box:
    """Convert a field's top-left millimetre geometry into a :class:`Box`."""

    position = item.attribute("position") or {}
    if not isinstance(position, Mapping):
        raise RenderError(f"Attribute 'position' of field '{item.name}' must be an object", field=item.name, page=page)
    x = number(position, "x", 0.0, field=item.name, page=page)
    y = number(position, "y", 0.0, field=item.name, page=page)
    width = number(item.attributes, "width", 0.0, field=item.name, page=page)
    height = number(item.attributes, "height", 0.0, field=item.name, page=page)
    if width <= 0 or height <= 0:
        raise RenderError(
            f"Field '{item.name}' must have a positive width and height", field=item.name, page=page
        )
    return Box(x=x * mm, y=page_height - (y + height) * mm, width=width * mm, height=height * mm)


def _choice(item: Field, key: str, allowed: set[str], default: str, *, page: int) -> str:
    raw = item.attribute(key, default) or default
    value = str(raw).lower()
    if value not in allowed:
        raise RenderError(
            f"Attribute '{key}' of field '{item.name}' must be one of {sorted(allowed)}, got {raw!r}",
            field=item.name,
            page=page,
        )
    return value


def _font_bounds(item: Field, size: float, *, page: int) -> tuple[float, float] | None:
    attrs = item.attributes
    dynamic = attrs.get("dynamicFontSize")
    if isinstance(dynamic, Mapping):
        low = number(dynamic, "min", min(size, 4.0), field=item.name, page=page)
        high = number(dynamic, "max", size, field=item.name, page=page)
    elif attrs.get("autoFit"):
        low = number(attrs, "minFontSize", min(size, 4.0), field=item.name, page=page)
        high = number(attrs, "maxFontSize", size, field=item.name, page=page)
    else:
        return None
    if low <= 0 or low > high:
        raise RenderError(
            f"Field '{item.name}' has an invalid font size range {low}-{high}", field=item.name, page=page
        )
    return low, high


def _line_capacity(size: float, line_height: float, height: float) -> int:
    return int(height // (size * line_height))


def _layout_lines(
    text: str, font: str, size: float, width: float, wrap: bool, char_space: float, max_lines: int
) -> list[str]:
    if wrap:
        return wrap_text_to_lines(text, font, size, width, char_space, max_lines=max_lines)
    return text.split("\n", max_lines)[:max_lines]


def _fits(lines: list[str], font: str, size: float, line_height: float, width: float, height: float, char_space: float) -> bool:
    if len(lines) > _line_capacity(size, line_height, height):
        return False
    return all(line_width(line, font, size, char_space) <= width for line in lines)


def fit_text(
    value: str,
    font: str,
    size: float,
    bounds: tuple[float, float] | None,
    *,
    line_height: float,
    width: float,
    height: float,
    wrap: bool,
    char_space: float,
) -> tuple[float, list[str]]:
    """Pick the font size and the visible lines for a text box.

    Without ``bounds`` the given ``size`` is kept. Otherwise the largest size
    between the bounds (in quarter point steps) whose lines fit the box is
    chosen, falling back to the lower bound.
    """

    def layout(at: float) -> list[str]:
        # lines beyond capacity are never drawn; two extra show overflow and the clipped edge
        cap = _line_capacity(at, line_height, height) + 2
        return _layout_lines(value, font, at, width, wrap, char_space, cap)

    if bounds is None:
        return size, layout(size)

    low, high = bounds
    steps = int((high - low) // _FONT_STEP)
    sizes = [high - index * _FONT_STEP for index in range(steps + 1)]
    if sizes[-1] > low:
        sizes.append(low)
    first, last = 0, len(sizes) - 1
    while first < last:
        middle = (first + last) // 2
        if _fits(layout(sizes[middle]), font, sizes[middle], line_height, width, height, char_space):
            last = middle
        else:
            first = middle + 1
    return sizes[first], layout(sizes[first])


def draw_text(c: Canvas, item: Field, value: str, box: Box, *, page: int) -> None:
    attrs = item.attributes
    background = parse_color(attrs.get("backgroundColor"), field=item.name, page=page, key="backgroundColor")
    if background is not None:
        c.setFillColor(background)
        c.rect(box.x, box.y, box.width, box.height, stroke=0, fill=1)
    if not value:
        return

    font = resolve_font_name(attrs.get("fontName"))
    size = number(attrs, "fontSize", 13.0, field=item.name, page=page)
    line_height = number(attrs, "lineHeight", 1.0, field=item.name, page=page)
    char_space = number(attrs, "characterSpacing", 0.0, field=item.name, page=page)
    color = parse_color(attrs.get("fontColor"), field=item.name, page=page, key="fontColor") or black
    alignment = _choice(item, "alignment", _ALIGNMENTS, "left", page=page)
    vertical = _choice(item, "verticalAlignment", _VERTICAL_ALIGNMENTS, "top", page=page)
    wrap = bool(attrs.get("wrapText", True))
    if size <= 0 or line_height <= 0:
        raise RenderError(f"Field '{item.name}' needs a positive font size and line height", field=item.name, page=page)

    pad_top, pad_right, pad_bottom, pad_left = padding(attrs, field=item.name, page=page)
    inner_width = max(box.width - pad_left - pad_right, 1.0)
    inner_height = max(box.height - pad_top - pad_bottom, 1.0)

    size, lines = fit_text(
        value,
        font,
        size,
        _font_bounds(item, size, page=page),
        line_height=line_height,
        width=inner_width,
        height=inner_height,
        wrap=wrap,
        char_space=char_space,
    )

    block_height = len(lines) * size * line_height
    inner_top = box.top - pad_top
    if vertical == "middle":
        inner_top -= max(inner_height - block_height, 0) / 2
    elif vertical == "bottom":
        inner_top -= max(inner_height - block_height, 0)

    c.saveState()
    clip = c.beginPath()
    clip.rect(box.x, box.y, box.width, box.height)
    c.clipPath(clip, stroke=0, fill=0)
    c.setFillColor(color)
    try:
        for index, line in enumerate(lines):
            baseline = inner_top - size - index * size * line_height
            if baseline < box.y - size:
                break
            width = line_width(line, font, size, char_space)
            if alignment == "center":
                start = box.x + pad_left + (inner_width - width) / 2
            elif alignment == "right":
                start = box.x + pad_left + inner_width - width
            else:
                start = box.x + pad_left
            text = c.beginText(start, baseline)
            text.setFont(font, size)
            text.setCharSpace(char_space)
            text.textOut(line)
            c.drawText(text)
    except (UnicodeError, ValueError) as exc:
        raise RenderError(f"Cannot render text of field '{item.name}': {exc}", field=item.name, page=page) from exc
    finally:
        c.restoreState()


def draw_image(c: Canvas, item: Field, value: str, box: Box, *, page: int) -> None:
    if not value:
        return
    if is_remote_reference(value):
        raise RenderError(
            f"Image field '{item.name}' still references a remote asset", field=item.name, page=page
        )
    try:
        payload, _ = decode_inline_data(value)
        image = ImageReader(io.BytesIO(payload))
        c.drawImage(image, box.x, box.y, width=box.width, height=box.height, mask="auto")
    except Exception as exc:  # pragma: no cover - reportlab/PIL exception types vary
        raise RenderError(
            f"Image data of field '{item.name}' cannot be decoded: {exc}", field=item.name, page=page
        ) from exc


def draw_barcode(c: Canvas, item: Field, value: str, box: Box, *, page: int) -> None:
    if not value:
        return
    try:
        drawing = createBarcodeDrawing(
            _BARCODE_NAMES[item.type], value=value, width=box.width, height=box.height
        )
        renderPDF.draw(drawing, c, box.x, box.y)
    except Exception as exc:  # pragma: no cover - barcode validation errors vary
        raise RenderError(
            f"Value of {item.type} field '{item.name}' cannot be encoded: {exc}", field=item.name, page=page
        ) from exc


def draw_shape(c: Canvas, item: Field, value: str, box: Box, *, page: int) -> None:
    attrs = item.attributes
    fill = parse_color(attrs.get("color"), field=item.name, page=page, key="color")
    if item.type == "line":
        c.setFillColor(fill or black)
        c.rect(box.x, box.y, box.width, box.height, stroke=0, fill=1)
        return

    border = parse_color(attrs.get("borderColor"), field=item.name, page=page, key="borderColor")
    border_width = number(attrs, "borderWidth", 0.0, field=item.name, page=page) * mm
    stroke = int(border is not None and border_width > 0)
    if fill is not None:
        c.setFillColor(fill)
    if stroke:
        c.setStrokeColor(border)
        c.setLineWidth(border_width)
    inset = border_width / 2 if stroke else 0.0
    x, y = box.x + inset, box.y + inset
    width, height = box.width - 2 * inset, box.height - 2 * inset
    if item.type == "ellipse":
        c.ellipse(x, y, x + width, y + height, stroke=stroke, fill=int(fill is not None))
    else:
        c.rect(x, y, width, height, stroke=stroke, fill=int(fill is not None))


_DRAWERS: dict[str, Callable[..., None]] = {
    "text": draw_text,
    "image": draw_image,
    "line": draw_shape,
    "rectangle": draw_shape,
    "ellipse": draw_shape,
}
_DRAWERS.update({kind: draw_barcode for kind in BARCODE_TYPES})


def draw_field(c: Canvas, item: Field, value: str, page_height: float, *, page: int) -> None:
    """Draw ``item`` with its resolved ``value``, honouring rotation and opacity."""

    drawer = _DRAWERS.get(item.type)
    if drawer is None:
        raise RenderError(f"Unsupported field type '{item.type}' for field '{item.name}'", field=item.name, page=page)

    box = field_box(item, page_height, page=page)
    rotate = number(item.attributes, "rotate", 0.0, field=item.name, page=page)
    opacity = number(item.attributes, "opacity", 1.0, field=item.name, page=page)
    if not 0.0 <= opacity <= 1.0:
        raise RenderError(f"Attribute 'opacity' of field '{item.name}' must be between 0 and 1", field=item.name, page=page)

    c.saveState()
    try:
        if opacity < 1.0:
            c.setFillAlpha(opacity)
            c.setStrokeAlpha(opacity)
        if rotate:
            cx, cy = box.center
            c.translate(cx, cy)
            c.rotate(-rotate)
            c.translate(-cx, -cy)
        drawer(c, item, value, box, page=page)
    finally:
        c.restoreState()


__all__ = ["Box", "field_box", "fit_text", "draw_field", "draw_text", "draw_image", "draw_barcode", "draw_shape"]
