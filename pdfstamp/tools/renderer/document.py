"""Render a template and its resolved inputs into PDF bytes.

Each template page is drawn as a reportlab overlay and merged with pypdf onto
the matching page of the template's base PDF (or onto a blank page of the
requested size). Geometry follows the pdfme convention: millimetres, origin
at the top-left corner of the page.
"""

from __future__ import annotations

import io
from typing import Any, Mapping, Sequence

from pypdf import PageObject, PdfReader, PdfWriter
from pypdf.errors import PdfReadError
from reportlab.lib.units import mm
from reportlab.pdfgen.canvas import Canvas

from ...core.exceptions import RenderError
from ...core.model import BlankPdf, Page, Template
from ...core.utils import get_logger, is_remote_reference
from ...core.validator import parse_template
from .fields import draw_field

LOGGER = get_logger("pdfstamp.tools.render")


def _check_inputs(template: Template, inputs: Sequence[Mapping[str, str]]) -> None:
    if len(inputs) != template.page_count:
        raise RenderError(
            f"Expected resolved inputs for {template.page_count} page(s), got {len(inputs)}"
        )
    for index, item in template.iter_fields():
        value = inputs[index].get(item.name)
        if value is None:
            raise RenderError(f"Field '{item.name}' has no resolved value", field=item.name, page=index)
        if not isinstance(value, str):
            raise RenderError(f"Resolved value of field '{item.name}' is not a string", field=item.name, page=index)
        if item.is_image and is_remote_reference(value):
            raise RenderError(
                f"Image field '{item.name}' still references a remote asset", field=item.name, page=index
            )


def _draw_overlay(page: Page, values: Mapping[str, str], width: float, height: float, *, index: int) -> PageObject:
    packet = io.BytesIO()
    c = Canvas(packet, pagesize=(width, height))
    for item in page:
        draw_field(c, item, values[item.name], height, page=index)
    c.showPage()
    c.save()
    packet.seek(0)
    return PdfReader(packet).pages[0]


def _base_pages(template: Template) -> list[Any]:
    base = template.base_pdf
    if isinstance(base, BlankPdf):
        return [None] * template.page_count
    try:
        reader = PdfReader(io.BytesIO(base.data))
        pages = list(reader.pages)
    except (PdfReadError, ValueError) as exc:
        raise RenderError(f"Base PDF cannot be read: {exc}") from exc
    if len(pages) < template.page_count:
        raise RenderError(
            f"Template has {template.page_count} page(s) but the base PDF only {len(pages)}"
        )
    return pages[: template.page_count]


def render_document(
    template: Template | Mapping[str, Any],
    inputs: Sequence[Mapping[str, str]],
) -> bytes:
    """Render ``template`` filled with fully resolved ``inputs``.

    ``inputs`` must hold one mapping per page with a string value for every
    field and no remote image references; anything else raises
    :class:`RenderError`.
    """

    template = parse_template(template)
    _check_inputs(template, inputs)

    writer = PdfWriter()
    for index, (page, base_page) in enumerate(zip(template.pages, _base_pages(template))):
        if base_page is None:
            blank = template.base_pdf
            target = writer.add_blank_page(width=blank.width * mm, height=blank.height * mm)
        else:
            target = writer.add_page(base_page)

        box = target.mediabox
        width, height = float(box.width), float(box.height)
        LOGGER.debug("Rendering page %d (%d field(s)) at %.1fx%.1fpt", index + 1, len(page), width, height)
        overlay = _draw_overlay(page, inputs[index], width, height, index=index)
        target.merge_translated_page(overlay, float(box.left), float(box.bottom))

    output = io.BytesIO()
    writer.write(output)
    return output.getvalue()


__all__ = ["render_document"]
