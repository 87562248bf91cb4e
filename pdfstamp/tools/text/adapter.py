"""Render free-form text through the template pipeline.

The text is normalized, placed into the single field of the synthetic text
template, rendered, and the complete normalized text is stored in the
metadata slot so that :func:`extract_metadata` returns it unchanged.
"""

from __future__ import annotations

from ...core.exceptions import ValidationError
from ...core.utils import get_logger
from ..common.interfaces import BaseTool
from ..common.pipeline import register_tool
from ..metadata.subject import embed_metadata
from ..renderer.document import render_document
from ..resolver.inputs import resolve_inputs
from .layout import CONTENT_FIELD, DEFAULT_TEXT_LAYOUT, TextLayout, build_text_template, normalize_text

LOGGER = get_logger("pdfstamp.tools.text")


def render_text(text: str, layout: TextLayout | None = None) -> bytes:
    """Render ``text`` on the text template and embed it as metadata."""

    if not isinstance(text, str):
        raise ValidationError("Text content must be a string", stage="validate")
    normalized = normalize_text(text)
    if not normalized.strip():
        raise ValidationError("Text content is required", stage="validate")

    template = build_text_template(layout or DEFAULT_TEXT_LAYOUT)
    inputs = resolve_inputs(template, {CONTENT_FIELD: normalized})
    LOGGER.debug("Rendering %d character(s) of text", len(normalized))
    document = render_document(template, inputs)
    return embed_metadata(document, normalized)


@register_tool("render_text")
class RenderTextTool(BaseTool):
    name = "render_text"

    def run(self) -> bytes:
        context = self.context
        text = context.config.get("text")
        if text is None:
            raise ValidationError("render_text requires 'text' in the tool configuration")
        document = render_text(text, context.config.get("layout"))
        context.document = document
        context.resources["result"] = document
        return document
