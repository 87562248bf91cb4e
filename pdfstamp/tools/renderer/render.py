"""Plugin exposing the overlay renderer through the registry."""

from __future__ import annotations

from ...core.utils import get_logger
from ..common.interfaces import BaseTool
from ..common.pipeline import register_tool
from .document import render_document

LOGGER = get_logger("pdfstamp.tools.render")


@register_tool("render")
class RenderTool(BaseTool):
    name = "render"

    def run(self) -> bytes:
        context = self.context
        template = context.ensure_template()
        inputs = context.ensure_inputs()

        LOGGER.debug("Rendering %d page(s)", template.page_count)
        document = render_document(template, inputs)
        context.document = document
        context.resources["result"] = document
        return document
