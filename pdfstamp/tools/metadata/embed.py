"""Plugin exposing the metadata embedder through the registry."""

from __future__ import annotations

from ...core.utils import get_logger
from ..common.interfaces import BaseTool
from ..common.pipeline import register_tool
from .subject import embed_metadata

LOGGER = get_logger("pdfstamp.tools.embed_metadata")


@register_tool("embed_metadata")
class EmbedMetadataTool(BaseTool):
    name = "embed_metadata"

    def run(self) -> bytes:
        context = self.context
        document = context.ensure_document()
        payload = context.config.get("payload")
        if payload is None:
            payload = context.ensure_inputs()

        LOGGER.debug("Embedding metadata into %d byte document", len(document))
        result = embed_metadata(document, payload)
        context.document = result
        context.resources["result"] = result
        return result
