"""Plugin exposing the metadata extractor through the registry."""

from __future__ import annotations

from ..common.interfaces import BaseTool
from ..common.pipeline import register_tool
from .subject import extract_metadata


@register_tool("extract_metadata")
class ExtractMetadataTool(BaseTool):
    name = "extract_metadata"

    def run(self) -> str:
        context = self.context
        subject = extract_metadata(context.ensure_document())
        context.resources["result"] = subject
        return subject
