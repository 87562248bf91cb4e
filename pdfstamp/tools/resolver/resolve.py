"""Plugin adapter exposing input resolution through the registry."""

from __future__ import annotations

from ...core.utils import get_logger
from ..common.interfaces import BaseTool
from ..common.pipeline import register_tool
from .inputs import resolve_inputs

LOGGER = get_logger("pdfstamp.tools.resolve")


@register_tool("resolve")
class ResolveTool(BaseTool):
    name = "resolve"

    def run(self) -> list[dict[str, str]]:
        context = self.context
        template = context.ensure_template()
        body_inputs = context.config.get("body_inputs")
        query_overrides = context.config.get("query_overrides")

        LOGGER.debug(
            "Resolving %d page(s) with %d override(s)",
            template.page_count,
            len(query_overrides or {}),
        )
        resolved = resolve_inputs(template, body_inputs, query_overrides)
        context.inputs = resolved
        context.resources["result"] = resolved
        return resolved
