"""Plugin exposing remote asset resolution through the registry."""

from __future__ import annotations

import asyncio

from ...core.utils import get_logger
from ..common.interfaces import BaseTool
from ..common.pipeline import register_tool
from .fetcher import FetchResult, fetch_assets

LOGGER = get_logger("pdfstamp.tools.fetch_assets")


@register_tool("fetch_assets")
class FetchAssetsTool(BaseTool):
    name = "fetch_assets"

    def run(self) -> FetchResult:
        return asyncio.run(self.arun())

    async def arun(self) -> FetchResult:
        context = self.context
        template = context.ensure_template()
        inputs = context.ensure_inputs()
        client = context.resources.get("http_client")

        result = await fetch_assets(template, inputs, settings=context.settings, client=client)
        LOGGER.debug(
            "Fetched %d asset(s), %d failure(s)", result.fetched, len(result.failures)
        )
        context.inputs = result.inputs
        context.resources["asset_failures"] = list(result.failures)
        context.resources["result"] = result
        return result
