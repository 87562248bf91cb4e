"""End-to-end generation pipeline: resolve, fetch assets, render, embed."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from time import perf_counter
from typing import Any, Mapping

import httpx

from .core.config import Settings
from .core.model import InputSet, Template
from .core.utils import get_logger
from .tools import load_builtin_plugins
from .tools.assets.fetcher import AssetFailure
from .tools.common.interfaces import BaseTool, PipelineContext
from .tools.common.pipeline import register_tool, registry
from .tools.metadata.subject import serialize_inputs
from .tools.resolver.inputs import BodyInputs

__all__ = ["GenerationResult", "GenerationPipeline", "GenerateTool", "generate_document", "generate_document_sync"]

LOGGER = get_logger("pdfstamp.pipeline")


@dataclass(slots=True)
class GenerationResult:
    """Outcome of a template generation request."""

    document: bytes
    inputs: list[InputSet]
    subject: str
    asset_failures: list[AssetFailure] = field(default_factory=list)

    @property
    def page_count(self) -> int:
        return len(self.inputs)


class GenerationPipeline:
    """Run the template stages in order on one request.

    Input resolution is synchronous. Remote assets are fetched concurrently
    and all joined before rendering starts. Rendering and metadata embedding
    then run in a worker thread behind a single await.
    """

    def __init__(
        self,
        *,
        settings: Settings | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        load_builtin_plugins()
        self.settings = settings or Settings()
        self._client = client

    async def run(
        self,
        template: Template | Mapping[str, Any],
        body_inputs: BodyInputs = None,
        query_overrides: Mapping[str, Any] | None = None,
    ) -> GenerationResult:
        started = perf_counter()
        context = PipelineContext(
            template=template,
            settings=self.settings,
            config={"body_inputs": body_inputs, "query_overrides": query_overrides},
        )
        if self._client is not None:
            context.resources["http_client"] = self._client

        resolved: list[InputSet] = registry.create("resolve", context).run()
        LOGGER.info("Resolved inputs for %d page(s)", len(resolved))

        fetched = await registry.create("fetch_assets", context).arun()
        failures = list(fetched.failures)
        for failure in failures:
            LOGGER.warning("Asset fallback applied: %s (%s)", failure.describe(), failure.url)

        embed_context = context.with_updates(config={"payload": resolved})
        document = await asyncio.to_thread(self._render_and_embed, context, embed_context)

        LOGGER.info(
            "Generated %d byte document in %.1fms", len(document), (perf_counter() - started) * 1000
        )
        return GenerationResult(
            document=document,
            inputs=resolved,
            subject=serialize_inputs(resolved),
            asset_failures=failures,
        )

    @staticmethod
    def _render_and_embed(context: PipelineContext, embed_context: PipelineContext) -> bytes:
        rendered = registry.create("render", context).run()
        embed_context.document = rendered
        return registry.create("embed_metadata", embed_context).run()


async def generate_document(
    template: Template | Mapping[str, Any],
    body_inputs: BodyInputs = None,
    query_overrides: Mapping[str, Any] | None = None,
    *,
    settings: Settings | None = None,
    client: httpx.AsyncClient | None = None,
) -> GenerationResult:
    """Generate a PDF from ``template`` and embed the resolved inputs."""

    pipeline = GenerationPipeline(settings=settings, client=client)
    return await pipeline.run(template, body_inputs, query_overrides)


def generate_document_sync(
    template: Template | Mapping[str, Any],
    body_inputs: BodyInputs = None,
    query_overrides: Mapping[str, Any] | None = None,
    *,
    settings: Settings | None = None,
) -> GenerationResult:
    """Blocking variant of :func:`generate_document` for scripts and the CLI."""

    return asyncio.run(generate_document(template, body_inputs, query_overrides, settings=settings))


@register_tool("generate")
class GenerateTool(BaseTool):
    """Registry entry running the whole pipeline for one template."""

    name = "generate"

    def run(self) -> GenerationResult:
        return asyncio.run(self.arun())

    async def arun(self) -> GenerationResult:
        context = self.context
        pipeline = GenerationPipeline(settings=context.settings, client=context.resources.get("http_client"))
        result = await pipeline.run(
            context.ensure_template(),
            context.config.get("body_inputs"),
            context.config.get("query_overrides"),
        )
        context.document = result.document
        context.inputs = result.inputs
        context.resources["result"] = result
        return result
