from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from pdfstamp import (
    AssetFetchError,
    GenerationPipeline,
    Settings,
    ValidationError,
    extract_document_metadata,
    extract_metadata,
    generate_document,
    generate_document_sync,
    registry,
)
from pdfstamp.tools.common.interfaces import PipelineContext


def _failing_client() -> httpx.AsyncClient:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("unreachable", request=request)

    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def test_generate_single_page_example(blank_template) -> None:
    result = generate_document_sync(blank_template, {"name": "Alice"})

    assert result.inputs == [{"name": "Alice"}]
    assert result.subject == '{"name":"Alice"}'
    assert result.page_count == 1
    assert extract_metadata(result.document) == '{"name":"Alice"}'
    assert extract_document_metadata(result.document) == '{"name":"Alice"}'


def test_query_overrides_win(two_page_template) -> None:
    result = generate_document_sync(
        two_page_template,
        [{"title": "Body title"}, {}],
        {"title": "Query title", "footer": ""},
    )

    assert result.inputs == [{"title": "Query title", "name": ""}, {"footer": "page two"}]
    assert json.loads(extract_metadata(result.document)) == result.inputs


def test_metadata_keeps_image_urls(image_template, png_bytes) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=png_bytes, headers={"content-type": "image/png"})

    async def scenario():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            return await generate_document(
                image_template, {"name": "Eve", "logo": "https://cdn.example/logo.png"}, client=client
            )

    result = asyncio.run(scenario())

    assert json.loads(result.subject) == {"logo": "https://cdn.example/logo.png", "name": "Eve"}
    assert extract_metadata(result.document) == result.subject
    assert result.asset_failures == []


def test_unreachable_asset_fails_request(image_template) -> None:
    async def scenario():
        async with _failing_client() as client:
            return await GenerationPipeline(client=client).run(image_template, {"logo": "https://down.example/a.png"})

    with pytest.raises(AssetFetchError):
        asyncio.run(scenario())


def test_fallback_policy_renders_without_image(image_template) -> None:
    settings = Settings(asset_policy="fallback")

    async def scenario():
        async with _failing_client() as client:
            return await generate_document(
                image_template, {"name": "Ann", "logo": "https://down.example/a.png"}, settings=settings, client=client
            )

    result = asyncio.run(scenario())

    assert [failure.field for failure in result.asset_failures] == ["logo"]
    assert json.loads(extract_metadata(result.document))["logo"] == "https://down.example/a.png"


def test_invalid_template_is_rejected() -> None:
    with pytest.raises(ValidationError, match="basePdf and schemas is required"):
        generate_document_sync({"schemas": [[]]})


def test_generate_tool_runs_whole_pipeline(blank_template) -> None:
    context = PipelineContext(template=blank_template, config={"query_overrides": {"name": "Zed"}})

    result = registry.create("generate", context).run()

    assert context.document == result.document
    assert result.subject == '{"name":"Zed"}'


def test_builtin_tools_are_registered() -> None:
    assert set(registry.names()) >= {
        "resolve",
        "fetch_assets",
        "render",
        "embed_metadata",
        "extract_metadata",
        "render_text",
        "generate",
    }
