"""Template driven PDF generation with recoverable embedded inputs."""

from __future__ import annotations

from .core.config import Settings
from .core.exceptions import AssetFetchError, ParseError, PdfStampError, RenderError, ValidationError
from .core.model import BlankPdf, Field, InputSet, Page, PdfBytes, Template
from .core.validator import parse_template
from .pipeline import GenerationPipeline, GenerationResult, generate_document, generate_document_sync
from .tools import load_builtin_plugins
from .tools.assets import AssetFailure, FetchResult, fetch_assets
from .tools.common.interfaces import PipelineContext
from .tools.common.pipeline import ToolRegistry, register_tool, registry
from .tools.metadata import embed_metadata, extract_metadata, serialize_inputs
from .tools.renderer import render_document
from .tools.resolver import expand_inputs, flatten_inputs, resolve_inputs
from .tools.text import TextLayout, build_text_template, normalize_text, render_text

load_builtin_plugins()

render = render_document

__all__ = [
    "Settings",
    "PdfStampError",
    "ValidationError",
    "AssetFetchError",
    "RenderError",
    "ParseError",
    "Template",
    "Page",
    "Field",
    "BlankPdf",
    "PdfBytes",
    "InputSet",
    "parse_template",
    "resolve_inputs",
    "flatten_inputs",
    "expand_inputs",
    "fetch_assets",
    "FetchResult",
    "AssetFailure",
    "render",
    "render_document",
    "serialize_inputs",
    "embed_metadata",
    "extract_metadata",
    "TextLayout",
    "build_text_template",
    "normalize_text",
    "render_text",
    "GenerationPipeline",
    "GenerationResult",
    "generate_document",
    "generate_document_sync",
    "PipelineContext",
    "ToolRegistry",
    "registry",
    "register_tool",
    "extract_document_metadata",
]


def extract_document_metadata(document: bytes) -> str:
    """Convenience wrapper around the extract plugin."""

    context = PipelineContext(document=document)
    tool = registry.create("extract_metadata", context)
    return tool.run()
