"""CLI helpers for reading embedded inputs back out of a PDF."""

from __future__ import annotations

from argparse import ArgumentParser, _SubParsersAction

from ...core.config import Settings
from ...core.exceptions import ParseError
from ...core.utils import resolve_path
from ...tools.common.interfaces import PipelineContext


def configure_parser(subparsers: _SubParsersAction[ArgumentParser]) -> None:
    parser = subparsers.add_parser("extract", help="Print the embedded metadata of a PDF")
    parser.add_argument("input", help="Input PDF file")
    parser.set_defaults(tool_name="extract_metadata", build_context=_build_context, emit_result=_emit_result)


def _build_context(args, settings: Settings) -> PipelineContext:
    path = resolve_path(args.input)
    try:
        document = path.read_bytes()
    except OSError as exc:
        raise ParseError(f"Cannot read PDF '{path}': {exc}") from exc
    return PipelineContext(document=document, settings=settings)


def _emit_result(args, result: str) -> None:
    print(result)
