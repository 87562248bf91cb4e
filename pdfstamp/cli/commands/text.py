"""CLI helpers for rendering plain text."""

from __future__ import annotations

import sys
from argparse import ArgumentParser, _SubParsersAction

from ...core.config import Settings
from ...core.exceptions import ValidationError
from ...core.utils import resolve_path
from ...core.validator import ensure_output_parent
from ...tools.common.interfaces import PipelineContext


def configure_parser(subparsers: _SubParsersAction[ArgumentParser]) -> None:
    parser = subparsers.add_parser("text", help="Render a text file onto the text template")
    parser.add_argument("input", help="UTF-8 text file, or '-' for stdin")
    parser.add_argument("output", help="Destination PDF path")
    parser.set_defaults(tool_name="render_text", build_context=_build_context, emit_result=_emit_result)


def _read_text(source: str) -> str:
    if source == "-":
        return sys.stdin.read()
    path = resolve_path(source)
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ValidationError(f"Cannot read text file '{path}': {exc}") from exc


def _build_context(args, settings: Settings) -> PipelineContext:
    return PipelineContext(settings=settings, config={"text": _read_text(args.input)})


def _emit_result(args, result: bytes) -> None:
    ensure_output_parent(args.output).write_bytes(result)
