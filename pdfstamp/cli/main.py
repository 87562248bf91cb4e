"""Command line interface for pdfstamp."""

from __future__ import annotations

import argparse
import sys
from typing import Sequence

from ..core.config import Settings
from ..core.exceptions import PdfStampError
from ..core.utils import configure_logging, get_logger
from ..pipeline import GenerateTool  # noqa: F401  registers the "generate" tool
from ..tools import load_builtin_plugins
from ..tools.common.interfaces import PipelineContext
from ..tools.common.pipeline import registry
from .commands import extract, generate, text

COMMAND_MODULES = [generate, text, extract]

LOGGER = get_logger("pdfstamp.cli")


def _create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="pdfstamp", description="Template driven PDF generation")
    parser.add_argument("--log-level", default=None, help="Logging level (defaults to PDFSTAMP_LOG_LEVEL)")
    subparsers = parser.add_subparsers(dest="command")
    subparsers.required = True
    for module in COMMAND_MODULES:
        module.configure_parser(subparsers)
    return parser


def main(argv: Sequence[str] | None = None) -> object:
    load_builtin_plugins()
    parser = _create_parser()
    args = parser.parse_args(argv)
    try:
        settings = Settings.from_env()
        configure_logging(args.log_level or settings.log_level)
        context: PipelineContext = args.build_context(args, settings)
        tool = registry.create(args.tool_name, context)
        result = tool.run()
        args.emit_result(args, result)
    except PdfStampError as exc:
        LOGGER.debug("Command '%s' failed", args.command, exc_info=True)
        print(f"pdfstamp {args.command}: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc
    return result


if __name__ == "__main__":  # pragma: no cover
    main()
