"""CLI helpers for the generate command."""

from __future__ import annotations

import json
from argparse import ArgumentParser, _SubParsersAction
from pathlib import Path
from typing import Any

from ...core.config import ASSET_POLICIES, Settings
from ...core.exceptions import ValidationError
from ...core.utils import resolve_path
from ...core.validator import ensure_output_parent
from ...tools.common.interfaces import PipelineContext


def configure_parser(subparsers: _SubParsersAction[ArgumentParser]) -> None:
    parser = subparsers.add_parser("generate", help="Fill a template and write the PDF")
    parser.add_argument("template", help="Template JSON file")
    parser.add_argument("output", help="Destination PDF path")
    parser.add_argument(
        "--input",
        dest="overrides",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Override a field value on every page (repeatable)",
    )
    parser.add_argument("--inputs", help="JSON file with an inputs object or a list of per-page objects")
    parser.add_argument("--asset-policy", choices=ASSET_POLICIES, default=None)
    parser.set_defaults(tool_name="generate", build_context=_build_context, emit_result=_emit_result)


def _read_json(path: str, *, label: str) -> Any:
    source = resolve_path(path)
    try:
        return json.loads(source.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ValidationError(f"Cannot read {label} file '{source}': {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ValidationError(f"{label.capitalize()} file '{source}' is not valid JSON: {exc}") from exc


def _parse_overrides(pairs: list[str]) -> dict[str, str]:
    overrides: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise ValidationError(f"Input override must look like KEY=VALUE, got {pair!r}")
        overrides[key] = value
    return overrides


def _build_context(args, settings: Settings) -> PipelineContext:
    payload = _read_json(args.template, label="template")
    body_inputs = payload.get("inputs") if isinstance(payload, dict) else None
    if args.inputs:
        body_inputs = _read_json(args.inputs, label="inputs")
    return PipelineContext(
        template=payload,
        settings=settings.with_overrides(asset_policy=args.asset_policy),
        config={
            "body_inputs": body_inputs,
            "query_overrides": _parse_overrides(args.overrides),
        },
    )


def _emit_result(args, result) -> Path:
    destination = ensure_output_parent(args.output)
    destination.write_bytes(result.document)
    for failure in result.asset_failures:
        print(f"warning: {failure.describe()}")
    return destination
