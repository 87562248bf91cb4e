"""Validation helpers shared by pdfstamp tools.

Request payloads arrive as loosely typed JSON. The helpers below check their
shape once, at the boundary, and turn them into the immutable objects from
:mod:`pdfstamp.core.model` so that later stages never deal with malformed
structures.
"""

from __future__ import annotations

from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping, Sequence

from .exceptions import ValidationError
from .model import BasePdf, BlankPdf, Field, Page, PdfBytes, Template
from .utils import decode_inline_data, resolve_path

_RESERVED_KEYS = {"name", "type", "content"}
PDF_HEADER = b"%PDF-"


def ensure_output_parent(path: str | Path) -> Path:
    resolved = resolve_path(path)
    resolved.parent.mkdir(parents=True, exist_ok=True)
    return resolved


def _is_encodable(text: str) -> bool:
    try:
        text.encode("utf-8")
    except UnicodeEncodeError:
        return False
    return True


def coerce_input_value(value: Any, *, field: str, page: int | None = None) -> str:
    """Return ``value`` as a string input, rejecting nested structures."""

    if value is None:
        return ""
    if isinstance(value, str):
        if not _is_encodable(value):
            raise ValidationError(
                f"Input for field '{field}' contains characters that cannot be encoded",
                field=field,
                page=page,
            )
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    raise ValidationError(
        f"Input for field '{field}' must be a string, got {type(value).__name__}",
        field=field,
        page=page,
    )


def parse_base_pdf(raw: Any) -> BasePdf:
    if raw is None or raw == "":
        raise ValidationError("Template requires a 'basePdf'")

    if isinstance(raw, Mapping):
        try:
            width = float(raw["width"])
            height = float(raw["height"])
        except (KeyError, TypeError, ValueError) as exc:
            raise ValidationError("Blank 'basePdf' requires numeric 'width' and 'height'") from exc
        if width <= 0 or height <= 0:
            raise ValidationError("Blank 'basePdf' dimensions must be positive")
        padding_raw = raw.get("padding") or (0, 0, 0, 0)
        if not isinstance(padding_raw, Sequence) or isinstance(padding_raw, str) or len(padding_raw) != 4:
            raise ValidationError("'basePdf.padding' must be a list of four numbers")
        try:
            padding = tuple(float(value) for value in padding_raw)
        except (TypeError, ValueError) as exc:
            raise ValidationError("'basePdf.padding' must be a list of four numbers") from exc
        return BlankPdf(width=width, height=height, padding=padding)  # type: ignore[arg-type]

    if isinstance(raw, (bytes, bytearray)):
        data = bytes(raw)
    elif isinstance(raw, str):
        try:
            data, _ = decode_inline_data(raw)
        except ValueError as exc:
            raise ValidationError("'basePdf' must be a base64 encoded PDF or a data URI") from exc
    else:
        raise ValidationError(f"Unsupported 'basePdf' value of type {type(raw).__name__}")

    if data.lstrip()[: len(PDF_HEADER)] != PDF_HEADER:
        raise ValidationError("'basePdf' does not contain a PDF document")
    return PdfBytes(data=data)


def _parse_field(raw: Any, *, page: int, key: str | None = None) -> Field:
    if not isinstance(raw, Mapping):
        raise ValidationError(f"Field definitions on page {page + 1} must be objects", page=page)

    name = key if key is not None else raw.get("name")
    if not isinstance(name, str) or not name.strip():
        raise ValidationError(f"A field on page {page + 1} has no name", page=page)

    field_type = raw.get("type", "text")
    if not isinstance(field_type, str) or not field_type:
        raise ValidationError(f"Field '{name}' has an invalid type", field=name, page=page)

    content = coerce_input_value(raw.get("content"), field=name, page=page)
    attributes = {k: v for k, v in raw.items() if k not in _RESERVED_KEYS}
    return Field(
        name=name,
        type=field_type.lower(),
        content=content,
        attributes=MappingProxyType(attributes),
    )


def _parse_page(raw: Any, *, page: int) -> Page:
    if isinstance(raw, Mapping):
        fields = [_parse_field(value, page=page, key=key) for key, value in raw.items()]
    elif isinstance(raw, Sequence) and not isinstance(raw, (str, bytes)):
        fields = [_parse_field(value, page=page) for value in raw]
    else:
        raise ValidationError(f"Page {page + 1} must be a list or an object of fields", page=page)

    return Page(fields=tuple(fields))


def check_template(template: Template) -> Template:
    """Enforce the structural rules of a template: at least one page and
    non-empty field names that are unique within their page.
    """

    if not template.pages:
        raise ValidationError("Template has no pages")
    for index, page in enumerate(template.pages):
        seen: set[str] = set()
        for item in page:
            if not isinstance(item.name, str) or not item.name.strip():
                raise ValidationError(f"A field on page {index + 1} has no name", page=index)
            if not _is_encodable(item.name):
                raise ValidationError(
                    f"A field name on page {index + 1} contains characters that cannot be encoded", page=index
                )
            if item.name in seen:
                raise ValidationError(
                    f"Field name '{item.name}' is used twice on page {index + 1}",
                    field=item.name,
                    page=index,
                )
            seen.add(item.name)
    return template


def parse_template(payload: Any) -> Template:
    """Validate a pdfme style template payload and build a :class:`Template`.

    Accepts the ``{"basePdf": ..., "schemas": [...]}`` structure. Pages in
    ``schemas`` may either be lists of field objects carrying a ``name`` key
    or objects mapping field names to field definitions.
    """

    if isinstance(payload, Template):
        return check_template(payload)
    if not isinstance(payload, Mapping):
        raise ValidationError("Template must be a JSON object")

    schemas = payload.get("schemas")
    if schemas is None or payload.get("basePdf") in (None, ""):
        raise ValidationError("Template schema with basePdf and schemas is required")
    if not isinstance(schemas, Sequence) or isinstance(schemas, (str, bytes)):
        raise ValidationError("'schemas' must be a list of pages")
    if not schemas:
        raise ValidationError("Template has no pages")

    base_pdf = parse_base_pdf(payload.get("basePdf"))
    pages = tuple(_parse_page(raw, page=index) for index, raw in enumerate(schemas))
    return check_template(Template(base_pdf=base_pdf, pages=pages))


__all__ = [
    "PDF_HEADER",
    "ValidationError",
    "check_template",
    "coerce_input_value",
    "ensure_output_parent",
    "parse_base_pdf",
    "parse_template",
]
