"""Merge field defaults, body inputs and query overrides into per-page input sets."""

from __future__ import annotations

from typing import Any, Mapping, Sequence

from ...core.exceptions import ValidationError
from ...core.model import InputSet, Template
from ...core.validator import coerce_input_value, parse_template

BodyInputs = Mapping[str, Any] | Sequence[Mapping[str, Any]] | None


def _normalise_body(template: Template, body_inputs: BodyInputs) -> tuple[dict[str, Any], list[Mapping[str, Any]]]:
    """Split ``body_inputs`` into a flat mapping and a per-page list."""

    if body_inputs is None:
        return {}, []
    if isinstance(body_inputs, Mapping):
        return dict(body_inputs), []
    if isinstance(body_inputs, Sequence) and not isinstance(body_inputs, (str, bytes)):
        if len(body_inputs) > template.page_count:
            raise ValidationError(
                f"Received inputs for {len(body_inputs)} pages but the template has "
                f"{template.page_count}",
                stage="resolve",
            )
        pages: list[Mapping[str, Any]] = []
        for index, entry in enumerate(body_inputs):
            if entry is None:
                entry = {}
            if not isinstance(entry, Mapping):
                raise ValidationError(
                    f"Inputs for page {index + 1} must be an object", stage="resolve", page=index
                )
            pages.append(entry)
        return {}, pages
    raise ValidationError("'inputs' must be an object or a list of objects", stage="resolve")


def _pick(value: Any, *, field: str, page: int) -> str:
    if value is None:
        return ""
    return coerce_input_value(value, field=field, page=page)


def resolve_inputs(
    template: Template | Mapping[str, Any],
    body_inputs: BodyInputs = None,
    query_overrides: Mapping[str, Any] | None = None,
) -> list[InputSet]:
    """Return one fully resolved input set per template page.

    For every field the first non-empty value wins, in order: query override,
    body input for the field's page, flat body input, the field's default
    content. A field with none of these resolves to ``""``. Keys that do not
    name a template field are ignored.
    """

    template = parse_template(template)
    overrides = dict(query_overrides or {})
    flat_body, page_bodies = _normalise_body(template, body_inputs)

    resolved: list[InputSet] = []
    for index, page in enumerate(template.pages):
        page_body = page_bodies[index] if index < len(page_bodies) else {}
        values: InputSet = {}
        for item in page:
            candidates = (
                overrides.get(item.name),
                page_body.get(item.name),
                flat_body.get(item.name),
                item.content,
            )
            values[item.name] = ""
            for candidate in candidates:
                text = _pick(candidate, field=item.name, page=index)
                if text:
                    values[item.name] = text
                    break
        resolved.append(values)
    return resolved


def flatten_inputs(inputs: Sequence[Mapping[str, str]]) -> InputSet:
    """Collapse per-page input sets into a single mapping.

    When a name appears on several pages the first page wins.
    """

    flat: InputSet = {}
    for page in inputs:
        for name, value in page.items():
            flat.setdefault(name, value)
    return flat


def expand_inputs(template: Template | Mapping[str, Any], flat: Mapping[str, Any]) -> list[InputSet]:
    """Spread a flat mapping over every page of ``template``."""

    return resolve_inputs(template, dict(flat))


__all__ = ["BodyInputs", "resolve_inputs", "flatten_inputs", "expand_inputs"]
