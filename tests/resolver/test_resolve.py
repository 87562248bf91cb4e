from __future__ import annotations

import pytest

from pdfstamp.core.exceptions import ValidationError
from pdfstamp.tools import load_builtin_plugins
from pdfstamp.tools.common.interfaces import PipelineContext
from pdfstamp.tools.common.pipeline import registry
from pdfstamp.tools.resolver import expand_inputs, flatten_inputs, resolve_inputs


def setup_module(module):
    load_builtin_plugins()


def _template(*pages):
    return {"basePdf": {"width": 210, "height": 297}, "schemas": [list(page) for page in pages]}


def test_single_page_body_input() -> None:
    template = _template([{"name": "name"}])

    assert resolve_inputs(template, {"name": "Alice"}) == [{"name": "Alice"}]


def test_precedence_query_over_body_over_default() -> None:
    template = _template([{"name": "a", "content": "da"}, {"name": "b", "content": "db"}, {"name": "c", "content": "dc"}, {"name": "d"}])

    resolved = resolve_inputs(template, {"a": "body-a", "b": "body-b"}, {"a": "query-a"})

    assert resolved == [{"a": "query-a", "b": "body-b", "c": "dc", "d": ""}]


def test_empty_values_fall_through_to_next_source() -> None:
    template = _template([{"name": "a", "content": "default"}])

    assert resolve_inputs(template, {"a": ""}, {"a": ""}) == [{"a": "default"}]


def test_every_page_gets_every_field_and_nothing_else() -> None:
    template = _template([{"name": "x"}, {"name": "y"}], [{"name": "x"}])

    resolved = resolve_inputs(template, {"x": "1", "unknown": "ignored"})

    assert resolved == [{"x": "1", "y": ""}, {"x": "1"}]
    assert [list(page) for page in resolved] == [["x", "y"], ["x"]]


def test_per_page_body_inputs_are_kept_separate() -> None:
    template = _template([{"name": "x"}], [{"name": "x"}], [{"name": "x", "content": "third"}])

    resolved = resolve_inputs(template, [{"x": "first"}, {"x": "second"}], {})

    assert resolved == [{"x": "first"}, {"x": "second"}, {"x": "third"}]


def test_scalar_inputs_are_coerced_to_strings() -> None:
    template = _template([{"name": "n"}, {"name": "flag"}, {"name": "none"}])

    assert resolve_inputs(template, {"n": 42, "flag": False, "none": None}) == [
        {"n": "42", "flag": "false", "none": ""}
    ]


def test_resolution_is_idempotent() -> None:
    template = _template([{"name": "a", "content": "x"}])
    first = resolve_inputs(template, {"a": "y"})

    assert resolve_inputs(template, first) == first


def test_malformed_body_inputs_raise() -> None:
    template = _template([{"name": "a"}])

    with pytest.raises(ValidationError) as excinfo:
        resolve_inputs(template, [{"a": "1"}, {"a": "2"}])
    assert excinfo.value.stage == "resolve"
    with pytest.raises(ValidationError):
        resolve_inputs(template, "not inputs")  # type: ignore[arg-type]
    with pytest.raises(ValidationError):
        resolve_inputs(template, {"a": ["nested"]})


def test_structural_errors_raise_before_resolution() -> None:
    with pytest.raises(ValidationError):
        resolve_inputs(_template([{"name": "a"}, {"name": "a"}]), {"a": "1"})


def test_flatten_and_expand_inputs() -> None:
    template = _template([{"name": "a"}, {"name": "b"}], [{"name": "a"}, {"name": "c"}])

    assert flatten_inputs([{"a": "1", "b": "2"}, {"a": "3", "c": "4"}]) == {"a": "1", "b": "2", "c": "4"}
    assert expand_inputs(template, {"a": "1", "c": "4"}) == [{"a": "1", "b": ""}, {"a": "1", "c": "4"}]


def test_resolve_tool_stores_inputs_on_context() -> None:
    context = PipelineContext(
        template=_template([{"name": "a"}]),
        config={"body_inputs": {"a": "body"}, "query_overrides": {"a": "query"}},
    )

    result = registry.create("resolve", context).run()

    assert result == [{"a": "query"}]
    assert context.inputs == result


def test_lone_surrogate_from_json_is_a_validation_error() -> None:
    import json

    template = _template([{"name": "name"}])

    with pytest.raises(ValidationError) as excinfo:
        resolve_inputs(template, json.loads('{"name": "a\\ud800b"}'))
    assert excinfo.value.field == "name"
