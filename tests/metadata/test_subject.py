from __future__ import annotations

import json

import pytest

from pdfstamp.core.exceptions import ParseError, ValidationError
from pdfstamp.tools import load_builtin_plugins
from pdfstamp.tools.common.interfaces import PipelineContext
from pdfstamp.tools.common.pipeline import registry
from pdfstamp.tools.metadata import embed_metadata, extract_metadata, serialize_inputs
from pdfstamp.tools.renderer import render_document


def setup_module(module):
    load_builtin_plugins()


def test_serialize_inputs_shapes() -> None:
    assert serialize_inputs({"name": "Alice"}) == '{"name":"Alice"}'
    assert serialize_inputs([{"b": "2", "a": "1"}]) == '{"a":"1","b":"2"}'
    assert serialize_inputs([{"a": "1"}, {"a": "2"}]) == '[{"a":"1"},{"a":"2"}]'
    assert serialize_inputs("plain text\nsecond line") == "plain text\nsecond line"
    assert serialize_inputs({"city": "Zürich"}) == '{"city":"Zürich"}'
    with pytest.raises(ValidationError):
        serialize_inputs(42)  # type: ignore[arg-type]


def test_round_trip_through_rendered_document(blank_template) -> None:
    inputs = [{"name": "Alice"}]

    document = embed_metadata(render_document(blank_template, inputs), inputs)

    assert extract_metadata(document) == '{"name":"Alice"}'
    assert json.loads(extract_metadata(document)) == {"name": "Alice"}


def test_multi_page_round_trip(two_page_template) -> None:
    inputs = [{"title": "T", "name": "Ünïcødé"}, {"footer": "f"}]

    document = embed_metadata(render_document(two_page_template, inputs), inputs)

    assert extract_metadata(document) == serialize_inputs(inputs)
    assert json.loads(extract_metadata(document)) == inputs


def test_embedding_appends_to_original_bytes(pdf_bytes_factory) -> None:
    original = pdf_bytes_factory(2)

    embedded = embed_metadata(original, "hello")

    assert embedded.startswith(original)
    assert len(embedded) > len(original)
    assert extract_metadata(embedded) == "hello"


def test_embedding_replaces_existing_subject(pdf_bytes_factory) -> None:
    document = pdf_bytes_factory(1, subject="old")

    assert extract_metadata(embed_metadata(document, "new")) == "new"


def test_missing_subject_returns_empty_string(pdf_bytes_factory) -> None:
    assert extract_metadata(pdf_bytes_factory(1)) == ""


@pytest.mark.parametrize("data", [b"", b"this is not a pdf", b"%PDF-1.7\ngarbage"])
def test_unreadable_documents_raise_parse_error(data: bytes) -> None:
    with pytest.raises(ParseError):
        extract_metadata(data)
    with pytest.raises(ParseError) as excinfo:
        embed_metadata(data, "x")
    assert excinfo.value.stage == "embed"


def test_metadata_tools_through_registry(pdf_bytes_factory) -> None:
    context = PipelineContext(document=pdf_bytes_factory(1), inputs=[{"a": "1"}])

    registry.create("embed_metadata", context).run()
    subject = registry.create("extract_metadata", context).run()

    assert subject == '{"a":"1"}'
    assert context.resources["result"] == subject


def test_unencodable_payload_is_rejected() -> None:
    with pytest.raises(ValidationError, match="cannot be encoded"):
        serialize_inputs("a\ud800b")
    with pytest.raises(ValidationError):
        serialize_inputs({"name": "a\udfffb"})
