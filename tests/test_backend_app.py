from __future__ import annotations

import json

import httpx
import pytest
from fastapi.testclient import TestClient

from pdfstamp import Settings, extract_metadata

from apps.backend.app.main import ASSET_FAILURE_HEADER, app


client = TestClient(app)


@pytest.fixture()
def settings_override():
    original = app.state.settings

    def _apply(**overrides) -> None:
        app.state.settings = original.with_overrides(**overrides)

    yield _apply
    app.state.settings = original
    app.state.http_client = None


def test_health_and_docs_redirect() -> None:
    assert client.get("/health").json() == {"status": "ok"}
    response = client.get("/", follow_redirects=False)
    assert response.status_code in (302, 307)
    assert response.headers["location"] == "/docs"


def test_generate_pdf_embeds_resolved_inputs(blank_template) -> None:
    blank_template["inputs"] = {"name": "Alice"}

    response = client.post("/generate-pdf", json=blank_template)

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/pdf"
    assert "generated.pdf" in response.headers["content-disposition"]
    assert response.headers["x-pdfstamp-page-count"] == "1"
    assert extract_metadata(response.content) == '{"name":"Alice"}'


def test_query_parameters_override_body(blank_template) -> None:
    blank_template["inputs"] = {"name": "Alice"}

    response = client.post("/generate-pdf", params={"name": "Bob"}, json=blank_template)

    assert extract_metadata(response.content) == '{"name":"Bob"}'


def test_generate_pdf_requires_template() -> None:
    response = client.post("/generate-pdf", json={"inputs": {"name": "x"}})

    assert response.status_code == 400
    assert response.json()["error"] == "Template schema with basePdf and schemas is required"


def test_generate_pdf_rejects_invalid_json() -> None:
    response = client.post("/generate-pdf", content=b"{not json", headers={"content-type": "application/json"})

    assert response.status_code == 400
    assert response.json()["stage"] == "validate"


def test_render_errors_map_to_400(blank_template) -> None:
    blank_template["schemas"][0][0]["type"] = "signature"

    response = client.post("/generate-pdf", json=blank_template)

    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "Failed to generate PDF"
    assert "Unsupported field type" in body["details"]
    assert body["stage"] == "render"
    assert body["field"] == "name"


def test_unreachable_asset_maps_to_502(image_template, settings_override) -> None:
    settings_override()
    app.state.http_client = httpx.AsyncClient(
        transport=httpx.MockTransport(lambda request: httpx.Response(503))
    )
    image_template["inputs"] = {"logo": "https://down.example/logo.png"}

    response = client.post("/generate-pdf", json=image_template)

    assert response.status_code == 502
    body = response.json()
    assert body["stage"] == "fetch"
    assert body["field"] == "logo"
    assert body["url"] == "https://down.example/logo.png"


def test_fallback_policy_reports_failures_in_header(image_template, settings_override) -> None:
    settings_override(asset_policy="fallback")
    app.state.http_client = httpx.AsyncClient(
        transport=httpx.MockTransport(lambda request: httpx.Response(404))
    )
    image_template["inputs"] = {"name": "Ann", "logo": "https://down.example/logo.png"}

    response = client.post("/generate-pdf", json=image_template)

    assert response.status_code == 200
    assert response.headers[ASSET_FAILURE_HEADER] == "logo@1: HTTP 404"
    assert json.loads(extract_metadata(response.content))["logo"] == "https://down.example/logo.png"


def test_oversized_body_is_rejected(blank_template, settings_override) -> None:
    settings_override(max_body_bytes=64)

    response = client.post("/generate-pdf", json=blank_template)

    assert response.status_code == 413


def test_protokoll_pdf_round_trip() -> None:
    text = "Protokoll\r\n  Punkt 1  \r\nPunkt 2"

    response = client.post("/protokoll-pdf", content=text.encode("utf-8"), headers={"content-type": "text/plain"})

    assert response.status_code == 200
    assert "protokoll.pdf" in response.headers["content-disposition"]
    assert extract_metadata(response.content) == "Protokoll\nPunkt 1\nPunkt 2"


def test_protokoll_pdf_requires_text() -> None:
    response = client.post("/protokoll-pdf", content=b"  ", headers={"content-type": "text/plain"})

    assert response.status_code == 400
    assert response.json()["error"] == "Text content is required in the request body"


def test_extract_metadata_endpoint(sample_pdf) -> None:
    files = {"pdf": ("sample.pdf", sample_pdf.read_bytes(), "application/pdf")}

    response = client.post("/extract-metadata", files=files)

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/plain")
    assert response.text == '{"name":"Alice"}'


def test_extract_metadata_without_subject_returns_empty(pdf_bytes_factory) -> None:
    files = {"pdf": ("blank.pdf", pdf_bytes_factory(1), "application/pdf")}

    response = client.post("/extract-metadata", files=files)

    assert response.status_code == 200
    assert response.text == ""


def test_extract_metadata_errors() -> None:
    missing = client.post("/extract-metadata", data={"other": "x"})
    assert missing.status_code == 400
    assert 'field name "pdf"' in missing.json()["error"]

    garbage = client.post("/extract-metadata", files={"pdf": ("x.pdf", b"garbage", "application/pdf")})
    assert garbage.status_code == 400
    assert garbage.json()["error"] == "Failed to parse PDF file"


def test_oversized_upload_is_rejected(settings_override, pdf_bytes_factory) -> None:
    settings_override(max_upload_bytes=32)

    response = client.post("/extract-metadata", files={"pdf": ("big.pdf", pdf_bytes_factory(1), "application/pdf")})

    assert response.status_code == 413


def test_unexpected_errors_map_to_500(monkeypatch: pytest.MonkeyPatch) -> None:
    import apps.backend.app.main as backend

    def _boom(text: str) -> bytes:
        raise RuntimeError("boom")

    monkeypatch.setattr(backend, "render_text", _boom)
    failing_client = TestClient(app, raise_server_exceptions=False)

    response = failing_client.post("/protokoll-pdf", content=b"text", headers={"content-type": "text/plain"})

    assert response.status_code == 500
    assert response.json()["error"] == "Internal server error"


def test_unencodable_input_maps_to_400(blank_template) -> None:
    blank_template["inputs"] = {"name": "a\ud800b"}

    response = client.post(
        "/generate-pdf", content=json.dumps(blank_template).encode("ascii"), headers={"content-type": "application/json"}
    )

    assert response.status_code == 400
    assert response.json()["field"] == "name"


def test_chunked_body_over_limit_is_rejected(settings_override) -> None:
    settings_override(max_body_bytes=64)

    def chunks():
        for _ in range(4):
            yield b"x" * 40

    response = client.post("/protokoll-pdf", content=chunks(), headers={"content-type": "text/plain"})

    assert response.status_code == 413
