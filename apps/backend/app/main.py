"""FastAPI application exposing the pdfstamp pipeline over HTTP."""

from __future__ import annotations

import json
from json import JSONDecodeError

import pydantic
from fastapi import FastAPI, File, Request, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.openapi.docs import get_swagger_ui_html
from fastapi.responses import HTMLResponse, JSONResponse, PlainTextResponse, RedirectResponse, Response

from pdfstamp import (
    AssetFetchError,
    PdfStampError,
    Settings,
    ValidationError,
    extract_metadata,
    generate_document,
    render_text,
)
from pdfstamp.core.utils import configure_logging, get_logger

from .models import ErrorResponse, HealthResponse, TemplatePayload

LOGGER = get_logger("pdfstamp.http")

ASSET_FAILURE_HEADER = "X-PdfStamp-Asset-Failures"
PAGE_COUNT_HEADER = "X-PdfStamp-Page-Count"

_ERROR_SUMMARIES = {
    "fetch": "Failed to fetch template asset",
    "render": "Failed to generate PDF",
    "embed": "Failed to generate PDF",
    "extract": "Failed to parse PDF file",
}
_ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    413: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}

app = FastAPI(title="pdfstamp", version="1.0.0", description="Template driven PDF generation service")
app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"])
app.state.settings = Settings.from_env()
app.state.http_client = None
configure_logging(app.state.settings.log_level)


class PayloadTooLarge(Exception):
    def __init__(self, limit: int) -> None:
        super().__init__(f"Request body exceeds the {limit} byte limit")
        self.limit = limit


def _settings(request: Request) -> Settings:
    return request.app.state.settings


def _status_for(exc: PdfStampError) -> int:
    if isinstance(exc, AssetFetchError):
        return 502
    return 400


def _error_body(exc: PdfStampError) -> dict[str, object]:
    body = exc.to_dict()
    summary = _ERROR_SUMMARIES.get(exc.stage)
    if summary is not None:
        body["details"] = body["error"]
        body["error"] = summary
    return ErrorResponse(**body).model_dump(exclude_none=True)


@app.exception_handler(PdfStampError)
async def pdfstamp_error_handler(request: Request, exc: PdfStampError) -> JSONResponse:
    status = _status_for(exc)
    LOGGER.info("%s %s rejected at stage %s: %s", request.method, request.url.path, exc.stage, exc)
    return JSONResponse(status_code=status, content=_error_body(exc))


@app.exception_handler(PayloadTooLarge)
async def payload_too_large_handler(request: Request, exc: PayloadTooLarge) -> JSONResponse:
    return JSONResponse(status_code=413, content={"error": "Payload too large", "details": str(exc)})


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    LOGGER.error("%s %s failed", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"error": "Internal server error", "details": str(exc)})


async def _read_body(request: Request, limit: int) -> bytes:
    declared = request.headers.get("content-length")
    if declared is not None and declared.isdigit() and int(declared) > limit:
        raise PayloadTooLarge(limit)
    chunks: list[bytes] = []
    total = 0
    async for chunk in request.stream():
        total += len(chunk)
        if total > limit:
            raise PayloadTooLarge(limit)
        chunks.append(chunk)
    return b"".join(chunks)


def _pdf_response(document: bytes, filename: str, headers: dict[str, str] | None = None) -> Response:
    return Response(
        content=document,
        media_type="application/pdf",
        headers={"Content-Disposition": f"attachment; filename={filename}", **(headers or {})},
    )


@app.get("/", include_in_schema=False)
async def index() -> RedirectResponse:
    return RedirectResponse(url="/docs")


@app.get("/api-docs", include_in_schema=False)
async def legacy_swagger_ui() -> HTMLResponse:
    """Serve Swagger UI on the path older clients bookmarked."""

    return get_swagger_ui_html(openapi_url=app.openapi_url, title=f"{app.title} - Swagger UI")


@app.get("/health", response_model=HealthResponse)
async def health() -> dict[str, str]:
    """Lightweight health endpoint for uptime checks."""
    return {"status": "ok"}


@app.post(
    "/generate-pdf",
    response_class=Response,
    responses={
        200: {"content": {"application/pdf": {}}, "description": "Generated PDF"},
        502: {"model": ErrorResponse},
        **_ERROR_RESPONSES,
    },
    openapi_extra={
        "requestBody": {
            "required": True,
            "content": {"application/json": {"schema": TemplatePayload.model_json_schema(by_alias=True)}},
        }
    },
)
async def generate_pdf(request: Request) -> Response:
    """Fill the posted template and return the PDF.

    Query string parameters override the values found in ``inputs`` for every
    page. The resolved inputs are stored in the PDF's ``Subject`` entry.
    """

    settings = _settings(request)
    raw = await _read_body(request, settings.max_body_bytes)
    try:
        body = json.loads(raw) if raw.strip() else None
    except (JSONDecodeError, UnicodeDecodeError) as exc:
        raise ValidationError(f"Request body must be valid JSON: {exc}") from exc
    if not isinstance(body, dict):
        raise ValidationError("Template schema with basePdf and schemas is required")
    try:
        payload = TemplatePayload.model_validate(body)
    except pydantic.ValidationError as exc:
        raise ValidationError(f"'inputs' must be an object or a list of objects: {exc.errors()[0]['msg']}") from exc

    result = await generate_document(
        payload.template(),
        payload.inputs,
        dict(request.query_params),
        settings=settings,
        client=request.app.state.http_client,
    )

    headers = {PAGE_COUNT_HEADER: str(result.page_count)}
    if result.asset_failures:
        headers[ASSET_FAILURE_HEADER] = "; ".join(failure.describe() for failure in result.asset_failures)
    return _pdf_response(result.document, "generated.pdf", headers)


@app.post(
    "/protokoll-pdf",
    response_class=Response,
    responses={200: {"content": {"application/pdf": {}}, "description": "Generated PDF"}, **_ERROR_RESPONSES},
    openapi_extra={
        "requestBody": {"required": True, "content": {"text/plain": {"schema": {"type": "string"}}}}
    },
)
async def protokoll_pdf(request: Request) -> Response:
    """Render a plain text body on the built-in text template."""

    settings = _settings(request)
    raw = await _read_body(request, settings.max_body_bytes)
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise ValidationError("Text content must be UTF-8 encoded") from exc
    if not text.strip():
        raise ValidationError("Text content is required in the request body")

    document = await run_in_threadpool(render_text, text)
    return _pdf_response(document, "protokoll.pdf")


@app.post(
    "/extract-metadata",
    response_class=PlainTextResponse,
    responses={200: {"content": {"text/plain": {}}, "description": "Embedded subject"}, **_ERROR_RESPONSES},
)
async def extract_pdf_metadata(
    request: Request,
    pdf: UploadFile | None = File(None, description="PDF file to inspect"),
) -> PlainTextResponse:
    """Return the ``Subject`` metadata of an uploaded PDF as plain text."""

    if pdf is None:
        raise ValidationError('No PDF file provided. Please upload a PDF file with field name "pdf".')

    limit = _settings(request).max_upload_bytes
    contents = await pdf.read(limit + 1)
    if len(contents) > limit:
        raise PayloadTooLarge(limit)

    subject = await run_in_threadpool(extract_metadata, contents)
    return PlainTextResponse(subject)


def run() -> None:  # pragma: no cover - process entry point
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=app.state.settings.port)


if __name__ == "__main__":  # pragma: no cover
    run()
