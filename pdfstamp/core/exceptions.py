"""Exceptions raised by the pdfstamp pipeline."""

from __future__ import annotations


class PdfStampError(RuntimeError):
    """Base class for all pdfstamp errors.

    Every error carries the pipeline ``stage`` it was raised from and, when
    known, the offending ``field`` name and zero-based ``page`` index so that
    callers can point at the part of the request that needs fixing.
    """

    stage: str = "pipeline"

    def __init__(
        self,
        message: str,
        *,
        stage: str | None = None,
        field: str | None = None,
        page: int | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if stage is not None:
            self.stage = stage
        self.field = field
        self.page = page

    def to_dict(self) -> dict[str, object]:
        payload: dict[str, object] = {"error": self.message, "stage": self.stage}
        if self.field is not None:
            payload["field"] = self.field
        if self.page is not None:
            payload["page"] = self.page
        return payload


class ValidationError(PdfStampError):
    """Raised when a template, input set or setting is malformed."""

    stage = "validate"


class AssetFetchError(PdfStampError):
    """Raised when a remote image referenced by a field cannot be fetched."""

    stage = "fetch"

    def __init__(
        self,
        message: str,
        *,
        url: str,
        field: str | None = None,
        page: int | None = None,
    ) -> None:
        super().__init__(message, field=field, page=page)
        self.url = url

    def to_dict(self) -> dict[str, object]:
        payload = super().to_dict()
        payload["url"] = self.url
        return payload


class RenderError(PdfStampError):
    """Raised when the renderer rejects a template or its resolved inputs."""

    stage = "render"


class ParseError(PdfStampError):
    """Raised when bytes handed to the metadata tools are not a readable PDF."""

    stage = "extract"


__all__ = [
    "PdfStampError",
    "ValidationError",
    "AssetFetchError",
    "RenderError",
    "ParseError",
]
