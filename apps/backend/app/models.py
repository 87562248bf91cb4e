"""Pydantic models describing the HTTP payloads of the pdfstamp service."""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class TemplatePayload(BaseModel):
    """Body of ``POST /generate-pdf``: a pdfme template plus optional inputs."""

    base_pdf: Any = Field(default=None, alias="basePdf")
    schemas: Any = None
    inputs: Optional[Union[Dict[str, Any], List[Dict[str, Any]]]] = None

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    def template(self) -> dict[str, Any]:
        return {"basePdf": self.base_pdf, "schemas": self.schemas}


class ErrorResponse(BaseModel):
    """JSON body returned for every failed request."""

    error: str
    details: Optional[str] = None
    stage: Optional[str] = None
    field: Optional[str] = None
    page: Optional[int] = None
    url: Optional[str] = None


class HealthResponse(BaseModel):
    status: str
