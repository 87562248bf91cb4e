from __future__ import annotations

import base64
import io
from pathlib import Path
from typing import Any, Callable
import sys

import pytest
from PIL import Image
from pypdf import PdfWriter

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

A4_POINTS = (595.28, 841.89)


def _text_field(name: str, content: str = "", **extra: Any) -> dict[str, Any]:
    field: dict[str, Any] = {
        "name": name,
        "type": "text",
        "content": content,
        "position": {"x": 20, "y": 20},
        "width": 120,
        "height": 12,
        "fontSize": 12,
    }
    field.update(extra)
    return field


@pytest.fixture()
def text_field() -> Callable[..., dict[str, Any]]:
    return _text_field


@pytest.fixture()
def pdf_bytes_factory() -> Callable[..., bytes]:
    def _create(pages: int = 1, *, subject: str | None = None) -> bytes:
        writer = PdfWriter()
        for _ in range(pages):
            writer.add_blank_page(width=A4_POINTS[0], height=A4_POINTS[1])
        if subject is not None:
            writer.add_metadata({"/Subject": subject})
        buffer = io.BytesIO()
        writer.write(buffer)
        return buffer.getvalue()

    return _create


@pytest.fixture()
def blank_template() -> dict[str, Any]:
    return {
        "basePdf": {"width": 210, "height": 297, "padding": [0, 0, 0, 0]},
        "schemas": [[_text_field("name")]],
    }


@pytest.fixture()
def two_page_template(pdf_bytes_factory: Callable[..., bytes]) -> dict[str, Any]:
    encoded = base64.b64encode(pdf_bytes_factory(2)).decode("ascii")
    return {
        "basePdf": f"data:application/pdf;base64,{encoded}",
        "schemas": [
            [_text_field("title", "Untitled"), _text_field("name", position={"x": 20, "y": 40})],
            [_text_field("footer", "page two")],
        ],
    }


@pytest.fixture()
def png_bytes() -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (8, 8), (200, 30, 30)).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture()
def image_template() -> dict[str, Any]:
    return {
        "basePdf": {"width": 210, "height": 297},
        "schemas": [
            [
                _text_field("name"),
                {"name": "logo", "type": "image", "position": {"x": 150, "y": 10}, "width": 40, "height": 20},
            ]
        ],
    }


@pytest.fixture()
def sample_pdf(tmp_path: Path, pdf_bytes_factory: Callable[..., bytes]) -> Path:
    pdf_path = tmp_path / "sample.pdf"
    pdf_path.write_bytes(pdf_bytes_factory(1, subject='{"name":"Alice"}'))
    return pdf_path
