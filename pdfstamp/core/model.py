"""Template data model shared by the pdfstamp tools.

A template is an ordered sequence of pages, each page an ordered sequence of
named fields. Layout and style attributes are kept as an opaque mapping and
handed to the renderer untouched. All objects are immutable: a template is an
input to a single request and is never modified by the pipeline.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Iterator, Mapping, Union

__all__ = [
    "BARCODE_TYPES",
    "SHAPE_TYPES",
    "FIELD_TYPES",
    "Field",
    "Page",
    "BlankPdf",
    "PdfBytes",
    "BasePdf",
    "Template",
    "InputSet",
]

BARCODE_TYPES = frozenset({"qrcode", "code128", "code39", "ean13", "ean8"})
SHAPE_TYPES = frozenset({"line", "rectangle", "ellipse"})
FIELD_TYPES = frozenset({"text", "image"}) | BARCODE_TYPES | SHAPE_TYPES

InputSet = dict[str, str]


@dataclass(frozen=True, slots=True)
class Field:
    """Named, typed slot on a page."""

    name: str
    type: str
    content: str = ""
    attributes: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))

    @property
    def is_image(self) -> bool:
        return self.type == "image"

    def attribute(self, key: str, default: Any = None) -> Any:
        return self.attributes.get(key, default)


@dataclass(frozen=True, slots=True)
class Page:
    fields: tuple[Field, ...]

    def __iter__(self) -> Iterator[Field]:
        return iter(self.fields)

    def __len__(self) -> int:
        return len(self.fields)

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(item.name for item in self.fields)


@dataclass(frozen=True, slots=True)
class BlankPdf:
    """Blank base page described by its size in millimetres."""

    width: float
    height: float
    padding: tuple[float, float, float, float] = (0.0, 0.0, 0.0, 0.0)


@dataclass(frozen=True, slots=True)
class PdfBytes:
    """Existing PDF document used as page background."""

    data: bytes = field(repr=False)


BasePdf = Union[BlankPdf, PdfBytes]


@dataclass(frozen=True, slots=True)
class Template:
    base_pdf: BasePdf
    pages: tuple[Page, ...]

    @property
    def page_count(self) -> int:
        return len(self.pages)

    def iter_fields(self) -> Iterator[tuple[int, Field]]:
        """Yield ``(page_index, field)`` pairs in template order."""

        for index, page in enumerate(self.pages):
            for item in page:
                yield index, item
