"""Read and write the document ``/Subject`` entry used as the metadata slot.

The embedder writes the slot as a pypdf incremental update: the original
document bytes are copied verbatim and only a new document information
dictionary is appended. The extractor returns the slot exactly as stored and
never interprets it.
"""

from __future__ import annotations

import io
import json
from typing import Any, Mapping, Sequence, Union

from pypdf import PdfReader, PdfWriter

from ...core.exceptions import ParseError, ValidationError
from ...core.utils import get_logger

LOGGER = get_logger("pdfstamp.tools.metadata")

SUBJECT_KEY = "/Subject"

MetadataPayload = Union[str, Mapping[str, str], Sequence[Mapping[str, str]]]


def _dump(data: Any) -> str:
    return json.dumps(data, ensure_ascii=False, sort_keys=True, separators=(",", ":"))


def serialize_inputs(payload: MetadataPayload) -> str:
    """Serialize a metadata payload into the string stored in the slot.

    Strings are stored unchanged. A single input set, or a list holding one
    input set, becomes a compact JSON object; a list of several page input
    sets becomes a JSON array. Keys are sorted so equal input sets always
    produce the same string.
    """

    if isinstance(payload, str):
        subject = payload
    elif isinstance(payload, Mapping):
        subject = _dump(dict(payload))
    elif isinstance(payload, Sequence) and all(isinstance(page, Mapping) for page in payload):
        pages = [dict(page) for page in payload]
        subject = _dump(pages[0] if len(pages) == 1 else pages)
    else:
        raise ValidationError(
            f"Metadata payload must be text or input sets, got {type(payload).__name__}",
            stage="embed",
        )
    try:
        subject.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise ValidationError("Metadata payload contains characters that cannot be encoded", stage="embed") from exc
    return subject


def _open_reader(data: bytes, *, stage: str) -> PdfReader:
    if not data:
        raise ParseError("Document is empty", stage=stage)
    try:
        reader = PdfReader(io.BytesIO(data))
        if reader.is_encrypted:
            reader.decrypt("")
        reader.metadata  # noqa: B018 - forces the trailer and info dictionary to load
    except Exception as exc:
        raise ParseError(f"Failed to parse PDF document: {exc}", stage=stage) from exc
    return reader


def embed_metadata(document: bytes, payload: MetadataPayload) -> bytes:
    """Return ``document`` with its subject slot set to ``payload``."""

    subject = serialize_inputs(payload)
    reader = _open_reader(document, stage="embed")
    if reader.is_encrypted:
        raise ParseError("Cannot embed metadata into an encrypted PDF", stage="embed")

    writer = PdfWriter(reader, incremental=True)
    writer.add_metadata({SUBJECT_KEY: subject})
    output = io.BytesIO()
    writer.write(output)
    LOGGER.debug("Embedded %d character subject into %d byte document", len(subject), len(document))
    return output.getvalue()


def extract_metadata(document: bytes) -> str:
    """Return the subject slot of ``document``, or ``""`` when it was never set."""

    reader = _open_reader(document, stage="extract")
    info = reader.metadata
    if info is None:
        return ""
    subject = info.subject
    return subject if subject is not None else ""


__all__ = ["SUBJECT_KEY", "MetadataPayload", "serialize_inputs", "embed_metadata", "extract_metadata"]
