"""Metadata slot helpers exposed through the pdfstamp tools namespace."""

from __future__ import annotations

from .subject import SUBJECT_KEY, MetadataPayload, embed_metadata, extract_metadata, serialize_inputs

__all__ = ["SUBJECT_KEY", "MetadataPayload", "serialize_inputs", "embed_metadata", "extract_metadata"]
