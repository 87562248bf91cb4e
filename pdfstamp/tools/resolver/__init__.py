"""Input resolution exposed through the pdfstamp tools namespace."""

from __future__ import annotations

from .inputs import BodyInputs, expand_inputs, flatten_inputs, resolve_inputs

__all__ = ["BodyInputs", "resolve_inputs", "flatten_inputs", "expand_inputs"]
