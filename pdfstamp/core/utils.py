"""Utilities shared by pdfstamp tools."""

from __future__ import annotations

import base64
import binascii
import logging
import re
from pathlib import Path
from typing import Any

_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
_DATA_URI_PATTERN = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)?(?P<params>(;[^;,]*)*?);base64,(?P<data>.*)$", re.DOTALL)
_REMOTE_PREFIXES = ("http://", "https://")


def get_logger(name: str) -> logging.Logger:
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(_LOG_FORMAT)
        handler.setFormatter(formatter)
        logger.addHandler(handler)
        logger.propagate = False
    return logger


def configure_logging(level: str | int = logging.INFO) -> None:
    """Apply ``level`` to every pdfstamp logger."""

    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
    root = get_logger("pdfstamp")
    root.setLevel(level)
    for name in list(logging.root.manager.loggerDict):
        if name.startswith("pdfstamp."):
            logging.getLogger(name).setLevel(level)


def resolve_path(path: str | Path | None) -> Path:
    if path is None:
        raise ValueError("Path must not be None")
    resolved = Path(path).expanduser().resolve()
    return resolved


def is_remote_reference(value: str) -> bool:
    return value.strip().lower().startswith(_REMOTE_PREFIXES)


def to_data_uri(payload: bytes, mime_type: str) -> str:
    encoded = base64.b64encode(payload).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"


def decode_inline_data(value: str) -> tuple[bytes, str | None]:
    """Decode a ``data:`` URI or bare base64 string.

    Returns the decoded bytes and the declared MIME type (``None`` for bare
    base64). Raises :class:`ValueError` when the value is not valid base64.
    """

    text = value.strip()
    mime_type: str | None = None
    match = _DATA_URI_PATTERN.match(text)
    if match:
        mime_type = match.group("mime")
        text = match.group("data")
    elif text.startswith("data:"):
        raise ValueError("Only base64 encoded data URIs are supported")
    try:
        return base64.b64decode("".join(text.split()), validate=True), mime_type
    except (binascii.Error, ValueError) as exc:
        raise ValueError("Value is not valid base64 data") from exc


def update_dict(target: dict[str, Any], **updates: Any) -> dict[str, Any]:
    target.update({k: v for k, v in updates.items() if v is not None})
    return target
