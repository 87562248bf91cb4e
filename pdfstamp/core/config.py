"""Runtime configuration for pdfstamp."""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Any, Literal, Mapping

from .exceptions import ValidationError
from .utils import update_dict

AssetPolicy = Literal["fail", "fallback"]
ASSET_POLICIES: tuple[str, ...] = ("fail", "fallback")

MB = 1024 * 1024


def _read_int(env: Mapping[str, str], key: str, default: int) -> int:
    raw = env.get(key)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ValidationError(f"{key} must be an integer, got {raw!r}") from exc
    if value <= 0:
        raise ValidationError(f"{key} must be positive, got {value}")
    return value


def _read_float(env: Mapping[str, str], key: str, default: float) -> float:
    raw = env.get(key)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise ValidationError(f"{key} must be a number, got {raw!r}") from exc
    if value <= 0:
        raise ValidationError(f"{key} must be positive, got {value}")
    return value


def _check_policy(value: str) -> AssetPolicy:
    policy = value.strip().lower()
    if policy not in ASSET_POLICIES:
        raise ValidationError(
            f"Asset failure policy must be one of {', '.join(ASSET_POLICIES)}, got {value!r}"
        )
    return policy  # type: ignore[return-value]


@dataclass(frozen=True)
class Settings:
    """Service configuration.

    ``asset_policy`` selects what happens when a remote image cannot be
    fetched: ``"fail"`` aborts the request with :class:`AssetFetchError`,
    ``"fallback"`` renders the field empty and reports the failure.
    """

    port: int = 6439
    log_level: str = "INFO"
    max_body_bytes: int = 50 * MB
    max_upload_bytes: int = 10 * MB
    asset_timeout: float = 10.0
    max_asset_bytes: int = 10 * MB
    asset_policy: AssetPolicy = "fail"

    def __post_init__(self) -> None:
        _check_policy(self.asset_policy)

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> "Settings":
        source = os.environ if env is None else env
        return cls(
            port=_read_int(source, "PORT", cls.port),
            log_level=source.get("PDFSTAMP_LOG_LEVEL", cls.log_level).upper(),
            max_body_bytes=_read_int(source, "PDFSTAMP_MAX_BODY_BYTES", cls.max_body_bytes),
            max_upload_bytes=_read_int(source, "PDFSTAMP_MAX_UPLOAD_BYTES", cls.max_upload_bytes),
            asset_timeout=_read_float(source, "PDFSTAMP_ASSET_TIMEOUT", cls.asset_timeout),
            max_asset_bytes=_read_int(source, "PDFSTAMP_MAX_ASSET_BYTES", cls.max_asset_bytes),
            asset_policy=_check_policy(source.get("PDFSTAMP_ASSET_POLICY", cls.asset_policy)),
        )

    def with_overrides(self, **overrides: Any) -> "Settings":
        """Return a copy with every non-``None`` override applied."""

        return replace(self, **update_dict({}, **overrides))


__all__ = ["ASSET_POLICIES", "AssetPolicy", "Settings"]
