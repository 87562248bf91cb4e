"""Namespace for pluggable pdfstamp tools."""

from __future__ import annotations

from .common.pipeline import registry


def load_builtin_plugins() -> None:
    from .resolver import resolve  # noqa: F401  # register the resolve tool
    from .assets import fetch  # noqa: F401
    from .renderer import render  # noqa: F401
    from .metadata import embed, extract  # noqa: F401
    from .text import adapter  # noqa: F401


__all__ = ["registry", "load_builtin_plugins"]
