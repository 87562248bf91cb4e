"""Remote asset resolution exposed through the pdfstamp tools namespace."""

from __future__ import annotations

from .fetcher import AssetFailure, FetchResult, fetch_assets

__all__ = ["AssetFailure", "FetchResult", "fetch_assets"]
