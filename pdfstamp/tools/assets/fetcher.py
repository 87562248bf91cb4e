"""Resolve remote image references into inline data URIs.

Every ``image`` field whose resolved value is an ``http(s)`` URL is fetched
concurrently with a shared :class:`httpx.AsyncClient`. All fetches are joined
before :func:`fetch_assets` returns, so the input sets it hands back never
contain a remote reference.
"""

from __future__ import annotations

import asyncio
import mimetypes
from dataclasses import dataclass, field
from typing import Any, Mapping, Sequence
from urllib.parse import urlparse

import httpx

from ...core.config import Settings
from ...core.exceptions import AssetFetchError, ValidationError
from ...core.model import InputSet, Template
from ...core.utils import get_logger, is_remote_reference, to_data_uri
from ...core.validator import parse_template

LOGGER = get_logger("pdfstamp.tools.assets")

DEFAULT_MIME_TYPE = "application/octet-stream"


class AssetTooLargeError(Exception):
    """Raised internally when a response body exceeds the configured cap."""


@dataclass(frozen=True, slots=True)
class AssetFailure:
    page: int
    field: str
    url: str
    reason: str

    def describe(self) -> str:
        return f"{self.field}@{self.page + 1}: {self.reason}"


@dataclass(slots=True)
class FetchResult:
    inputs: list[InputSet]
    failures: list[AssetFailure] = field(default_factory=list)
    fetched: int = 0

    @property
    def ok(self) -> bool:
        return not self.failures


@dataclass(frozen=True, slots=True)
class _Target:
    page: int
    field: str
    url: str


def _guess_mime_type(url: str, header: str | None) -> str:
    if header:
        declared = header.split(";", 1)[0].strip().lower()
        if declared and declared != DEFAULT_MIME_TYPE:
            return declared
    guessed, _ = mimetypes.guess_type(urlparse(url).path)
    return guessed or DEFAULT_MIME_TYPE


async def _download(client: httpx.AsyncClient, url: str, max_bytes: int) -> tuple[bytes, str]:
    async with client.stream("GET", url, follow_redirects=True) as response:
        response.raise_for_status()
        chunks: list[bytes] = []
        total = 0
        async for chunk in response.aiter_bytes():
            total += len(chunk)
            if total > max_bytes:
                raise AssetTooLargeError(f"response exceeds {max_bytes} bytes")
            chunks.append(chunk)
        return b"".join(chunks), _guess_mime_type(url, response.headers.get("content-type"))


def _describe_error(exc: BaseException) -> str:
    if isinstance(exc, httpx.HTTPStatusError):
        return f"HTTP {exc.response.status_code}"
    if isinstance(exc, httpx.TimeoutException):
        return "timed out"
    if isinstance(exc, httpx.InvalidURL):
        return "invalid URL"
    return str(exc) or type(exc).__name__


def _collect_targets(template: Template, inputs: Sequence[Mapping[str, str]]) -> list[_Target]:
    targets: list[_Target] = []
    for page, item in template.iter_fields():
        if not item.is_image:
            continue
        value = inputs[page].get(item.name, "")
        if value and is_remote_reference(value):
            targets.append(_Target(page=page, field=item.name, url=value.strip()))
    return targets


async def fetch_assets(
    template: Template | Mapping[str, Any],
    inputs: Sequence[Mapping[str, str]],
    *,
    settings: Settings | None = None,
    client: httpx.AsyncClient | None = None,
) -> FetchResult:
    """Inline every remote image reference found in ``inputs``.

    With the ``"fail"`` policy the first failing field (in template order)
    raises :class:`AssetFetchError`. With ``"fallback"`` failing fields are
    emptied and listed in :attr:`FetchResult.failures`.
    """

    template = parse_template(template)
    settings = settings or Settings()
    if len(inputs) != template.page_count:
        raise ValidationError(
            f"Expected input sets for {template.page_count} page(s), got {len(inputs)}",
            stage="fetch",
        )

    resolved = [dict(page) for page in inputs]
    targets = _collect_targets(template, resolved)
    if not targets:
        return FetchResult(inputs=resolved)

    LOGGER.debug("Fetching %d remote asset(s)", len(targets))
    owns_client = client is None
    if client is None:
        client = httpx.AsyncClient(timeout=httpx.Timeout(settings.asset_timeout))
    try:
        outcomes = await asyncio.gather(
            *(_download(client, target.url, settings.max_asset_bytes) for target in targets),
            return_exceptions=True,
        )
    finally:
        if owns_client:
            await client.aclose()

    result = FetchResult(inputs=resolved)
    for target, outcome in zip(targets, outcomes):
        if isinstance(outcome, (httpx.HTTPError, httpx.InvalidURL, AssetTooLargeError)):
            reason = _describe_error(outcome)
            if settings.asset_policy == "fail":
                raise AssetFetchError(
                    f"Failed to fetch image for field '{target.field}' from {target.url}: {reason}",
                    url=target.url,
                    field=target.field,
                    page=target.page,
                ) from outcome
            LOGGER.debug(
                "Dropping image for field '%s' on page %d (%s): %s",
                target.field,
                target.page + 1,
                target.url,
                reason,
            )
            resolved[target.page][target.field] = ""
            result.failures.append(
                AssetFailure(page=target.page, field=target.field, url=target.url, reason=reason)
            )
            continue
        if isinstance(outcome, BaseException):
            raise outcome
        payload, mime_type = outcome
        resolved[target.page][target.field] = to_data_uri(payload, mime_type)
        result.fetched += 1

    return result


__all__ = ["AssetFailure", "FetchResult", "fetch_assets"]
