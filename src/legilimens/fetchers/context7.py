"""Context7 fetcher: npm package documentation."""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

import httpx

from legilimens.constants import CONTEXT7_BASE_URL
from legilimens.fetchers.base import fetch_with_retry
from legilimens.fetchers.schemas import FetcherConfig, FetchResult

SOURCE = "Context7"


def _extract_documentation(data: Any) -> str | None:
    if not isinstance(data, dict):
        return None
    docs = data.get("documentation")
    return docs if isinstance(docs, str) else None


async def fetch_from_context7(
    package_name: str,
    config: FetcherConfig,
    *,
    client: httpx.AsyncClient | None = None,
) -> FetchResult:
    """Fetch registry docs for ``package_name``. The API key is optional."""
    if not package_name:
        return FetchResult.fail(f"{SOURCE} requires a package name")

    headers = {"Accept": "application/json"}
    if config.api_key:
        headers["X-API-Key"] = config.api_key
    url = f"{CONTEXT7_BASE_URL}/npm/{quote(package_name, safe='')}"

    async def _send(http: httpx.AsyncClient) -> httpx.Response:
        return await http.get(url, headers=headers)

    return await fetch_with_retry(
        SOURCE,
        _send,
        _extract_documentation,
        config,
        missing_field="documentation",
        client=client,
    )
