"""Firecrawl fetcher: scrape any URL into markdown."""

from __future__ import annotations

from typing import Any

import httpx

from legilimens.constants import FIRECRAWL_BASE_URL
from legilimens.fetchers.base import fetch_with_retry
from legilimens.fetchers.schemas import FetcherConfig, FetchResult

SOURCE = "Firecrawl"


def _extract_markdown(data: Any) -> str | None:
    if not isinstance(data, dict):
        return None
    inner = data.get("data")
    if not isinstance(inner, dict):
        return None
    markdown = inner.get("markdown")
    return markdown if isinstance(markdown, str) else None


async def fetch_from_firecrawl(
    url: str,
    config: FetcherConfig,
    *,
    client: httpx.AsyncClient | None = None,
) -> FetchResult:
    """Scrape ``url`` via Firecrawl. Requires an API key."""
    if not config.api_key:
        return FetchResult.fail(f"{SOURCE} API key is required")
    if not url:
        return FetchResult.fail(f"{SOURCE} requires a URL")

    headers = {
        "Authorization": f"Bearer {config.api_key}",
        "Content-Type": "application/json",
    }
    payload = {
        "url": url,
        "formats": ["markdown", "html"],
        "onlyMainContent": True,
    }

    async def _send(http: httpx.AsyncClient) -> httpx.Response:
        return await http.post(
            f"{FIRECRAWL_BASE_URL}/scrape", json=payload, headers=headers
        )

    return await fetch_with_retry(
        SOURCE,
        _send,
        _extract_markdown,
        config,
        missing_field="markdown content",
        client=client,
    )
