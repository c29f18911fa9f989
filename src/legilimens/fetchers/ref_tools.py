"""ref.tools fetcher: source-host documentation by identifier."""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

import httpx

from legilimens.constants import REF_TOOLS_BASE_URL
from legilimens.fetchers.base import fetch_with_retry
from legilimens.fetchers.schemas import FetcherConfig, FetchResult

SOURCE = "ref.tools"


def _extract_content(data: Any) -> str | None:
    if not isinstance(data, dict):
        return None
    content = data.get("content")
    return content if isinstance(content, str) else None


async def fetch_from_ref_tools(
    identifier: str,
    config: FetcherConfig,
    *,
    client: httpx.AsyncClient | None = None,
) -> FetchResult:
    if not identifier:
        return FetchResult.fail(f"{SOURCE} requires an identifier")

    headers = {"Accept": "application/json"}
    if config.api_key:
        headers["Authorization"] = f"Bearer {config.api_key}"
    url = f"{REF_TOOLS_BASE_URL}/docs/{quote(identifier, safe='')}"

    async def _send(http: httpx.AsyncClient) -> httpx.Response:
        return await http.get(url, headers=headers)

    return await fetch_with_retry(
        SOURCE,
        _send,
        _extract_content,
        config,
        missing_field="content",
        client=client,
    )
