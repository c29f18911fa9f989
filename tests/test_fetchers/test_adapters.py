"""Tests for the three fetcher adapters' request shapes and pre-flight checks."""

from __future__ import annotations

import json

import httpx

from legilimens.fetchers import (
    fetch_from_context7,
    fetch_from_firecrawl,
    fetch_from_ref_tools,
)
from legilimens.fetchers.schemas import FetcherConfig, is_fetch_success


def _config(api_key: str | None = None) -> FetcherConfig:
    return FetcherConfig(timeout_ms=500, max_retries=0, api_key=api_key)


class TestFirecrawl:
    async def test_requires_api_key(self) -> None:
        result = await fetch_from_firecrawl("https://example.com", _config())
        assert result.success is False
        assert result.error == "Firecrawl API key is required"
        assert result.metadata is None

    async def test_requires_url(self) -> None:
        result = await fetch_from_firecrawl("", _config("fc-key"))
        assert result.error == "Firecrawl requires a URL"

    async def test_posts_scrape_request(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"data": {"markdown": "# Page"}})

        async with httpx.AsyncClient(
            transport=httpx.MockTransport(handler)
        ) as client:
            result = await fetch_from_firecrawl(
                "https://example.com/guide", _config("fc-key"), client=client
            )

        assert is_fetch_success(result)
        assert result.content == "# Page"
        request = seen[0]
        assert request.method == "POST"
        assert request.url.path.endswith("/scrape")
        assert request.headers["Authorization"] == "Bearer fc-key"
        body = json.loads(request.content)
        assert body["url"] == "https://example.com/guide"
        assert "markdown" in body["formats"]


class TestContext7:
    async def test_requires_package_name(self) -> None:
        result = await fetch_from_context7("", _config())
        assert result.error == "Context7 requires a package name"

    async def test_key_is_optional(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"documentation": "lodash docs"})

        async with httpx.AsyncClient(
            transport=httpx.MockTransport(handler)
        ) as client:
            result = await fetch_from_context7("lodash", _config(), client=client)

        assert result.success is True
        assert result.content == "lodash docs"
        assert "X-API-Key" not in seen[0].headers
        assert seen[0].url.path.endswith("/npm/lodash")

    async def test_scoped_name_is_quoted_and_keyed(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"documentation": "types"})

        async with httpx.AsyncClient(
            transport=httpx.MockTransport(handler)
        ) as client:
            await fetch_from_context7("@types/node", _config("c7"), client=client)

        assert seen[0].headers["X-API-Key"] == "c7"
        assert "%40types%2Fnode" in str(seen[0].url)

    async def test_missing_documentation_field(self) -> None:
        async with httpx.AsyncClient(
            transport=httpx.MockTransport(
                lambda request: httpx.Response(200, json={"docs": "wrong key"})
            )
        ) as client:
            result = await fetch_from_context7("lodash", _config(), client=client)

        assert result.error == "Context7 returned status 200 without documentation"


class TestRefTools:
    async def test_requires_identifier(self) -> None:
        result = await fetch_from_ref_tools("", _config())
        assert result.error == "ref.tools requires an identifier"

    async def test_fetches_content_with_bearer(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"content": "# facebook/react"})

        async with httpx.AsyncClient(
            transport=httpx.MockTransport(handler)
        ) as client:
            result = await fetch_from_ref_tools(
                "facebook/react", _config("ref-key"), client=client
            )

        assert result.content == "# facebook/react"
        assert result.metadata is not None
        assert result.metadata.source == "ref.tools"
        assert seen[0].headers["Authorization"] == "Bearer ref-key"
        assert "facebook%2Freact" in str(seen[0].url)
