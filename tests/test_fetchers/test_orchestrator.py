"""Tests for per-type fallback chains."""

from __future__ import annotations

from collections.abc import Callable

import httpx
import pytest

from legilimens.config import RuntimeConfig
from legilimens.constants import ToolName
from legilimens.fetchers.orchestrator import (
    build_fetcher_config,
    describe_fetch_strategy,
    fetch_documentation,
)

_HOSTS = {
    "api.firecrawl.dev": "firecrawl",
    "api.context7.ai": "context7",
    "api.ref.tools": "ref",
}

_BODIES = {
    "firecrawl": {"data": {"markdown": "# from firecrawl"}},
    "context7": {"documentation": "# from context7"},
    "ref": {"content": "# from ref"},
}


def _routing_client(
    healthy: set[str], calls: list[str]
) -> httpx.AsyncClient:
    """Tools in ``healthy`` answer with content, the rest with 404."""

    def handler(request: httpx.Request) -> httpx.Response:
        tool = _HOSTS[request.url.host]
        calls.append(tool)
        if tool in healthy:
            return httpx.Response(200, json=_BODIES[tool])
        return httpx.Response(404)

    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestGithubChain:
    async def test_ref_first(
        self, make_runtime_config: Callable[..., RuntimeConfig]
    ) -> None:
        calls: list[str] = []
        async with _routing_client({"ref"}, calls) as client:
            result = await fetch_documentation(
                "facebook/react", make_runtime_config(), client=client
            )
        assert result.content == "# from ref"
        assert calls == ["ref"]

    async def test_falls_back_to_firecrawl_with_key(
        self, make_runtime_config: Callable[..., RuntimeConfig]
    ) -> None:
        calls: list[str] = []
        async with _routing_client({"firecrawl"}, calls) as client:
            result = await fetch_documentation(
                "facebook/react",
                make_runtime_config(firecrawl="fc-key"),
                client=client,
            )
        assert result.content == "# from firecrawl"
        assert calls == ["ref", "firecrawl"]

    async def test_exhausted_chain_lists_attempted_tools(
        self, make_runtime_config: Callable[..., RuntimeConfig]
    ) -> None:
        calls: list[str] = []
        async with _routing_client(set(), calls) as client:
            result = await fetch_documentation(
                "facebook/react",
                make_runtime_config(firecrawl="fc-key"),
                client=client,
            )
        assert result.success is False
        assert result.error == (
            "GitHub documentation fetch failed for facebook/react. "
            "Attempted: ref.tools, Firecrawl"
        )


class TestNpmChain:
    async def test_context7_first(
        self, make_runtime_config: Callable[..., RuntimeConfig]
    ) -> None:
        calls: list[str] = []
        async with _routing_client({"context7", "ref"}, calls) as client:
            result = await fetch_documentation(
                "lodash", make_runtime_config(), client=client
            )
        assert result.content == "# from context7"
        assert calls == ["context7"]

    async def test_skips_firecrawl_without_key(
        self, make_runtime_config: Callable[..., RuntimeConfig]
    ) -> None:
        calls: list[str] = []
        async with _routing_client(set(), calls) as client:
            result = await fetch_documentation(
                "lodash", make_runtime_config(), client=client
            )
        assert calls == ["context7", "ref"]
        assert result.error == (
            "NPM documentation fetch failed for lodash. "
            "Attempted: Context7, ref.tools"
        )


class TestUrlChain:
    async def test_requires_firecrawl_key(
        self, make_runtime_config: Callable[..., RuntimeConfig]
    ) -> None:
        result = await fetch_documentation(
            "https://example.com/docs", make_runtime_config()
        )
        assert result.success is False
        assert result.error == "Firecrawl API key required for URL fetching"

    async def test_uses_firecrawl(
        self, make_runtime_config: Callable[..., RuntimeConfig]
    ) -> None:
        calls: list[str] = []
        async with _routing_client({"firecrawl"}, calls) as client:
            result = await fetch_documentation(
                "https://example.com/docs",
                make_runtime_config(firecrawl="fc-key"),
                client=client,
            )
        assert result.content == "# from firecrawl"


async def test_unknown_identifier_fails_fast(runtime_config: RuntimeConfig) -> None:
    result = await fetch_documentation("???", runtime_config)
    assert result.success is False
    assert result.error == "Unknown dependency type for identifier: ???"


def test_build_fetcher_config_uses_tool_key(
    make_runtime_config: Callable[..., RuntimeConfig],
) -> None:
    config = build_fetcher_config(
        make_runtime_config(context7="c7", timeout_ms=1234, max_retries=3),
        ToolName.CONTEXT7,
    )
    assert config.api_key == "c7"
    assert config.timeout_ms == 1234
    assert config.max_retries == 3


@pytest.mark.parametrize(
    ("identifier", "keys", "expected"),
    [
        ("facebook/react", {}, "GitHub: ref.tools"),
        (
            "facebook/react",
            {"firecrawl": "k"},
            "GitHub: ref.tools → Firecrawl",
        ),
        (
            "lodash",
            {"firecrawl": "k"},
            "NPM: Context7 → ref.tools → Firecrawl",
        ),
        ("https://example.com", {}, "URL: No API key configured"),
        ("???", {}, "Unknown type: No strategy available"),
    ],
)
def test_describe_fetch_strategy(
    make_runtime_config: Callable[..., RuntimeConfig],
    identifier: str,
    keys: dict[str, str],
    expected: str,
) -> None:
    assert describe_fetch_strategy(identifier, make_runtime_config(**keys)) == expected
