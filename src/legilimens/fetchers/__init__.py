"""Documentation fetchers: one adapter per external source family."""

from legilimens.fetchers.context7 import fetch_from_context7
from legilimens.fetchers.firecrawl import fetch_from_firecrawl
from legilimens.fetchers.ref_tools import fetch_from_ref_tools
from legilimens.fetchers.schemas import (
    AttemptState,
    FetchAttempt,
    FetcherConfig,
    FetchMetadata,
    FetchResult,
    is_fetch_success,
)

__all__ = [
    "AttemptState",
    "FetchAttempt",
    "FetchMetadata",
    "FetchResult",
    "FetcherConfig",
    "fetch_from_context7",
    "fetch_from_firecrawl",
    "fetch_from_ref_tools",
    "is_fetch_success",
]
