"""Quick dependency-type classifier used to pick a fetch chain."""

from __future__ import annotations

import re

from legilimens.constants import SourceType

_OWNER_REPO = re.compile(r"^[A-Za-z0-9_-]+/[A-Za-z0-9_-]+$")
_NPM_NAME = re.compile(
    r"^(@[a-z0-9-~][a-z0-9-._~]*/)?[a-z0-9-~][a-z0-9-._~]*$"
)


def detect_dependency_type(identifier: str) -> SourceType:
    """Classify an identifier; first matching rule wins.

    1. contains ``github.com`` or looks like ``owner/repo`` → github
    2. starts with ``http://`` / ``https://`` → url
    3. (optionally scoped) lowercase package name → npm
    4. anything else → unknown
    """
    if "github.com" in identifier or _OWNER_REPO.match(identifier):
        return SourceType.GITHUB
    if identifier.startswith(("http://", "https://")):
        return SourceType.URL
    if _NPM_NAME.match(identifier):
        return SourceType.NPM
    return SourceType.UNKNOWN
