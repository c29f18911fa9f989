"""Two-phase logging setup for the CLI and library callers.

Phase 1, ``setup_logging()``: runs before litellm is imported. Sets
``LITELLM_LOG``, configures the root logger (INFO unless a level is
passed) and quiets HTTP client chatter. Once ``Settings`` is loaded,
``apply_log_level()`` moves the root logger to the configured level.

Phase 2, ``cleanup_third_party_handlers()``: runs after all imports.
Drops the handlers litellm attaches to its own loggers at import time.

Both phases run at most once per process.
"""

import logging
import os

LOG_FORMAT = "%(asctime)s - %(levelname)s - [%(name)s] - %(message)s"
LOG_DATEFMT = "%Y-%m-%dT%H:%M:%S"
PACKAGE_LOGGER = "legilimens"

_LITELLM_LOGGERS = ("LiteLLM", "LiteLLM Router", "LiteLLM Proxy")

# Held at WARNING regardless of the root level
_SUPPRESSED_LOGGERS = (*_LITELLM_LOGGERS, "httpx", "httpcore")

_phase1_done = False
_phase2_done = False


def resolve_log_level(level: str | None = None) -> int:
    """Numeric level for a level name; INFO if missing or unknown."""
    name = (level or "INFO").strip().upper()
    value = logging.getLevelName(name)
    return value if isinstance(value, int) else logging.INFO


def setup_logging(level: str | None = None) -> None:
    """Phase 1: root logger, third-party levels and ``LITELLM_LOG``.

    Must be called before anything imports litellm. No-op on repeat.
    """
    global _phase1_done  # noqa: PLW0603
    if _phase1_done:
        return
    _phase1_done = True

    # litellm._logging reads this at import time
    os.environ.setdefault("LITELLM_LOG", "WARNING")

    logging.basicConfig(
        level=resolve_log_level(level),
        format=LOG_FORMAT,
        datefmt=LOG_DATEFMT,
    )

    for name in _SUPPRESSED_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def cleanup_third_party_handlers() -> None:
    """Phase 2: route litellm records through root only. No-op on repeat."""
    global _phase2_done  # noqa: PLW0603
    if _phase2_done:
        return
    _phase2_done = True

    for name in _LITELLM_LOGGERS:
        lg = logging.getLogger(name)
        lg.handlers.clear()
        lg.propagate = True


def apply_log_level(level: str | None) -> None:
    """Set the root level from configuration after phase 1."""
    logging.getLogger().setLevel(resolve_log_level(level))


def set_verbose(enabled: bool = True) -> None:
    """DEBUG for legilimens' own loggers; third parties stay quiet."""
    logging.getLogger(PACKAGE_LOGGER).setLevel(
        logging.DEBUG if enabled else logging.NOTSET
    )
