"""CLI entry point: ``legilimens generate`` and ``legilimens detect``."""

from __future__ import annotations

# Phase 1: Singleton logging, before any transitive litellm imports
from legilimens.logging_config import setup_logging

setup_logging()

import argparse  # noqa: E402
import asyncio  # noqa: E402
import json  # noqa: E402
import sys  # noqa: E402
from collections.abc import Sequence  # noqa: E402
from dataclasses import asdict  # noqa: E402
from pathlib import Path  # noqa: E402

from legilimens import __version__  # noqa: E402
from legilimens.config import Settings, get_runtime_config  # noqa: E402
from legilimens.constants import DependencyType  # noqa: E402
from legilimens.logging_config import (  # noqa: E402
    apply_log_level,
    cleanup_third_party_handlers,
    set_verbose,
)
from legilimens.schemas import GatewayProgressEvent  # noqa: E402

# Phase 2: Clear litellm's duplicate handlers after all imports
cleanup_third_party_handlers()


def main(argv: Sequence[str] | None = None) -> None:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.version:
        print(f"legilimens {__version__}")
        return

    if args.command == "generate":
        _run_generate(args)
    elif args.command == "detect":
        _run_detect(args)
    else:
        parser.print_help()


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="legilimens",
        description=(
            "Gateway documentation generator for "
            "third-party dependencies."
        ),
    )
    parser.add_argument(
        "--version",
        action="store_true",
        help="Print version and exit",
    )

    sub = parser.add_subparsers(dest="command")

    generate = sub.add_parser(
        "generate",
        help="Generate gateway docs for a dependency",
    )
    generate.add_argument(
        "identifier",
        type=str,
        help="owner/repo, npm package name or documentation URL",
    )
    generate.add_argument(
        "--type",
        "-t",
        dest="dependency_type",
        choices=[t.value for t in DependencyType],
        default=DependencyType.LIBRARY.value,
        help="Dependency type (default: library)",
    )
    generate.add_argument(
        "--output-dir",
        "-o",
        default="docs",
        help="Output directory (default: docs)",
    )
    generate.add_argument(
        "--minimal",
        action="store_true",
        help="Minimal mode for constrained terminals",
    )
    generate.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Print progress lines",
    )

    detect = sub.add_parser(
        "detect",
        help="Classify an identifier and print JSON",
    )
    detect.add_argument(
        "identifier",
        type=str,
        help="Identifier to classify",
    )

    return parser


def _run_generate(args: argparse.Namespace) -> None:
    """Execute the generate command."""
    from legilimens.gateway import (
        GatewayGenerationRequest,
        format_progress,
        generate_gateway_doc,
    )
    from legilimens.telemetry.performance import GuardrailExceededError

    settings = Settings()
    apply_log_level(settings.log_level)
    if args.verbose:
        set_verbose()

    runtime_config = get_runtime_config(settings)

    def on_progress(event: GatewayProgressEvent) -> None:
        if args.verbose:
            print(format_progress(event))

    request = GatewayGenerationRequest(
        target_directory=Path(args.output_dir),
        dependency_identifier=args.identifier,
        dependency_type=args.dependency_type,
        minimal_mode=args.minimal,
    )

    try:
        result = asyncio.run(
            generate_gateway_doc(
                request, runtime_config, on_progress=on_progress
            )
        )
    except GuardrailExceededError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)

    print(result.summary)
    for artifact in result.artifacts:
        print(f"  {artifact}")


def _run_detect(args: argparse.Namespace) -> None:
    """Print detection and normalization results as JSON."""
    from legilimens.detection import (
        detect_dependency_type,
        detect_source_type,
        normalize_identifier,
    )

    detection = detect_source_type(args.identifier)
    normalized = normalize_identifier(args.identifier)
    payload = {
        "dependency_type": detect_dependency_type(args.identifier),
        "detection": asdict(detection),
        "normalized": asdict(normalized),
    }
    print(json.dumps(payload, indent=2))


if __name__ == "__main__":
    main()
