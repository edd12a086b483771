from __future__ import annotations

import argparse
import sys
from collections.abc import Sequence
from pathlib import Path

from rust_workspace_configurator.config import ConfigError, load_config
from rust_workspace_configurator.configurator import ConfigureResult, configure_workspace
from rust_workspace_configurator.discovery import ProjectsNotFoundError
from rust_workspace_configurator.metadata import MetadataProvider


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rust-workspace-configurator",
        description=(
            "Generate VS Code multi-root workspace configurations for all discovered "
            "Rust projects."
        ),
    )
    parser.add_argument(
        "-r",
        "--root",
        type=Path,
        default=None,
        help="Root directory to search for Rust projects (defaults to current directory).",
    )
    return parser


def _print_result(result: ConfigureResult) -> None:
    print(f"Found {len(result.project_roots)} Rust project(s):")
    for project_path in result.project_roots:
        print(f"  {project_path}")

    for warning in result.warnings:
        print(f"Warning: {warning}", file=sys.stderr)

    if not result.runnables:
        print(f"No runnables found in {result.root}")
        return

    print(f"Found {len(result.runnables)} runnables:")
    for runnable in result.runnables:
        print(f"  {runnable.name} ({runnable.kind.value}) in package {runnable.package}")

    if result.backup_path is not None:
        print(f"Backed up existing workspace file to {result.backup_path}")
    if result.workspace_path is not None:
        print(
            f"Created {result.workspace_path.name} with launch configurations "
            f"in {result.workspace_path.parent}"
        )


def main(argv: Sequence[str] | None = None, *, provider: MetadataProvider | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    root: Path = args.root if args.root is not None else Path.cwd()
    print(f"Searching for Rust projects in: {root}")

    try:
        config = load_config(root)
        result = configure_workspace(root, provider=provider, config=config)
    except (ProjectsNotFoundError, ConfigError, OSError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    _print_result(result)
    return 0
