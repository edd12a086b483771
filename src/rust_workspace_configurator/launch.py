from __future__ import annotations

import os
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from rust_workspace_configurator.config import ConfiguratorConfig
from rust_workspace_configurator.runnables import Runnable, RunnableKind

LAUNCH_VERSION = "0.2.0"
WORKSPACE_FOLDER = "${workspaceFolder}"


@dataclass(frozen=True)
class LaunchEntry:
    name: str
    type: str
    request: str
    cwd: str
    env: dict[str, str] = field(default_factory=dict)
    cargo_args: list[str] = field(default_factory=list)
    args: list[str] = field(default_factory=list)

    def to_json(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "type": self.type,
            "request": self.request,
            "cwd": self.cwd,
            "env": dict(self.env),
            "cargo": {"args": list(self.cargo_args)},
            "args": list(self.args),
        }


def relative_posix(path: Path, root: Path) -> str:
    """Return `path` relative to `root` in forward-slash form ("." when equal)."""

    try:
        rel = os.path.relpath(path, root)
    except ValueError:
        # Different drives on Windows.
        return path.as_posix()
    return Path(rel).as_posix()


def working_directory(project_path: Path, root: Path) -> str:
    rel = relative_posix(project_path, root)
    if rel in ("", "."):
        return WORKSPACE_FOLDER
    return f"{WORKSPACE_FOLDER}/{rel}"


def cargo_run_args(runnable: Runnable) -> list[str]:
    if runnable.kind is RunnableKind.EXAMPLE:
        args = ["run", f"--example={runnable.target}", f"--package={runnable.package}"]
    elif runnable.target in ("main", runnable.package):
        args = ["run", f"--package={runnable.package}"]
    else:
        args = ["run", f"--bin={runnable.target}", f"--package={runnable.package}"]

    if runnable.required_features:
        args.append(f"--features={','.join(runnable.required_features)}")
    return args


def build_launch_entry(
    runnable: Runnable, root: Path, *, config: ConfiguratorConfig | None = None
) -> LaunchEntry:
    config = config or ConfiguratorConfig()
    cwd = working_directory(runnable.project_path, root)
    label = "example" if runnable.kind is RunnableKind.EXAMPLE else "binary"
    return LaunchEntry(
        name=f"Debug {label} '{runnable.name}'",
        type=config.debugger_type,
        request="launch",
        cwd=cwd,
        env={config.asset_root_env: cwd},
        cargo_args=cargo_run_args(runnable),
        args=[],
    )


def generate_launch_section(
    runnables: Iterable[Runnable], root: Path, *, config: ConfiguratorConfig | None = None
) -> dict[str, Any]:
    config = config or ConfiguratorConfig()
    return {
        "version": LAUNCH_VERSION,
        "configurations": [
            build_launch_entry(r, root, config=config).to_json() for r in runnables
        ],
    }
