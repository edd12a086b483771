from __future__ import annotations

import json
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol


class MetadataError(RuntimeError):
    pass


@dataclass(frozen=True)
class CargoTarget:
    name: str
    kind: tuple[str, ...]
    required_features: tuple[str, ...]


@dataclass(frozen=True)
class CargoPackage:
    name: str
    manifest_path: Path
    targets: tuple[CargoTarget, ...]


@dataclass(frozen=True)
class CargoMetadata:
    packages: tuple[CargoPackage, ...]
    workspace_members: tuple[str, ...]


class MetadataProvider(Protocol):
    def query(self, manifest_path: Path) -> CargoMetadata: ...


def _expect_str(value: Any, *, field: str) -> str:
    if not isinstance(value, str) or not value:
        raise MetadataError(f"Unexpected cargo metadata: expected non-empty string for {field}.")
    return value


def _expect_str_list(value: Any, *, field: str) -> tuple[str, ...]:
    if value is None:
        return ()
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise MetadataError(f"Unexpected cargo metadata: expected list of strings for {field}.")
    return tuple(value)


def _parse_target(raw: Any, *, package: str) -> CargoTarget:
    if not isinstance(raw, dict):
        raise MetadataError(
            f"Unexpected cargo metadata: target entry in {package} is not a mapping."
        )
    name = _expect_str(raw.get("name"), field=f"{package}.targets[].name")
    return CargoTarget(
        name=name,
        kind=_expect_str_list(raw.get("kind"), field=f"{package}::{name}.kind"),
        required_features=_expect_str_list(
            raw.get("required-features"), field=f"{package}::{name}.required-features"
        ),
    )


def _parse_package(raw: Any) -> CargoPackage:
    if not isinstance(raw, dict):
        raise MetadataError("Unexpected cargo metadata: package entry is not a mapping.")
    name = _expect_str(raw.get("name"), field="packages[].name")
    manifest_path = _expect_str(raw.get("manifest_path"), field=f"{name}.manifest_path")
    raw_targets = raw.get("targets") or []
    if not isinstance(raw_targets, list):
        raise MetadataError(f"Unexpected cargo metadata: {name}.targets is not a list.")
    return CargoPackage(
        name=name,
        manifest_path=Path(manifest_path),
        targets=tuple(_parse_target(t, package=name) for t in raw_targets),
    )


def parse_metadata(payload: Any) -> CargoMetadata:
    """Convert a `cargo metadata --format-version 1` document into `CargoMetadata`."""

    if not isinstance(payload, dict):
        raise MetadataError(
            f"Unexpected cargo metadata shape (expected object, got {type(payload).__name__})."
        )
    raw_packages = payload.get("packages")
    if not isinstance(raw_packages, list):
        raise MetadataError("Unexpected cargo metadata: missing `packages` list.")
    return CargoMetadata(
        packages=tuple(_parse_package(p) for p in raw_packages),
        workspace_members=_expect_str_list(
            payload.get("workspace_members"), field="workspace_members"
        ),
    )


def _cargo_run(argv: list[str], *, cwd: Path | None = None) -> subprocess.CompletedProcess[str]:
    try:
        return subprocess.run(
            argv,
            cwd=str(cwd) if cwd is not None else None,
            check=False,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
        )
    except FileNotFoundError as e:
        raise MetadataError(
            f"Cargo CLI not found ({argv[0]!r}). Ensure `cargo` is installed and available on PATH."
        ) from e
    except OSError as e:
        raise MetadataError(f"Failed to run {argv[0]!r}: {e}") from e


@dataclass(frozen=True)
class CargoMetadataProvider:
    """Queries `cargo metadata` for one manifest, resolving all optional features."""

    cargo_program: str = "cargo"

    def command(self, manifest_path: Path) -> list[str]:
        return [
            self.cargo_program,
            "metadata",
            "--format-version",
            "1",
            "--all-features",
            "--manifest-path",
            str(manifest_path),
        ]

    def query(self, manifest_path: Path) -> CargoMetadata:
        proc = _cargo_run(self.command(manifest_path), cwd=manifest_path.parent)
        if proc.returncode != 0:
            msg = proc.stderr.strip() or proc.stdout.strip() or f"exit code {proc.returncode}"
            raise MetadataError(f"`cargo metadata` failed: {msg}")
        try:
            payload = json.loads(proc.stdout)
        except json.JSONDecodeError as e:
            raise MetadataError(f"`cargo metadata` produced invalid JSON: {e}") from e
        return parse_metadata(payload)
