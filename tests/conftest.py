from __future__ import annotations

from collections.abc import Iterable, Mapping
from pathlib import Path

import pytest

from rust_workspace_configurator.metadata import (
    CargoMetadata,
    CargoPackage,
    CargoTarget,
    MetadataError,
)


class FakeCargo:
    """In-memory stand-in for `cargo metadata`, keyed by resolved manifest path."""

    def __init__(self) -> None:
        self.packages: dict[Path, list[CargoPackage]] = {}
        self.members: dict[Path, bool] = {}
        self.failures: dict[Path, str] = {}
        self.calls: list[Path] = []

    def add_package(
        self,
        project_dir: Path,
        name: str,
        *,
        bins: Iterable[str] = (),
        examples: Iterable[str] = (),
        libs: Iterable[str] = (),
        required_features: Mapping[str, list[str]] | None = None,
        package_dir: Path | None = None,
        workspace_members: bool = True,
    ) -> None:
        project_dir.mkdir(parents=True, exist_ok=True)
        (project_dir / "Cargo.toml").write_text(f'[package]\nname = "{name}"\n', encoding="utf-8")

        package_dir = package_dir or project_dir
        package_dir.mkdir(parents=True, exist_ok=True)
        features = required_features or {}
        targets = [
            *(CargoTarget(name=n, kind=("lib",), required_features=()) for n in libs),
            *(
                CargoTarget(name=n, kind=("bin",), required_features=tuple(features.get(n, [])))
                for n in bins
            ),
            *(
                CargoTarget(
                    name=n, kind=("example",), required_features=tuple(features.get(n, []))
                )
                for n in examples
            ),
        ]
        key = (project_dir / "Cargo.toml").resolve()
        self.packages.setdefault(key, []).append(
            CargoPackage(
                name=name,
                manifest_path=package_dir / "Cargo.toml",
                targets=tuple(targets),
            )
        )
        self.members[key] = workspace_members

    def fail(self, project_dir: Path, message: str) -> None:
        project_dir.mkdir(parents=True, exist_ok=True)
        (project_dir / "Cargo.toml").write_text("[package]\n", encoding="utf-8")
        self.failures[(project_dir / "Cargo.toml").resolve()] = message

    def query(self, manifest_path: Path) -> CargoMetadata:
        self.calls.append(manifest_path)
        key = manifest_path.resolve()
        if key in self.failures:
            raise MetadataError(self.failures[key])
        packages = self.packages.get(key, [])
        members = (
            tuple(f"{p.name} 0.1.0 (path+file://{p.manifest_path.parent})" for p in packages)
            if self.members.get(key, True)
            else ()
        )
        return CargoMetadata(packages=tuple(packages), workspace_members=members)


@pytest.fixture
def fake_cargo() -> FakeCargo:
    return FakeCargo()
