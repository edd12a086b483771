from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from rust_workspace_configurator.config import ConfiguratorConfig
from rust_workspace_configurator.metadata import (
    CargoMetadata,
    CargoPackage,
    MetadataError,
    MetadataProvider,
)


class RunnableKind(Enum):
    BINARY = "Binary"
    EXAMPLE = "Example"


@dataclass(frozen=True)
class Runnable:
    name: str
    package: str
    kind: RunnableKind
    target: str
    required_features: tuple[str, ...]
    project_path: Path


@dataclass(frozen=True)
class RunnableScan:
    runnables: list[Runnable] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


def _canonical(path: Path) -> Path:
    try:
        return path.resolve()
    except OSError:
        return path


def _select_packages(
    metadata: CargoMetadata, *, project_path: Path, manifest_path: Path
) -> list[CargoPackage]:
    if not metadata.workspace_members:
        canonical_manifest = _canonical(manifest_path)
        for package in metadata.packages:
            if _canonical(package.manifest_path) == canonical_manifest:
                return [package]
        return []

    canonical_project = _canonical(project_path)
    return [
        package
        for package in metadata.packages
        if _canonical(package.manifest_path.parent).is_relative_to(canonical_project)
    ]


def _package_runnables(package: CargoPackage, *, project_path: Path) -> list[Runnable]:
    out: list[Runnable] = []
    for target in package.targets:
        if "bin" in target.kind:
            out.append(
                Runnable(
                    name=f"{package.name}::{target.name}",
                    package=package.name,
                    kind=RunnableKind.BINARY,
                    target=target.name,
                    required_features=target.required_features,
                    project_path=project_path,
                )
            )
        if "example" in target.kind:
            out.append(
                Runnable(
                    name=f"{package.name}::{target.name} (example)",
                    package=package.name,
                    kind=RunnableKind.EXAMPLE,
                    target=target.name,
                    required_features=target.required_features,
                    project_path=project_path,
                )
            )
    return out


def build_runnables(
    project_roots: Iterable[Path],
    *,
    provider: MetadataProvider,
    config: ConfiguratorConfig | None = None,
) -> RunnableScan:
    """
    Flatten the binaries and examples of every project into `Runnable` records.

    Projects whose metadata cannot be read, or that yield no matching package,
    are skipped with a warning; the scan itself never raises for them.
    """

    config = config or ConfiguratorConfig()
    scan = RunnableScan()
    for project_path in project_roots:
        manifest_path = project_path / config.manifest_name
        try:
            metadata = provider.query(manifest_path)
        except MetadataError as e:
            scan.warnings.append(f"Failed to read metadata for {manifest_path}: {e}")
            continue

        packages = _select_packages(
            metadata, project_path=project_path, manifest_path=manifest_path
        )
        if not packages:
            if not metadata.workspace_members:
                scan.warnings.append(f"Could not find package for manifest {manifest_path}")
            else:
                scan.warnings.append(f"No packages found for project {project_path}")
            continue

        for package in packages:
            scan.runnables.extend(_package_runnables(package, project_path=project_path))
    return scan
