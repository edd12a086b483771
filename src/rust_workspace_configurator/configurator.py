from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from rust_workspace_configurator.config import ConfiguratorConfig
from rust_workspace_configurator.discovery import find_project_roots
from rust_workspace_configurator.launch import generate_launch_section
from rust_workspace_configurator.metadata import CargoMetadataProvider, MetadataProvider
from rust_workspace_configurator.runnables import Runnable, build_runnables
from rust_workspace_configurator.workspace import (
    load_workspace_document,
    merge_workspace_document,
    workspace_filename,
    write_workspace_document,
)


@dataclass(frozen=True)
class ConfigureResult:
    root: Path
    project_roots: list[Path]
    runnables: list[Runnable]
    warnings: list[str] = field(default_factory=list)
    workspace_path: Path | None = None
    backup_path: Path | None = None

    @property
    def written(self) -> bool:
        return self.workspace_path is not None


def _resolve_root(root: Path) -> Path:
    try:
        return root.resolve()
    except OSError:
        return root.absolute()


def configure_workspace(
    root: Path,
    *,
    provider: MetadataProvider | None = None,
    config: ConfiguratorConfig | None = None,
) -> ConfigureResult:
    """
    Discover projects under `root` and write `<root>.code-workspace`.

    Raises `ProjectsNotFoundError` before touching the file system when no
    manifest exists under `root`. When no runnable targets are found the
    workspace file is left alone and `written` is False.
    """

    root = _resolve_root(root)
    config = config or ConfiguratorConfig()
    provider = provider or CargoMetadataProvider(cargo_program=config.cargo_program)

    project_roots = find_project_roots(root, config=config)
    scan = build_runnables(project_roots, provider=provider, config=config)
    warnings = list(scan.warnings)

    if not scan.runnables:
        return ConfigureResult(
            root=root, project_roots=project_roots, runnables=[], warnings=warnings
        )

    launch = generate_launch_section(scan.runnables, root, config=config)
    workspace_path = root / workspace_filename(root, config=config)
    loaded = load_workspace_document(workspace_path)
    warnings.extend(loaded.warnings)

    document = merge_workspace_document(
        loaded.document,
        project_roots=project_roots,
        root=root,
        launch=launch,
        config=config,
    )
    write_workspace_document(workspace_path, document)

    return ConfigureResult(
        root=root,
        project_roots=project_roots,
        runnables=scan.runnables,
        warnings=warnings,
        workspace_path=workspace_path,
        backup_path=loaded.backup_path,
    )
