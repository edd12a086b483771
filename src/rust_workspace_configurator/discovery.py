from __future__ import annotations

from pathlib import Path

from rust_workspace_configurator.config import ConfiguratorConfig


class ProjectsNotFoundError(RuntimeError):
    pass


def _is_skipped_dir(name: str, *, config: ConfiguratorConfig) -> bool:
    return name.startswith(".") or name in config.skip_dirs


def _has_manifest(dir_path: Path, *, config: ConfiguratorConfig) -> bool:
    try:
        return (dir_path / config.manifest_name).is_file()
    except OSError:
        return False


def _walk(dir_path: Path, out: list[Path], *, config: ConfiguratorConfig) -> None:
    if _has_manifest(dir_path, config=config):
        out.append(dir_path)
        # Nested manifests belong to this project.
        return

    try:
        children = [p for p in dir_path.iterdir() if p.is_dir()]
    except OSError:
        return

    for child in sorted(children, key=lambda p: p.name):
        if _is_skipped_dir(child.name, config=config):
            continue
        _walk(child, out, config=config)


def find_project_roots(root: Path, *, config: ConfiguratorConfig | None = None) -> list[Path]:
    """
    Return the directories under `root` that contain a project manifest.

    A root that is itself a project is returned alone. Otherwise the tree is
    walked in sorted name order, stopping at the first manifest on each branch.
    """

    config = config or ConfiguratorConfig()
    if _has_manifest(root, config=config):
        return [root]

    found: list[Path] = []
    if root.is_dir():
        _walk(root, found, config=config)
    if not found:
        raise ProjectsNotFoundError(
            f"No Rust projects ({config.manifest_name} files) found in {root}"
        )
    return found
