from __future__ import annotations

import json
import shutil
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from rust_workspace_configurator.config import ConfiguratorConfig
from rust_workspace_configurator.launch import relative_posix

_FALLBACK_STEM = "rust-projects"
_BACKUP_SUFFIX = ".backup"
_PASSTHROUGH_KEYS = ("settings", "tasks", "extensions")
_KNOWN_KEYS = {"folders", "name", "launch", *_PASSTHROUGH_KEYS}


class WorkspaceParseError(ValueError):
    pass


@dataclass
class WorkspaceDocument:
    """
    In-memory form of a `.code-workspace` file.

    `settings`, `tasks`, `extensions` and `launch` are opaque JSON values;
    unknown top-level keys are carried in `extra` and written back unchanged.
    """

    folders: list[str] = field(default_factory=list)
    name: str | None = None
    settings: Any = None
    launch: Any = None
    tasks: Any = None
    extensions: Any = None
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_json(cls, payload: Any) -> WorkspaceDocument:
        if not isinstance(payload, dict):
            raise WorkspaceParseError(
                f"expected a JSON object at the top level, got {type(payload).__name__}"
            )

        raw_folders = payload.get("folders")
        if raw_folders is None:
            raw_folders = []
        if not isinstance(raw_folders, list):
            raise WorkspaceParseError("`folders` must be a list")
        folders: list[str] = []
        for idx, item in enumerate(raw_folders):
            if not isinstance(item, dict) or not isinstance(item.get("path"), str):
                raise WorkspaceParseError(
                    f"`folders[{idx}]` must be an object with a string `path`"
                )
            folders.append(item["path"])

        name = payload.get("name")
        if name is not None and not isinstance(name, str):
            raise WorkspaceParseError("`name` must be a string")

        return cls(
            folders=folders,
            name=name,
            settings=payload.get("settings"),
            launch=payload.get("launch"),
            tasks=payload.get("tasks"),
            extensions=payload.get("extensions"),
            extra={k: v for k, v in payload.items() if k not in _KNOWN_KEYS},
        )

    def to_json(self) -> dict[str, Any]:
        out: dict[str, Any] = {"folders": [{"path": p} for p in self.folders]}
        if self.name is not None:
            out["name"] = self.name
        if self.settings is not None:
            out["settings"] = self.settings
        if self.launch is not None:
            out["launch"] = self.launch
        if self.tasks is not None:
            out["tasks"] = self.tasks
        if self.extensions is not None:
            out["extensions"] = self.extensions
        for key, value in self.extra.items():
            out[key] = value
        return out


@dataclass(frozen=True)
class LoadedWorkspace:
    document: WorkspaceDocument
    backup_path: Path | None = None
    warnings: list[str] = field(default_factory=list)


def workspace_filename(root: Path, *, config: ConfiguratorConfig | None = None) -> str:
    config = config or ConfiguratorConfig()
    stem = root.name or _FALLBACK_STEM
    return f"{stem}{config.workspace_extension}"


def next_backup_path(workspace_path: Path) -> Path:
    base = workspace_path.with_name(workspace_path.name + _BACKUP_SUFFIX)
    if not base.exists():
        return base
    counter = 1
    while True:
        candidate = base.with_name(f"{base.name}.{counter}")
        if not candidate.exists():
            return candidate
        counter += 1


def load_workspace_document(workspace_path: Path) -> LoadedWorkspace:
    """
    Back up and parse an existing workspace file.

    A missing file yields an empty document. Content that is not valid JSON,
    or not shaped like a workspace, also yields an empty document plus a
    warning. Errors copying or reading the file propagate.
    """

    if not workspace_path.exists():
        return LoadedWorkspace(document=WorkspaceDocument())

    backup_path = next_backup_path(workspace_path)
    shutil.copyfile(workspace_path, backup_path)

    raw = workspace_path.read_bytes()
    try:
        document = WorkspaceDocument.from_json(json.loads(raw.decode("utf-8")))
    except (UnicodeDecodeError, json.JSONDecodeError, WorkspaceParseError) as e:
        return LoadedWorkspace(
            document=WorkspaceDocument(),
            backup_path=backup_path,
            warnings=[
                f"Failed to parse existing {workspace_path.name}: {e}\n"
                "Creating a new workspace file instead."
            ],
        )
    return LoadedWorkspace(document=document, backup_path=backup_path)


def folder_paths(project_roots: Iterable[Path], root: Path) -> list[str]:
    paths: set[str] = set()
    for project_path in project_roots:
        rel = relative_posix(project_path, root)
        paths.add("." if rel in ("", ".") else f"./{rel}")
    return sorted(paths) or ["."]


def workspace_display_name(
    root: Path, project_roots: Iterable[Path], *, config: ConfiguratorConfig | None = None
) -> str | None:
    config = config or ConfiguratorConfig()
    unique = sorted(set(project_roots))
    label = config.language_label

    if len(unique) == 1 and unique[0].name:
        return f"{unique[0].name} ({label})"
    if not root.name:
        return None
    if len(unique) > 1:
        return f"{root.name} ({len(unique)} {label} Projects)"
    return f"{root.name} ({label})"


def _is_empty(value: Any) -> bool:
    return value is None or (isinstance(value, (dict, list)) and not value)


def merge_workspace_document(
    document: WorkspaceDocument,
    *,
    project_roots: Iterable[Path],
    root: Path,
    launch: dict[str, Any],
    config: ConfiguratorConfig | None = None,
) -> WorkspaceDocument:
    roots = list(project_roots)
    document.folders = folder_paths(roots, root)

    name = workspace_display_name(root, roots, config=config)
    if name is not None:
        document.name = name

    for key in _PASSTHROUGH_KEYS:
        if _is_empty(getattr(document, key)):
            setattr(document, key, None)

    document.launch = launch
    return document


def render_workspace_document(document: WorkspaceDocument) -> str:
    return json.dumps(document.to_json(), indent=2, ensure_ascii=False) + "\n"


def write_workspace_document(workspace_path: Path, document: WorkspaceDocument) -> None:
    workspace_path.write_text(render_workspace_document(document), encoding="utf-8")
