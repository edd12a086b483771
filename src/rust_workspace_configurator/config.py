from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

import yaml

CONFIG_FILENAME = "workspace-configurator.yaml"
_CONFIG_VERSION = 1


@dataclass(frozen=True)
class ConfiguratorConfig:
    """
    Tunables shared by every pipeline stage.

    Parameters
    ----------
    manifest_name
        File name that marks a directory as a project root.
    skip_dirs
        Directory names that discovery never enters (hidden directories are
        always skipped as well).
    debugger_type
        Value of the launch entry `type` key.
    asset_root_env
        Environment variable set to the runnable's working directory so
        spawned processes resolve assets against their own project.
    cargo_program
        Program invoked for `cargo metadata`.
    language_label
        Label used in the workspace display name.
    workspace_extension
        Suffix of the generated workspace file.
    """

    manifest_name: str = "Cargo.toml"
    skip_dirs: frozenset[str] = frozenset({"target", "node_modules"})
    debugger_type: str = "lldb"
    asset_root_env: str = "BEVY_ASSET_ROOT"
    cargo_program: str = "cargo"
    language_label: str = "Rust"
    workspace_extension: str = ".code-workspace"


class ConfigError(ValueError):
    pass


def _load_yaml_mapping(path: Path) -> dict[str, Any]:
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigError(f"Failed to read {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse YAML in {path}: {e}") from e

    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(raw).__name__}.")
    return raw


def _ensure_no_unknown_keys(*, data: dict[str, Any], allowed: set[str], path: Path) -> None:
    unknown = set(data) - allowed
    if "meta" in unknown and (data["meta"] is None or isinstance(data["meta"], dict)):
        unknown.discard("meta")
    if not unknown:
        return
    unknown_list = ", ".join(sorted(str(k) for k in unknown))
    allowed_list = ", ".join(sorted(allowed))
    raise ConfigError(f"Unknown keys in {path}: {unknown_list}. Allowed: {allowed_list}.")


def _parse_non_empty_string(value: Any, *, path: Path, field: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ConfigError(f"Expected non-empty string for {field} in {path}.")
    return value.strip()


def _parse_string_list(value: Any, *, path: Path, field: str) -> tuple[str, ...]:
    if value is None:
        return ()
    if not isinstance(value, list):
        raise ConfigError(f"Expected list for {field} in {path}.")
    out: list[str] = []
    for idx, item in enumerate(value):
        out.append(_parse_non_empty_string(item, path=path, field=f"{field}[{idx}]"))
    return tuple(out)


def parse_config(data: dict[str, Any], *, path: Path) -> ConfiguratorConfig:
    allowed = {"version", "debugger_type", "asset_root_env", "cargo_program", "extra_skip_dirs"}
    _ensure_no_unknown_keys(data=data, allowed=allowed, path=path)

    raw_version = data.get("version", _CONFIG_VERSION)
    if not isinstance(raw_version, int) or isinstance(raw_version, bool):
        raise ConfigError(f"Expected integer version in {path}.")
    if raw_version != _CONFIG_VERSION:
        raise ConfigError(
            f"Unsupported config version {raw_version} in {path} (expected {_CONFIG_VERSION})."
        )

    config = ConfiguratorConfig()
    overrides: dict[str, Any] = {}
    for field in ("debugger_type", "asset_root_env", "cargo_program"):
        if data.get(field) is not None:
            overrides[field] = _parse_non_empty_string(data[field], path=path, field=field)

    extra_skip_dirs = _parse_string_list(
        data.get("extra_skip_dirs"), path=path, field="extra_skip_dirs"
    )
    if extra_skip_dirs:
        overrides["skip_dirs"] = config.skip_dirs | frozenset(extra_skip_dirs)

    return replace(config, **overrides)


def load_config(root: Path) -> ConfiguratorConfig:
    path = root / CONFIG_FILENAME
    if not path.is_file():
        return ConfiguratorConfig()
    return parse_config(_load_yaml_mapping(path), path=path)
