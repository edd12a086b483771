from __future__ import annotations

from pathlib import Path

import pytest

from rust_workspace_configurator.config import (
    CONFIG_FILENAME,
    ConfigError,
    ConfiguratorConfig,
    load_config,
)


def _write_config(root: Path, text: str) -> None:
    (root / CONFIG_FILENAME).write_text(text, encoding="utf-8")


def test_missing_config_file_uses_defaults(tmp_path: Path) -> None:
    config = load_config(tmp_path)
    assert config == ConfiguratorConfig()
    assert config.manifest_name == "Cargo.toml"
    assert config.skip_dirs == frozenset({"target", "node_modules"})


def test_empty_config_file_uses_defaults(tmp_path: Path) -> None:
    _write_config(tmp_path, "")
    assert load_config(tmp_path) == ConfiguratorConfig()


def test_config_overrides_and_extends_skip_dirs(tmp_path: Path) -> None:
    _write_config(
        tmp_path,
        "\n".join(
            [
                "version: 1",
                "debugger_type: cppvsdbg",
                "asset_root_env: GAME_ASSETS",
                "cargo_program: /opt/cargo/bin/cargo",
                "extra_skip_dirs: [vendor, third_party]",
                "meta:",
                "  owner: tools",
                "",
            ]
        ),
    )

    config = load_config(tmp_path)

    assert config.debugger_type == "cppvsdbg"
    assert config.asset_root_env == "GAME_ASSETS"
    assert config.cargo_program == "/opt/cargo/bin/cargo"
    assert config.skip_dirs == frozenset({"target", "node_modules", "vendor", "third_party"})


def test_unknown_keys_are_rejected(tmp_path: Path) -> None:
    _write_config(tmp_path, "debuger_type: lldb\n")
    with pytest.raises(ConfigError, match="Unknown keys.*debuger_type"):
        load_config(tmp_path)


def test_wrong_types_are_rejected(tmp_path: Path) -> None:
    _write_config(tmp_path, "extra_skip_dirs: vendor\n")
    with pytest.raises(ConfigError, match="extra_skip_dirs"):
        load_config(tmp_path)

    _write_config(tmp_path, "debugger_type: ''\n")
    with pytest.raises(ConfigError, match="debugger_type"):
        load_config(tmp_path)


def test_unsupported_version_and_bad_yaml_are_rejected(tmp_path: Path) -> None:
    _write_config(tmp_path, "version: 2\n")
    with pytest.raises(ConfigError, match="Unsupported config version"):
        load_config(tmp_path)

    _write_config(tmp_path, "debugger_type: [unclosed\n")
    with pytest.raises(ConfigError, match="Failed to parse YAML"):
        load_config(tmp_path)

    _write_config(tmp_path, "- a\n- b\n")
    with pytest.raises(ConfigError, match="Expected a YAML mapping"):
        load_config(tmp_path)


def test_meta_must_be_a_mapping(tmp_path: Path) -> None:
    _write_config(tmp_path, "meta:\n  owner: tools\n")
    assert load_config(tmp_path) == ConfiguratorConfig()

    _write_config(tmp_path, "meta: 5\n")
    with pytest.raises(ConfigError, match="Unknown keys.*meta"):
        load_config(tmp_path)
