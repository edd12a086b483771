from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as package_version

from rust_workspace_configurator.config import ConfigError, ConfiguratorConfig, load_config
from rust_workspace_configurator.configurator import ConfigureResult, configure_workspace
from rust_workspace_configurator.discovery import ProjectsNotFoundError, find_project_roots
from rust_workspace_configurator.launch import (
    LaunchEntry,
    build_launch_entry,
    cargo_run_args,
    generate_launch_section,
)
from rust_workspace_configurator.metadata import (
    CargoMetadata,
    CargoMetadataProvider,
    CargoPackage,
    CargoTarget,
    MetadataError,
    MetadataProvider,
    parse_metadata,
)
from rust_workspace_configurator.runnables import (
    Runnable,
    RunnableKind,
    RunnableScan,
    build_runnables,
)
from rust_workspace_configurator.workspace import (
    LoadedWorkspace,
    WorkspaceDocument,
    WorkspaceParseError,
    load_workspace_document,
    merge_workspace_document,
    write_workspace_document,
)


def _resolve_version() -> str:
    for distribution_name in ("rust-workspace-configurator", "rust_workspace_configurator"):
        try:
            return package_version(distribution_name)
        except PackageNotFoundError:
            continue
    return "0+unknown"


__version__ = _resolve_version()

__all__ = [
    "__version__",
    "CargoMetadata",
    "CargoMetadataProvider",
    "CargoPackage",
    "CargoTarget",
    "ConfigError",
    "ConfigureResult",
    "ConfiguratorConfig",
    "LaunchEntry",
    "LoadedWorkspace",
    "MetadataError",
    "MetadataProvider",
    "ProjectsNotFoundError",
    "Runnable",
    "RunnableKind",
    "RunnableScan",
    "WorkspaceDocument",
    "WorkspaceParseError",
    "build_launch_entry",
    "build_runnables",
    "cargo_run_args",
    "configure_workspace",
    "find_project_roots",
    "generate_launch_section",
    "load_config",
    "load_workspace_document",
    "merge_workspace_document",
    "parse_metadata",
    "write_workspace_document",
]
