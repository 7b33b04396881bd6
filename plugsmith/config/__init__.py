"""
plugsmith Configuration - TOML-based settings management.

This module provides:
- The settings schema for the installer
- Runtime typed access with auto-flush
- An immutable Settings snapshot with environment overrides

Example usage:
    import plugsmith.config

    settings = plugsmith.config.load_settings()
    index = settings.require_index()

    cfg = plugsmith.config.get()
    cfg.plugin_dir = "/opt/host/plugins"   # Write (auto-flushes)
"""

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from plugsmith.config.runtime import ConfigProxy, ProxyError
from plugsmith.config.schema import ConfigField

SECTION = "plugsmith"

SCHEMA: dict[str, ConfigField] = {
    "default_plugin_repo": ConfigField(
        str, "", "Location of the plugin index (http(s) URL or local JSON file)"
    ),
    "plugin_dir": ConfigField(
        str, "", "Directory the host loads plugins from"
    ),
    "artifact_repository": ConfigField(
        str,
        "https://repo1.maven.org/maven2",
        "Repository binary plugin coordinates are downloaded from",
    ),
    "plugin_contract": ConfigField(
        str,
        "plugsmith-api",
        "Dependency that marks a project as a plugin project",
    ),
}

ENV_OVERRIDES = {
    "default_plugin_repo": "PLUGSMITH_DEFAULT_PLUGIN_REPO",
    "plugin_dir": "PLUGSMITH_PLUGIN_DIR",
}

# Default config file path
_config_file = Path(os.environ.get("PLUGSMITH_CONFIG", "config/plugsmith.toml"))


class ConfigError(Exception):
    """Raised when a required setting is missing or invalid."""

    pass


@dataclass(frozen=True)
class Settings:
    """
    Settings snapshot for one installer run.

    Attributes:
        default_plugin_repo: Plugin index location, None when unset
        plugin_dir: Live plugin directory, None when unset
        artifact_repository: Base URL for binary downloads
        plugin_contract: Dependency name required of plugin projects
    """

    default_plugin_repo: str | None = None
    plugin_dir: Path | None = None
    artifact_repository: str = SCHEMA["artifact_repository"].default
    plugin_contract: str = SCHEMA["plugin_contract"].default

    def require_index(self) -> str:
        """
        Return the configured index location.

        Raises:
            ConfigError: If no index location is configured
        """
        if not self.default_plugin_repo:
            raise ConfigError(
                "no default repository set: "
                "(to set, type: pm --set default_plugin_repo <repository>)"
            )
        return self.default_plugin_repo

    def require_plugin_dir(self) -> Path:
        """
        Return the configured plugin directory.

        Raises:
            ConfigError: If no plugin directory is configured
        """
        if self.plugin_dir is None:
            raise ConfigError(
                "no plugin directory set: "
                "(to set, type: pm --set plugin_dir <directory>)"
            )
        return self.plugin_dir


def get(config_file: Path | None = None) -> ConfigProxy:
    """
    Get runtime settings accessor.

    Args:
        config_file: TOML file to use instead of the default

    Returns:
        ConfigProxy instance for runtime access
    """
    return ConfigProxy(SECTION, SCHEMA, config_file or _config_file)


def load_settings(
    config_file: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> Settings:
    """
    Load a Settings snapshot from the config file and environment.

    Environment variables listed in ENV_OVERRIDES take precedence over the
    file. Empty values count as unset.

    Raises:
        ConfigError: If the config file is unreadable or invalid
    """
    environ = os.environ if environ is None else environ

    try:
        values = get(config_file).as_dict()
    except ProxyError as e:
        raise ConfigError(str(e)) from e

    for name, variable in ENV_OVERRIDES.items():
        if environ.get(variable):
            values[name] = environ[variable]

    return Settings(
        default_plugin_repo=values["default_plugin_repo"] or None,
        plugin_dir=Path(values["plugin_dir"]).expanduser() if values["plugin_dir"] else None,
        artifact_repository=values["artifact_repository"],
        plugin_contract=values["plugin_contract"],
    )


__all__ = ["ConfigError", "ConfigField", "SCHEMA", "Settings", "get", "load_settings"]
