"""
Runtime Settings Access.

This module provides runtime access to settings with auto-flush on write.

Key features:
- ConfigProxy class with attribute-based access
- Auto-flush to TOML file on attribute write
- Thread-safe file writes with locking
- Validation on load and on write
"""

import threading
from pathlib import Path
from typing import Any

from plugsmith.config.schema import (
    ConfigField,
    SchemaError,
    generate_default_config,
    validate_config,
)
from plugsmith.config.toml_handler import (
    TOMLError,
    generate_toml_from_schema,
    read_toml,
    update_toml_section,
)


class ProxyError(Exception):
    """Base exception for runtime settings errors."""

    pass


class ConfigProxy:
    """
    Proxy object for runtime settings access.

    Provides attribute-based access to one TOML section. All writes are
    validated against the schema and immediately flushed to the file; a
    missing file is created with the schema's descriptions as comments.

    Example:
        cfg = ConfigProxy('plugsmith', schema, config_file)
        value = cfg.plugin_dir       # Read
        cfg.plugin_dir = "/plugins"  # Write (auto-flushes to file)
    """

    def __init__(
        self,
        section: str,
        schema: dict[str, ConfigField],
        config_file: Path,
    ):
        # Use object.__setattr__ to avoid triggering our custom __setattr__
        object.__setattr__(self, "_section", section)
        object.__setattr__(self, "_schema", schema)
        object.__setattr__(self, "_config_file", config_file)
        object.__setattr__(self, "_lock", threading.Lock())
        object.__setattr__(self, "_cache", generate_default_config(schema))

        self._load_config()

    def _load_config(self) -> None:
        """Load settings from file, keeping defaults for absent fields."""
        if not self._config_file.exists():
            return

        try:
            data = read_toml(self._config_file)
            section = data.get(self._section, {})
            validate_config(section, self._schema)
        except (TOMLError, SchemaError) as e:
            raise ProxyError(f"Failed to load config: {e}") from e

        self._cache.update(section)

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            return object.__getattribute__(self, name)

        if name not in self._schema:
            raise AttributeError(
                f"Configuration field '{name}' not found in schema for {self._section}"
            )

        return self._cache[name]

    def __setattr__(self, name: str, value: Any) -> None:
        """
        Set a settings value with auto-flush.

        Raises:
            AttributeError: If field doesn't exist in schema
            ValidationError: If value fails validation
        """
        if name.startswith("_"):
            object.__setattr__(self, name, value)
            return

        if name not in self._schema:
            raise AttributeError(
                f"Configuration field '{name}' not found in schema for {self._section}"
            )

        self._schema[name].validate(value)

        with self._lock:
            self._cache[name] = value
            self._flush(name)

    def set_from_string(self, name: str, raw: str) -> Any:
        """Coerce a command-line string to the field type and write it."""
        if name not in self._schema:
            raise AttributeError(
                f"Configuration field '{name}' not found in schema for {self._section}"
            )
        value = self._schema[name].coerce(raw)
        setattr(self, name, value)
        return value

    def as_dict(self) -> dict[str, Any]:
        with self._lock:
            return dict(self._cache)

    def _flush(self, name: str) -> None:
        try:
            if self._config_file.exists():
                update_toml_section(
                    self._config_file, self._section, {name: self._cache[name]}
                )
            else:
                self._config_file.parent.mkdir(parents=True, exist_ok=True)
                self._config_file.write_text(
                    generate_toml_from_schema(self._section, self._schema, self._cache),
                    encoding="utf-8",
                )
        except (TOMLError, OSError) as e:
            raise ProxyError(f"Failed to flush config to file: {e}") from e

    def __repr__(self) -> str:
        return f"ConfigProxy({self._section}, {self._cache})"
