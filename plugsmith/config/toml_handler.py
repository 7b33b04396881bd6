"""
TOML File I/O Handler.

This module provides TOML parsing and writing with comment preservation.

Key features:
- Parse TOML files using tomllib (Python 3.11+)
- Write TOML files using tomlkit (preserves comments and formatting)
- Generate a settings document from a schema with descriptive comments
"""

import tomllib
from pathlib import Path
from typing import Any

import tomlkit
from tomlkit.exceptions import TOMLKitError

from plugsmith.config.schema import ConfigField


class TOMLError(Exception):
    """Base exception for TOML-related errors."""

    pass


def read_toml(file_path: Path) -> dict[str, Any]:
    """
    Read and parse a TOML file.

    Args:
        file_path: Path to the TOML file

    Returns:
        Parsed TOML data as dictionary

    Raises:
        TOMLError: If file cannot be read or parsed
    """
    try:
        with open(file_path, "rb") as f:
            return tomllib.load(f)
    except FileNotFoundError as e:
        raise TOMLError(f"TOML file not found: {file_path}") from e
    except tomllib.TOMLDecodeError as e:
        raise TOMLError(f"Failed to parse TOML file {file_path}: {e}") from e
    except OSError as e:
        raise TOMLError(f"Failed to read TOML file {file_path}: {e}") from e


def update_toml_section(file_path: Path, section: str, values: dict[str, Any]) -> None:
    """
    Update one table of a TOML file in place, keeping comments elsewhere.

    Args:
        file_path: Path to the TOML file (created if missing)
        section: Table name to update
        values: Keys and values to set in the table

    Raises:
        TOMLError: If file cannot be read or written
    """
    try:
        if file_path.exists():
            doc = tomlkit.parse(file_path.read_text(encoding="utf-8"))
        else:
            doc = tomlkit.document()

        if section not in doc:
            doc.add(section, tomlkit.table())

        for key, value in values.items():
            doc[section][key] = value

        file_path.parent.mkdir(parents=True, exist_ok=True)
        with open(file_path, "w", encoding="utf-8") as f:
            tomlkit.dump(doc, f)
    except TOMLKitError as e:
        raise TOMLError(f"Failed to parse TOML file {file_path}: {e}") from e
    except OSError as e:
        raise TOMLError(f"Failed to write TOML file {file_path}: {e}") from e


def generate_toml_from_schema(
    section: str, schema: dict[str, ConfigField], config_data: dict[str, Any]
) -> str:
    """
    Generate TOML content from schema with descriptive comments.

    Args:
        section: Table name (used as section header)
        schema: Schema dictionary (field_name -> ConfigField)
        config_data: Configuration data (field_name -> value)

    Returns:
        TOML string with comments
    """
    doc = tomlkit.document()

    doc.add(tomlkit.comment(f"Configuration for {section}"))
    doc.add(tomlkit.nl())

    table = tomlkit.table()

    for field_name, field in schema.items():
        if field.description:
            table.add(tomlkit.comment(field.description))
        if field.choices is not None:
            table.add(tomlkit.comment(f"Choices: {field.choices}"))

        table.add(field_name, config_data.get(field_name, field.default))
        table.add(tomlkit.nl())

    doc.add(section, table)

    return tomlkit.dumps(doc)
