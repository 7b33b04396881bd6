"""
Settings Schema.

This module provides schema declaration and validation for plugsmith settings.

Key features:
- Typed field definitions with optional choices
- Validation of values against schema
- Coercion of command-line strings into field types
"""

from dataclasses import dataclass
from typing import Any


class SchemaError(Exception):
    """Base exception for schema-related errors."""

    pass


class ValidationError(SchemaError):
    """Raised when value validation fails."""

    pass


@dataclass
class ConfigField:
    """
    Represents a settings field with type and constraints.

    Attributes:
        type_: The expected type of the field value
        default: Default value for the field
        description: Human-readable description
        choices: List of allowed values (optional)
    """

    type_: type
    default: Any
    description: str = ""
    choices: list[Any] | None = None

    def __post_init__(self):
        """Validate field definition."""
        if not isinstance(self.default, self.type_):
            raise SchemaError(
                f"Default value {self.default!r} does not match type {self.type_.__name__}"
            )

        if self.choices is not None:
            for choice in self.choices:
                if not isinstance(choice, self.type_):
                    raise SchemaError(
                        f"Choice {choice!r} does not match type {self.type_.__name__}"
                    )
            if self.default not in self.choices:
                raise SchemaError(
                    f"Default value {self.default!r} not in choices {self.choices}"
                )

    def validate(self, value: Any) -> None:
        """
        Validate a value against this field's constraints.

        Args:
            value: The value to validate

        Raises:
            ValidationError: If validation fails
        """
        if not isinstance(value, self.type_):
            raise ValidationError(
                f"Expected type {self.type_.__name__}, got {type(value).__name__}"
            )

        if self.choices is not None and value not in self.choices:
            raise ValidationError(
                f"Value {value!r} not in allowed choices {self.choices}"
            )

    def coerce(self, raw: str) -> Any:
        """Convert a command-line string into this field's type."""
        if self.type_ is bool:
            lowered = raw.strip().lower()
            if lowered in ("1", "true", "yes", "on"):
                return True
            if lowered in ("0", "false", "no", "off"):
                return False
            raise ValidationError(f"Expected a boolean, got {raw!r}")

        try:
            return self.type_(raw)
        except (TypeError, ValueError) as e:
            raise ValidationError(
                f"Cannot convert {raw!r} to {self.type_.__name__}"
            ) from e


def validate_config(config: dict[str, Any], schema: dict[str, ConfigField]) -> None:
    """
    Validate a settings dictionary against a schema.

    Fields absent from ``config`` are allowed; they take their defaults.

    Args:
        config: The settings dictionary to validate
        schema: The schema dictionary (field_name -> ConfigField)

    Raises:
        ValidationError: If validation fails
    """
    for key in config:
        if key not in schema:
            raise ValidationError(f"Unknown configuration field: {key}")

    for field_name, field in schema.items():
        if field_name not in config:
            continue

        try:
            field.validate(config[field_name])
        except ValidationError as e:
            raise ValidationError(f"Field '{field_name}': {e}") from e


def generate_default_config(schema: dict[str, ConfigField]) -> dict[str, Any]:
    """
    Generate a default configuration from a schema.

    Args:
        schema: The schema dictionary (field_name -> ConfigField)

    Returns:
        A dictionary with default values for all fields
    """
    return {field_name: field.default for field_name, field in schema.items()}
