"""
pm settings command (--set).

Persist a setting to the settings file.
"""

from typing import Any

import plugsmith.config
from plugsmith.config import ConfigError
from plugsmith.config.runtime import ProxyError
from plugsmith.config.schema import SchemaError


def set_command(args: Any) -> int:
    """
    Execute set command.

    Args:
        args: Parsed command-line arguments (args.set is [key, value])

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    key, raw = args.set

    try:
        cfg = plugsmith.config.get(args.config)
        value = cfg.set_from_string(key, raw)
    except AttributeError as e:
        known = ", ".join(plugsmith.config.SCHEMA)
        raise ConfigError(f"Unknown setting '{key}' (known: {known})") from e
    except (ProxyError, SchemaError) as e:
        raise ConfigError(str(e)) from e

    print(f"{key} = {value!r}")
    return 0
