"""
Live Artifact Loader.

This module loads installed plugin archives into the running interpreter.

Key features:
- zipimport integration: the archive goes on sys.path as-is
- Discovery of top-level modules and packages inside the archive
- Artifact cache with reload when a slot file is replaced
"""

import importlib
import sys
import zipfile
import zipimport
from pathlib import Path
from types import ModuleType

from plugsmith.plugin.errors import InstallFailure


class LoaderError(InstallFailure):
    """Base exception for loader-related errors."""

    pass


# Artifact cache: resolved archive path -> imported top-level modules
_artifact_cache: dict[str, list[ModuleType]] = {}


def top_level_modules(artifact: Path) -> list[str]:
    """
    List the importable top-level names inside an archive.

    Metadata directories (``*.dist-info``, ``*.data``) and non-Python
    entries are ignored.

    Raises:
        LoaderError: If the file is not a readable archive
    """
    try:
        with zipfile.ZipFile(artifact) as archive:
            entries = archive.namelist()
    except (OSError, zipfile.BadZipFile) as e:
        raise LoaderError(f"Cannot read plugin archive {artifact}: {e}") from e

    names = set()
    for entry in entries:
        parts = entry.split("/")
        if len(parts) == 1 and parts[0].endswith(".py"):
            names.add(parts[0][:-3])
        elif len(parts) == 2 and parts[1] == "__init__.py":
            if not parts[0].endswith((".dist-info", ".data")):
                names.add(parts[0])

    return sorted(n for n in names if n.isidentifier())


def load_into_runtime(artifact: Path) -> list[ModuleType]:
    """
    Load an installed plugin archive into the running interpreter.

    Loading the same path again (for example after its slot file was
    replaced) unloads the previous modules first.

    Args:
        artifact: Archive in the plugin directory

    Returns:
        Imported top-level modules

    Raises:
        LoaderError: If the archive cannot be read, one of its top-level
            names is already imported from elsewhere, or a module fails to
            import
    """
    key = str(Path(artifact).resolve())
    names = top_level_modules(artifact)

    # Only modules this archive loaded earlier may be replaced
    owned = {module.__name__ for module in _artifact_cache.get(key, [])}
    taken = [name for name in names if name in sys.modules and name not in owned]
    if taken:
        raise LoaderError(
            f"Cannot load plugin archive {artifact}: module(s) already imported "
            f"from elsewhere: {', '.join(taken)}"
        )

    if key in _artifact_cache:
        unload_artifact(artifact)

    sys.path.insert(0, key)
    importlib.invalidate_caches()

    modules = []
    try:
        for name in names:
            modules.append(importlib.import_module(name))
    except Exception as e:
        # Clean up sys.path and partially imported modules on failure
        for module in modules:
            sys.modules.pop(module.__name__, None)
        if key in sys.path:
            sys.path.remove(key)
        raise LoaderError(f"Failed to load plugin archive {artifact}: {e}") from e

    _artifact_cache[key] = modules
    return modules


def unload_artifact(artifact: Path) -> None:
    """
    Drop an archive from sys.path and its modules from sys.modules.

    Args:
        artifact: Archive previously passed to load_into_runtime
    """
    key = str(Path(artifact).resolve())

    for module in _artifact_cache.pop(key, []):
        prefix = module.__name__ + "."
        for name in [n for n in sys.modules if n == module.__name__ or n.startswith(prefix)]:
            del sys.modules[name]

    while key in sys.path:
        sys.path.remove(key)

    # zipimport keeps a directory cache per archive path
    sys.path_importer_cache.pop(key, None)
    zipimport._zip_directory_cache.pop(key, None)
    importlib.invalidate_caches()


def is_artifact_loaded(artifact: Path) -> bool:
    return str(Path(artifact).resolve()) in _artifact_cache


def clear_cache() -> None:
    """Unload all cached plugin archives."""
    for key in list(_artifact_cache.keys()):
        unload_artifact(Path(key))
