"""
plugsmith - Resolve, build and hot-install plugins into a running host.

This is the main package that exports the public API for plugsmith.
"""

__version__ = "0.1.0"

from plugsmith.config import Settings, load_settings
from plugsmith.core.signals import ReinitializeChannel, ReinitializeEnvironment
from plugsmith.plugin import InstallationOrchestrator, PluginReference

__all__ = [
    "__version__",
    "InstallationOrchestrator",
    "PluginReference",
    "ReinitializeChannel",
    "ReinitializeEnvironment",
    "Settings",
    "load_settings",
]
