"""
plugsmith Plugin Installation - Resolve, build and hot-install plugins.

This module handles:
- Plugin index resolution
- Binary download and git-based source builds
- Disposable build workspaces
- Plugin slot installation and live loading
- Reinitialize requests after installation
"""

from plugsmith.plugin.errors import (
    AmbiguousQueryError,
    BuildError,
    DownloadError,
    IndexFormatError,
    InstallAborted,
    InstallFailure,
    MissingArtifactError,
    PluginError,
    PluginNotFoundError,
    ProjectNotRecognizedError,
    ResolutionError,
)
from plugsmith.plugin.orchestrator import (
    InstallAttempt,
    InstallationOrchestrator,
    InstallState,
)
from plugsmith.plugin.reference import Artifact, PluginReference

__all__ = [
    "AmbiguousQueryError",
    "Artifact",
    "BuildError",
    "DownloadError",
    "IndexFormatError",
    "InstallAborted",
    "InstallAttempt",
    "InstallFailure",
    "InstallState",
    "InstallationOrchestrator",
    "MissingArtifactError",
    "PluginError",
    "PluginNotFoundError",
    "PluginReference",
    "ProjectNotRecognizedError",
    "ResolutionError",
]
