"""
Plugin Installation Errors.

This module defines the exception hierarchy shared by the installation
pipeline.

Two families are kept apart:
- InstallAborted: the user declined a confirmation prompt
- InstallFailure: a fatal condition (resolution, build, source control, ...)
"""


class PluginError(Exception):
    """Base exception for plugin-related errors."""

    pass


class InstallAborted(PluginError):
    """Raised when the user declines to continue an installation."""

    def __init__(self, message: str = "Aborted."):
        super().__init__(message)


class InstallFailure(PluginError):
    """Base exception for fatal installation errors."""

    pass


class ResolutionError(InstallFailure):
    """Raised when an index query cannot be narrowed to a single plugin."""

    pass


class PluginNotFoundError(ResolutionError):
    """Raised when no plugin matches an install query."""

    pass


class AmbiguousQueryError(ResolutionError):
    """Raised when several plugins match an install query."""

    def __init__(self, query: str, candidates: list[str]):
        self.query = query
        self.candidates = candidates
        super().__init__(
            f"ambiguous plugin query: multiple matches for [{query}]: "
            + ", ".join(candidates)
        )


class IndexFormatError(InstallFailure):
    """Raised when the plugin index cannot be read or parsed."""

    pass


class DownloadError(InstallFailure):
    """Raised when a binary plugin could not be downloaded."""

    pass


class ProjectNotRecognizedError(InstallFailure):
    """Raised when a checkout does not contain a recognizable project."""

    pass


class BuildError(InstallFailure):
    """Raised when the underlying build tool reports a failure."""

    pass


class MissingArtifactError(InstallFailure):
    """Raised when a build artifact is absent from its declared path."""

    pass
