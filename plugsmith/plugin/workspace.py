"""
Installation Workspace.

This module provides the disposable staging area used by one installation
attempt, and the working-directory context the build runs in.

Key features:
- Uniquely named temporary root, created fresh per attempt
- Clean build directory (workspace-owned or user-supplied)
- Guaranteed teardown of the root on every exit path
- Scoped working-directory switching with guaranteed restoration
"""

import logging
import shutil
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

logger = logging.getLogger(__name__)


class WorkspaceError(Exception):
    """Raised when a workspace is used outside its lifetime."""

    pass


class Workspace:
    """
    Temporary staging area for one installation attempt.

    Use as a context manager; the root directory is removed on exit whether
    the body succeeded or raised. A user-supplied build directory is left in
    place.

    Example:
        with Workspace() as workspace:
            build_dir = workspace.allocate_build_dir()
            ...
    """

    BUILD_DIR_NAME = "repo"

    def __init__(self, parent: Path | None = None, prefix: str = "plugsmith-"):
        """
        Initialize Workspace.

        Args:
            parent: Directory to create the root in (system temp dir if None)
            prefix: Prefix for the root directory name
        """
        self.parent = parent
        self.prefix = prefix
        self._root: Path | None = None
        self.build_dir: Path | None = None
        self.owns_build_dir = True

    @property
    def root(self) -> Path:
        if self._root is None:
            raise WorkspaceError("Workspace has not been acquired")
        return self._root

    def __enter__(self) -> "Workspace":
        if self._root is not None:
            raise WorkspaceError("Workspace cannot be reused")
        if self.parent is not None:
            self.parent.mkdir(parents=True, exist_ok=True)
        self._root = Path(tempfile.mkdtemp(prefix=self.prefix, dir=self.parent))
        logger.debug("Created temp workspace [%s]", self._root)
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.cleanup()

    def allocate_build_dir(self, explicit: Path | None = None) -> Path:
        """
        Prepare an empty build directory.

        Args:
            explicit: User-supplied checkout directory; created if missing

        Returns:
            The empty build directory
        """
        if explicit is not None:
            build_dir = Path(explicit).expanduser().resolve()
            build_dir.mkdir(parents=True, exist_ok=True)
            self.owns_build_dir = False
        else:
            build_dir = self.root / self.BUILD_DIR_NAME
            self.owns_build_dir = True

        # Builds always start from an empty directory
        if build_dir.exists() and any(build_dir.iterdir()):
            shutil.rmtree(build_dir)
        build_dir.mkdir(parents=True, exist_ok=True)

        self.build_dir = build_dir
        return build_dir

    def cleanup(self) -> None:
        """Remove the workspace root. Safe to call more than once."""
        if self._root is None or not self._root.exists():
            return

        logger.info("Cleaning up temp workspace [%s]", self._root)
        try:
            shutil.rmtree(self._root)
        except OSError as e:
            # Teardown must not mask the error that ended the attempt
            logger.warning("Failed to remove temp workspace [%s]: %s", self._root, e)


class WorkingContext:
    """
    The installer's notion of the current directory.

    Builds switch it to their checkout; ``scoped()`` guarantees the previous
    value is restored on every exit path.
    """

    def __init__(self, current: Path | None = None):
        self.current = Path(current) if current is not None else Path.cwd()

    @contextmanager
    def scoped(self, location: Path) -> Iterator["WorkingContext"]:
        saved = self.current
        self.current = Path(location)
        try:
            yield self
        finally:
            self.current = saved

    def move_to(self, location: Path) -> None:
        self.current = Path(location)
