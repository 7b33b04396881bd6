"""
Installation Orchestrator.

This module provides the top-level install operations.

Key features:
- Install by index name (binary download or source build)
- Install from a git repository URL
- Index search without installation
- Per-attempt state tracking with distinct aborted/failed outcomes
- Reinitialize signal after every successful install
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from plugsmith.config import Settings
from plugsmith.core.signals import ReinitializeChannel, ReinitializeEnvironment
from plugsmith.plugin.builder import SourceBuilder
from plugsmith.plugin.download import ArtifactDownloader
from plugsmith.plugin.errors import (
    AmbiguousQueryError,
    DownloadError,
    InstallAborted,
    PluginNotFoundError,
)
from plugsmith.plugin.index import IndexResolver
from plugsmith.plugin.installer import ArtifactInstaller
from plugsmith.plugin.prompt import Prompt
from plugsmith.plugin.reference import Artifact, PluginReference, parse_coordinate
from plugsmith.plugin.workspace import Workspace

logger = logging.getLogger(__name__)


class InstallState(Enum):
    """Install attempt state enumeration."""

    IDLE = "idle"
    RESOLVED = "resolved"
    BUILDING_FROM_SOURCE = "building_from_source"
    DOWNLOADING = "downloading"
    ARTIFACT_PRODUCED = "artifact_produced"
    SLOT_OCCUPANCY_CHECKED = "slot_occupancy_checked"
    INSTALLED = "installed"
    REINITIALIZE_REQUESTED = "reinitialize_requested"
    DONE = "done"
    ABORTED = "aborted"
    FAILED = "failed"


@dataclass
class InstallAttempt:
    """
    Record of one installation attempt.

    Attributes:
        target: Plugin name or repository URL the attempt was started with
        state: Current state
        history: States visited, in order
        reference: Resolved index entry (install by name only)
        slot: Installed slot file
        error: Message of the exception that ended the attempt
        reinitialize_errors: Failures reported by reinitialize subscribers
    """

    target: str
    state: InstallState = InstallState.IDLE
    history: list[InstallState] = field(default_factory=lambda: [InstallState.IDLE])
    reference: PluginReference | None = None
    slot: Path | None = None
    error: str | None = None
    reinitialize_errors: list[Exception] = field(default_factory=list)

    def advance(self, state: InstallState) -> None:
        logger.debug("Install [%s]: %s -> %s", self.target, self.state.value, state.value)
        self.state = state
        self.history.append(state)

    @property
    def succeeded(self) -> bool:
        return self.state is InstallState.DONE

    @property
    def aborted(self) -> bool:
        return self.state is InstallState.ABORTED


class InstallationOrchestrator:
    """
    Coordinates index resolution, building, downloading and installation.

    Example:
        orchestrator = InstallationOrchestrator(settings, prompt, channel)
        orchestrator.install_by_name("foo")
    """

    def __init__(
        self,
        settings: Settings,
        prompt: Prompt,
        reinitialize: ReinitializeChannel,
        index: IndexResolver | None = None,
        downloader: ArtifactDownloader | None = None,
        builder: SourceBuilder | None = None,
        installer: ArtifactInstaller | None = None,
        workspace_parent: Path | None = None,
    ):
        """
        Initialize InstallationOrchestrator.

        Args:
            settings: Index location, plugin directory and friends
            prompt: Answers confirmation questions
            reinitialize: Channel the reinitialize signal is fired on
            index: Index resolver (created from settings if None)
            downloader: Binary downloader (created from settings if None)
            builder: Source builder (created from settings if None)
            installer: Artifact installer (created from settings if None)
            workspace_parent: Directory download workspaces are created in
        """
        self.settings = settings
        self.prompt = prompt
        self.reinitialize = reinitialize
        # Collaborators created here are closed by close()
        self._owned: list[IndexResolver | ArtifactDownloader] = []
        if index is None:
            index = IndexResolver()
            self._owned.append(index)
        if downloader is None:
            downloader = ArtifactDownloader(settings.artifact_repository)
            self._owned.append(downloader)
        self.index = index
        self.downloader = downloader
        self.builder = builder or SourceBuilder(
            prompt, plugin_contract=settings.plugin_contract
        )
        self.installer = installer or ArtifactInstaller(settings.plugin_dir, prompt)
        self.workspace_parent = workspace_parent
        self.last_attempt: InstallAttempt | None = None

    def search(self, query: str) -> list[PluginReference]:
        """
        Search the default index.

        Args:
            query: Search text

        Returns:
            Matching plugins, possibly empty

        Raises:
            ConfigError: If no index location is configured
        """
        return self.index.search(self.settings.require_index(), query)

    def install_by_name(self, name: str) -> InstallAttempt:
        """
        Install the single plugin of the default index matching a name.

        Args:
            name: Plugin name query

        Returns:
            The finished InstallAttempt

        Raises:
            ConfigError: If the index or plugin directory is not configured
            PluginNotFoundError: If nothing matches
            AmbiguousQueryError: If several plugins match
            InstallAborted: If the user declined a confirmation
            InstallFailure: For any other fatal error
        """
        repository = self.settings.require_index()
        self.settings.require_plugin_dir()

        attempt = self._start(name)
        with self._tracking(attempt):
            matches = self.index.search(repository, name)
            if not matches:
                raise PluginNotFoundError(f"no plugin found with name [{name}]")
            if len(matches) > 1:
                raise AmbiguousQueryError(name, [ref.name for ref in matches])

            reference = matches[0]
            attempt.reference = reference
            attempt.advance(InstallState.RESOLVED)
            logger.info("Preparing to install plugin: %s", reference.name)

            if reference.is_source_control:
                self._build_and_install(attempt, reference.repository_url, reference.ref, None)
            else:
                self._download_and_install(attempt, reference)

            self._request_reinitialize(attempt)

        return attempt

    def install_from_source_control(
        self,
        repository_url: str,
        ref: str | None = None,
        checkout_dir: Path | None = None,
    ) -> InstallAttempt:
        """
        Build a plugin from a git repository and install it.

        Args:
            repository_url: Git repository URL
            ref: Branch or tag to build, None for the default branch
            checkout_dir: Directory to check out into instead of the workspace

        Returns:
            The finished InstallAttempt

        Raises:
            ConfigError: If the plugin directory is not configured
            InstallAborted: If the user declined a confirmation
            InstallFailure: For any fatal error
        """
        self.settings.require_plugin_dir()

        attempt = self._start(repository_url)
        with self._tracking(attempt):
            attempt.advance(InstallState.RESOLVED)
            self._build_and_install(attempt, repository_url, ref, checkout_dir)
            self._request_reinitialize(attempt)

        return attempt

    def restart(self) -> list[Exception]:
        """Fire the reinitialize signal without installing anything."""
        logger.info("Reinitializing environment")
        return self.reinitialize.fire(ReinitializeEnvironment(reason="restart"))

    def close(self) -> None:
        """Close the HTTP clients of collaborators this orchestrator created."""
        for collaborator in self._owned:
            collaborator.close()
        self._owned.clear()

    def __enter__(self) -> "InstallationOrchestrator":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _start(self, target: str) -> InstallAttempt:
        attempt = InstallAttempt(target=target)
        self.last_attempt = attempt
        return attempt

    @contextmanager
    def _tracking(self, attempt: InstallAttempt) -> Iterator[InstallAttempt]:
        try:
            yield attempt
        except InstallAborted as e:
            attempt.error = str(e)
            attempt.advance(InstallState.ABORTED)
            raise
        except Exception as e:
            attempt.error = str(e)
            attempt.advance(InstallState.FAILED)
            raise

    def _build_and_install(
        self,
        attempt: InstallAttempt,
        repository_url: str,
        ref: str | None,
        checkout_dir: Path | None,
    ) -> None:
        attempt.advance(InstallState.BUILDING_FROM_SOURCE)
        with self.builder.build(repository_url, ref, checkout_dir) as artifact:
            self._install_artifact(attempt, artifact)

    def _download_and_install(self, attempt: InstallAttempt, reference: PluginReference) -> None:
        attempt.advance(InstallState.DOWNLOADING)
        coordinate = parse_coordinate(reference.artifact_coordinate)

        with Workspace(self.workspace_parent) as workspace:
            path = self.downloader.download(reference, workspace.root)
            if path is None:
                raise DownloadError(f"Could not install plugin [{reference.name}]")

            artifact = Artifact(path, coordinate.group, coordinate.artifact)
            self._install_artifact(attempt, artifact)

    def _install_artifact(self, attempt: InstallAttempt, artifact: Artifact) -> None:
        attempt.advance(InstallState.ARTIFACT_PRODUCED)
        target = self.installer.prepare_slot(artifact.path, artifact.slot_name)
        attempt.advance(InstallState.SLOT_OCCUPANCY_CHECKED)
        attempt.slot = self.installer.place(artifact.path, target)
        attempt.advance(InstallState.INSTALLED)

    def _request_reinitialize(self, attempt: InstallAttempt) -> None:
        label = attempt.reference.name if attempt.reference else attempt.target
        logger.info("Reinitializing and installing [%s]", label)

        attempt.advance(InstallState.REINITIALIZE_REQUESTED)
        errors = self.reinitialize.fire(
            ReinitializeEnvironment(reason="install", artifact=attempt.slot)
        )
        if errors:
            # The plugin stays installed; only the reload is reported
            attempt.reinitialize_errors = errors
            logger.warning(
                "Plugin installed but %d reinitialize subscriber(s) failed: %s",
                len(errors), "; ".join(str(e) for e in errors),
            )

        attempt.advance(InstallState.DONE)
        logger.info("Installed successfully.")
