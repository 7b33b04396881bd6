"""
Artifact Installer.

This module swaps a built or downloaded artifact into the live plugin
directory.

Key features:
- Artifact validation before anything in the plugin directory changes
- Slot occupancy detection with overwrite confirmation
- Live-load of the freshly copied slot file

Replacing a slot deletes the old file before copying the new one; a crash
between the two leaves the slot empty.
"""

import logging
import shutil
from collections.abc import Callable
from pathlib import Path
from typing import Any

from plugsmith.config import ConfigError
from plugsmith.plugin.errors import InstallAborted, MissingArtifactError
from plugsmith.plugin.loader import load_into_runtime
from plugsmith.plugin.prompt import Prompt

logger = logging.getLogger(__name__)


class ArtifactInstaller:
    """
    Installs artifacts into plugin slots.

    Example:
        installer = ArtifactInstaller(plugin_dir, prompt)
        installer.install(Path("dist/foo.whl"), "example_foo.whl")
    """

    def __init__(
        self,
        plugin_dir: Path | None,
        prompt: Prompt,
        load: Callable[[Path], Any] = load_into_runtime,
    ):
        """
        Initialize ArtifactInstaller.

        Args:
            plugin_dir: Live plugin directory (None when not configured)
            prompt: Answers the overwrite question
            load: Host live-load operation
        """
        self.plugin_dir = plugin_dir
        self.prompt = prompt
        self.load = load

    def slot_path(self, slot_name: str) -> Path:
        """
        Compute the plugin directory path of a slot.

        Raises:
            ConfigError: If no plugin directory is configured
        """
        if self.plugin_dir is None:
            raise ConfigError(
                "no plugin directory set: "
                "(to set, type: pm --set plugin_dir <directory>)"
            )
        return self.plugin_dir / slot_name

    def prepare_slot(self, artifact: Path, slot_name: str) -> Path:
        """
        Validate the artifact and make sure the slot may be written.

        Args:
            artifact: Artifact file to install
            slot_name: Target slot file name

        Returns:
            Path of the slot

        Raises:
            MissingArtifactError: If the artifact does not exist
            InstallAborted: If the user declines to replace an occupied slot
        """
        if not artifact.is_file():
            raise MissingArtifactError(
                f"Build artifact [{artifact}] is missing and cannot be installed. "
                f"Please resolve build errors and try again."
            )

        target = self.slot_path(slot_name)

        if target.exists() and not self.prompt.confirm(
            "An existing version of this plugin was found. Replace it? (forces restart)",
            True,
        ):
            raise InstallAborted("Aborted.")

        return target

    def place(self, artifact: Path, target: Path) -> Path:
        """
        Copy the artifact into a prepared slot and live-load it.

        Args:
            artifact: Artifact file to install
            target: Slot path returned by prepare_slot

        Returns:
            Path of the installed slot file
        """
        if target.exists():
            target.unlink()

        target.parent.mkdir(parents=True, exist_ok=True)
        logger.info("Copying build artifact to [%s]", target)
        shutil.copyfile(artifact, target)

        self.load(target)
        return target

    def install(self, artifact: Path, slot_name: str) -> Path:
        """
        Install an artifact into a plugin slot.

        Args:
            artifact: Artifact file to install
            slot_name: Target slot file name

        Returns:
            Path of the installed slot file

        Raises:
            MissingArtifactError: If the artifact does not exist
            InstallAborted: If the user declines to replace an occupied slot
        """
        target = self.prepare_slot(artifact, slot_name)
        return self.place(artifact, target)
