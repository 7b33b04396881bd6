"""
Source Builder.

This module builds a plugin from a git repository inside a disposable
workspace.

Build steps:
1. Acquire a workspace and an empty build directory
2. Clone the repository, optionally checkout a branch or tag
3. Recognize the project and check it depends on the plugin contract
4. Run the project's build and pick up its final artifact

The workspace is removed and the working context restored on every exit
path, including failures and user aborts.
"""

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from pathlib import Path

from plugsmith.plugin.errors import (
    InstallAborted,
    MissingArtifactError,
    ProjectNotRecognizedError,
)
from plugsmith.plugin.git_ops import GitClient, UpstreamMode
from plugsmith.plugin.project import Project, locate_project
from plugsmith.plugin.prompt import Prompt
from plugsmith.plugin.reference import Artifact
from plugsmith.plugin.workspace import WorkingContext, Workspace

logger = logging.getLogger(__name__)

DEFAULT_PLUGIN_CONTRACT = "plugsmith-api"


class SourceBuilder:
    """
    Clones, builds and yields plugin artifacts.

    Example:
        builder = SourceBuilder(prompt)
        with builder.build("https://example.com/repo.git", ref="v2") as artifact:
            installer.install(artifact.path, artifact.slot_name)
    """

    def __init__(
        self,
        prompt: Prompt,
        git: GitClient | None = None,
        project_locator: Callable[[Path], Project | None] = locate_project,
        context: WorkingContext | None = None,
        plugin_contract: str = DEFAULT_PLUGIN_CONTRACT,
        workspace_parent: Path | None = None,
    ):
        """
        Initialize SourceBuilder.

        Args:
            prompt: Answers the "install anyway?" question
            git: Source-control client
            project_locator: Recognizes the project in a checkout
            context: Working context switched to the checkout during the build
            plugin_contract: Dependency every plugin project is expected to have
            workspace_parent: Directory workspaces are created in
        """
        self.prompt = prompt
        self.git = git or GitClient()
        self.project_locator = project_locator
        self.context = context or WorkingContext()
        self.plugin_contract = plugin_contract
        self.workspace_parent = workspace_parent
        self.last_workspace: Workspace | None = None

    @contextmanager
    def build(
        self,
        repository_url: str,
        ref: str | None = None,
        checkout_dir: Path | None = None,
    ) -> Iterator[Artifact]:
        """
        Build a plugin from source.

        The artifact is only valid inside the ``with`` block: leaving it
        tears the workspace down.

        Args:
            repository_url: Git repository URL
            ref: Branch or tag to build, None for the default branch
            checkout_dir: Directory to check out into instead of the workspace

        Yields:
            The built Artifact

        Raises:
            GitError: If clone or checkout fails
            ProjectNotRecognizedError: If the checkout holds no project
            InstallAborted: If the user declines to build a non-plugin project
            BuildError: If the build tool fails
            MissingArtifactError: If the declared artifact does not exist
        """
        workspace = Workspace(self.workspace_parent)
        self.last_workspace = workspace

        with workspace, self.context.scoped(workspace.root):
            build_dir = workspace.allocate_build_dir(checkout_dir)

            logger.info("Checking out plugin source files to [%s] via 'git'", build_dir)
            self.git.clone(build_dir, repository_url)
            self.context.move_to(build_dir)

            if ref is not None:
                logger.info("Switching to branch/tag [%s]", ref)
                self.git.checkout(
                    build_dir, ref, create_branch=False,
                    upstream=UpstreamMode.SET_UPSTREAM, force=False,
                )

            project = self.project_locator(self.context.current)
            if project is None:
                raise ProjectNotRecognizedError(
                    f"Unable to recognize plugin project in [{build_dir}]"
                )

            if not project.dependencies().has_dependency(self.plugin_contract):
                if not self.prompt.confirm(
                    "The project does not appear to be a plugin project, install anyway?",
                    False,
                ):
                    logger.info("Aborted installation.")
                    raise InstallAborted("Aborted installation.")

            packaging = project.packaging()
            logger.info("Invoking build with underlying build system.")
            packaging.execute_build()

            artifact_path = packaging.final_artifact()
            if not artifact_path.is_file():
                raise MissingArtifactError(
                    f"Build artifact [{artifact_path}] is missing and cannot be installed. "
                    f"Please resolve build errors and try again."
                )

            metadata = project.metadata()
            yield Artifact(artifact_path, metadata.namespace, metadata.project_name)
