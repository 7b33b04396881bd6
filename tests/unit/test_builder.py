"""
Tests for the Source Builder.

This test suite covers:
1. Successful builds and workspace teardown
2. User-supplied checkout directories
3. Failure paths (bad ref, unrecognized project, missing artifact, build error)
4. The "install anyway?" confirmation
5. Working context restoration
"""

import tempfile
from pathlib import Path

import pytest

from plugsmith.plugin.builder import SourceBuilder
from plugsmith.plugin.errors import (
    BuildError,
    InstallAborted,
    InstallFailure,
    MissingArtifactError,
    ProjectNotRecognizedError,
)
from plugsmith.plugin.git_ops import GitError, UpstreamMode
from plugsmith.plugin.prompt import StaticPrompt
from plugsmith.plugin.workspace import WorkingContext

REPO_URL = "https://example.com/foo-plugin.git"


@pytest.fixture
def tmp_parent():
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


def make_builder(git, tmp_parent, answer=True, context=None):
    return SourceBuilder(
        StaticPrompt(answer),
        git=git,
        context=context,
        workspace_parent=tmp_parent / "workspaces",
    )


class TestBuild:
    """Test successful builds."""

    def test_build_yields_artifact(self, make_git, render_pyproject, tmp_parent):
        """Should clone, build and yield the declared artifact."""
        git = make_git({"pyproject.toml": render_pyproject()})
        builder = make_builder(git, tmp_parent)

        with builder.build(REPO_URL) as artifact:
            assert artifact.path.read_bytes() == b"PLUGIN-BYTES"
            assert artifact.namespace == "com.example"
            assert artifact.project_name == "foo-plugin"
            assert artifact.slot_name == "example_foo-plugin.whl"
            root = builder.last_workspace.root
            assert artifact.path.is_relative_to(root)

        assert git.cloned[0][1] == REPO_URL
        assert git.checked_out == []
        assert not root.exists()

    def test_build_with_ref(self, make_git, render_pyproject, tmp_parent):
        """Should checkout the ref with upstream tracking."""
        git = make_git({"pyproject.toml": render_pyproject()}, refs=("main", "v2"))
        builder = make_builder(git, tmp_parent)

        with builder.build(REPO_URL, ref="v2"):
            pass

        assert git.checked_out == [("v2", UpstreamMode.SET_UPSTREAM)]

    def test_explicit_checkout_dir_is_kept(self, make_git, render_pyproject, tmp_parent):
        """A user-supplied checkout should survive the workspace."""
        git = make_git({"pyproject.toml": render_pyproject()})
        builder = make_builder(git, tmp_parent)
        checkout_dir = tmp_parent / "checkout"

        with builder.build(REPO_URL, checkout_dir=checkout_dir) as artifact:
            assert artifact.path == checkout_dir.resolve() / "dist" / "plugin.whl"

        assert not builder.last_workspace.root.exists()
        assert (checkout_dir / "dist" / "plugin.whl").exists()

    def test_context_restored(self, make_git, render_pyproject, tmp_parent):
        """The working context should be the checkout during the build only."""
        git = make_git({"pyproject.toml": render_pyproject()})
        context = WorkingContext(Path("/start"))
        builder = make_builder(git, tmp_parent, context=context)

        with builder.build(REPO_URL):
            assert context.current == builder.last_workspace.root / "repo"

        assert context.current == Path("/start")


class TestBuildFailures:
    """Test that every failure leaves no workspace behind."""

    def test_bad_ref(self, make_git, render_pyproject, tmp_parent):
        git = make_git({"pyproject.toml": render_pyproject()})
        context = WorkingContext(Path("/start"))
        builder = make_builder(git, tmp_parent, context=context)

        with pytest.raises(GitError, match="no such branch or tag"):
            with builder.build(REPO_URL, ref="nope"):
                pytest.fail("should not yield")

        assert not builder.last_workspace.root.exists()
        assert context.current == Path("/start")

    def test_unrecognized_project(self, make_git, tmp_parent):
        git = make_git({"README.md": "not a project"})
        builder = make_builder(git, tmp_parent)

        with pytest.raises(ProjectNotRecognizedError, match="Unable to recognize plugin project"):
            with builder.build(REPO_URL):
                pytest.fail("should not yield")

        assert not builder.last_workspace.root.exists()

    def test_malformed_plugin_settings(self, make_git, render_pyproject, tmp_parent):
        """Wrongly typed [tool.plugsmith] values should fail as an install failure."""
        pyproject = render_pyproject().replace('namespace = "com.example"', "namespace = 1")
        git = make_git({"pyproject.toml": pyproject})
        builder = make_builder(git, tmp_parent)

        with pytest.raises(ProjectNotRecognizedError, match="tool.plugsmith.namespace"):
            with builder.build(REPO_URL):
                pytest.fail("should not yield")

        assert not builder.last_workspace.root.exists()

    def test_missing_artifact_never_yields(self, make_git, render_pyproject, tmp_parent):
        """A build that produces nothing should fail before installation."""
        git = make_git({"pyproject.toml": render_pyproject(produce=False)})
        builder = make_builder(git, tmp_parent)
        installed = []

        with pytest.raises(MissingArtifactError, match="is missing and cannot be installed"):
            with builder.build(REPO_URL) as artifact:
                installed.append(artifact)

        assert installed == []
        assert not builder.last_workspace.root.exists()

    def test_build_error(self, make_git, render_pyproject, tmp_parent):
        git = make_git({"pyproject.toml": render_pyproject(fail=True)})
        builder = make_builder(git, tmp_parent)

        with pytest.raises(BuildError):
            with builder.build(REPO_URL):
                pytest.fail("should not yield")

        assert not builder.last_workspace.root.exists()

    def test_error_in_body_still_cleans_up(self, make_git, render_pyproject, tmp_parent):
        git = make_git({"pyproject.toml": render_pyproject()})
        builder = make_builder(git, tmp_parent)

        with pytest.raises(RuntimeError):
            with builder.build(REPO_URL):
                raise RuntimeError("install failed")

        assert not builder.last_workspace.root.exists()


class TestPluginContract:
    """Test the confirmation for projects without the plugin contract."""

    def test_declined(self, make_git, render_pyproject, tmp_parent):
        """Declining should abort, which is not a failure."""
        git = make_git({"pyproject.toml": render_pyproject(contract=False)})
        builder = make_builder(git, tmp_parent, answer=False)

        with pytest.raises(InstallAborted) as exc_info:
            with builder.build(REPO_URL):
                pytest.fail("should not yield")

        assert not isinstance(exc_info.value, InstallFailure)
        assert builder.prompt.questions == [
            "The project does not appear to be a plugin project, install anyway?"
        ]
        assert not builder.last_workspace.root.exists()

    def test_accepted(self, make_git, render_pyproject, tmp_parent):
        git = make_git({"pyproject.toml": render_pyproject(contract=False)})
        builder = make_builder(git, tmp_parent, answer=True)

        with builder.build(REPO_URL) as artifact:
            assert artifact.path.exists()

    def test_plugin_project_is_not_asked(self, make_git, render_pyproject, tmp_parent):
        git = make_git({"pyproject.toml": render_pyproject()})
        builder = make_builder(git, tmp_parent, answer=False)

        with builder.build(REPO_URL):
            pass

        assert builder.prompt.questions == []
