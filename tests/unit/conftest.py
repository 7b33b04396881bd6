"""
Shared fixtures for the installer test suite.

Provides:
- FakeGit: a source-control client that "clones" a fixed file tree
- plugin_pyproject(): pyproject.toml text for a buildable plugin project
- RecordingChannel subscriber helpers
"""

import sys
from pathlib import Path

import pytest

from plugsmith.core.signals import ReinitializeChannel
from plugsmith.plugin.git_ops import GitError, UpstreamMode


class FakeGit:
    """Source-control client writing a fixed file tree instead of cloning."""

    def __init__(self, files: dict[str, str] | None = None, refs=("main",)):
        self.files = files or {}
        self.refs = set(refs)
        self.cloned: list[tuple[Path, str]] = []
        self.checked_out: list[tuple[str, UpstreamMode]] = []

    def clone(self, target_dir: Path, repo_url: str) -> Path:
        if any(target_dir.iterdir()):
            raise GitError(f"destination path '{target_dir}' is not empty")
        for rel, content in self.files.items():
            path = target_dir / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content)
        self.cloned.append((target_dir, repo_url))
        return target_dir

    def checkout(
        self,
        repo_dir: Path,
        ref: str,
        create_branch: bool = False,
        upstream: UpstreamMode = UpstreamMode.SET_UPSTREAM,
        force: bool = False,
    ) -> None:
        if ref not in self.refs:
            raise GitError(f"Failed to checkout {ref}: no such branch or tag")
        self.checked_out.append((ref, upstream))


def _toml_literal(value: str) -> str:
    return "'" + value + "'"


def plugin_pyproject(
    name: str = "foo-plugin",
    namespace: str = "com.example",
    contract: bool = True,
    produce: bool = True,
    fail: bool = False,
) -> str:
    """
    Render a pyproject.toml whose build command writes dist/plugin.whl.

    Args:
        name: Project name
        namespace: Value of [tool.plugsmith].namespace
        contract: Whether the project depends on plugsmith-api
        produce: Whether the build writes the declared artifact
        fail: Whether the build command exits non-zero
    """
    if fail:
        script = 'import sys; print("compilation failed"); sys.exit(3)'
    elif produce:
        script = (
            'import pathlib; d = pathlib.Path("dist"); d.mkdir(exist_ok=True); '
            '(d / "plugin.whl").write_bytes(b"PLUGIN-BYTES")'
        )
    else:
        script = "pass"

    dependency = '"plugsmith-api>=0.1"' if contract else '"requests>=2"'
    command = ", ".join(_toml_literal(p) for p in (sys.executable, "-c", script))

    return (
        "[project]\n"
        f'name = "{name}"\n'
        'version = "1.0.0"\n'
        f"dependencies = [{dependency}]\n"
        "\n"
        "[tool.plugsmith]\n"
        f'namespace = "{namespace}"\n'
        'artifact = "dist/plugin.whl"\n'
        f"build-command = [{command}]\n"
    )


@pytest.fixture
def channel():
    """Reinitialize channel recording every delivered event."""
    channel = ReinitializeChannel()
    channel.events = []
    channel.subscribe(channel.events.append)
    return channel


@pytest.fixture
def make_git():
    """Factory for FakeGit clients."""
    return FakeGit


@pytest.fixture
def render_pyproject():
    """Renderer for buildable plugin pyproject.toml files."""
    return plugin_pyproject
