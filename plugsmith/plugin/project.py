"""
Host Project Model.

This module describes a checked-out plugin project through typed
capabilities instead of ad-hoc attribute lookups.

Key features:
- DependencyInfo, Metadata and Packaging capability interfaces
- Project accessors that fail with CapabilityMissingError
- pyproject.toml-backed implementation built with pip
"""

import re
import subprocess
import sys
from pathlib import Path
from typing import Any, Protocol, TypeVar, runtime_checkable

from plugsmith.config.toml_handler import TOMLError, read_toml
from plugsmith.plugin.errors import (
    BuildError,
    InstallFailure,
    MissingArtifactError,
    ProjectNotRecognizedError,
)


class CapabilityMissingError(InstallFailure):
    """Raised when a project lacks a requested capability."""

    pass


@runtime_checkable
class DependencyInfo(Protocol):
    def has_dependency(self, name: str) -> bool: ...


@runtime_checkable
class Metadata(Protocol):
    @property
    def namespace(self) -> str: ...

    @property
    def project_name(self) -> str: ...


@runtime_checkable
class Packaging(Protocol):
    def execute_build(self) -> None: ...

    def final_artifact(self) -> Path: ...


C = TypeVar("C")


class Project:
    """
    A project rooted at a directory, with the capabilities it supports.

    Example:
        project = Project(root, dependencies=deps, metadata=meta, packaging=pkg)
        project.packaging().execute_build()
    """

    def __init__(
        self,
        root: Path,
        dependencies: DependencyInfo | None = None,
        metadata: Metadata | None = None,
        packaging: Packaging | None = None,
    ):
        self.root = root
        self._capabilities: dict[type, Any] = {
            DependencyInfo: dependencies,
            Metadata: metadata,
            Packaging: packaging,
        }

    def _capability(self, kind: type[C]) -> C:
        capability = self._capabilities.get(kind)
        if capability is None:
            raise CapabilityMissingError(
                f"Project [{self.root}] does not provide {kind.__name__}"
            )
        return capability

    def has_capability(self, kind: type) -> bool:
        return self._capabilities.get(kind) is not None

    def dependencies(self) -> DependencyInfo:
        return self._capability(DependencyInfo)

    def metadata(self) -> Metadata:
        return self._capability(Metadata)

    def packaging(self) -> Packaging:
        return self._capability(Packaging)


def canonical_name(name: str) -> str:
    """Normalize a distribution name for comparison (PEP 503)."""
    return re.sub(r"[-_.]+", "-", name).lower()


# Requirement strings start with the distribution name
_REQUIREMENT_NAME = re.compile(r"^\s*([A-Za-z0-9][A-Za-z0-9._-]*)")


class PyprojectDependencies:
    """Dependencies declared in ``[project].dependencies``."""

    def __init__(self, requirements: list[str]):
        self.requirements = requirements

    def names(self) -> set[str]:
        names = set()
        for requirement in self.requirements:
            match = _REQUIREMENT_NAME.match(requirement)
            if match:
                names.add(canonical_name(match.group(1)))
        return names

    def has_dependency(self, name: str) -> bool:
        return canonical_name(name) in self.names()


class PyprojectMetadata:
    """Namespace and name of a pyproject.toml project."""

    def __init__(self, project_name: str, namespace: str):
        self._project_name = project_name
        self._namespace = namespace

    @property
    def namespace(self) -> str:
        return self._namespace

    @property
    def project_name(self) -> str:
        return self._project_name


class PipWheelPackaging:
    """
    Builds a wheel with pip, or with the project's own build command.

    The final artifact is ``[tool.plugsmith].artifact`` when declared,
    otherwise the wheel pip leaves in ``dist/``.
    """

    def __init__(
        self,
        root: Path,
        project_name: str,
        version: str | None,
        build_command: list[str] | None = None,
        artifact: str | None = None,
    ):
        self.root = root
        self.project_name = project_name
        self.version = version
        self.build_command = build_command
        self.artifact = artifact
        self.dist_dir = root / "dist"

    def command(self) -> list[str]:
        if self.build_command:
            return list(self.build_command)
        return [
            sys.executable, "-m", "pip", "wheel",
            "--no-deps", "--wheel-dir", str(self.dist_dir), ".",
        ]

    def execute_build(self) -> None:
        """
        Run the build synchronously in the project root.

        Raises:
            BuildError: If the build tool cannot be started or fails
        """
        cmd = self.command()
        try:
            result = subprocess.run(
                cmd,
                cwd=self.root,
                capture_output=True,
                text=True,
                check=False,
            )
        except OSError as e:
            raise BuildError(f"Failed to start build command {cmd[0]}: {e}") from e

        if result.returncode != 0:
            raise BuildError(
                f"Build failed with exit code {result.returncode}:\n"
                f"stdout: {result.stdout}\n"
                f"stderr: {result.stderr}"
            )

    def final_artifact(self) -> Path:
        """
        Return the artifact the build produced.

        Without a declared artifact this is the wheel in ``dist/`` named
        after the project. pip normalizes the version and the platform tag,
        so the file is looked up rather than computed.

        Raises:
            MissingArtifactError: If no wheel of the project is in ``dist/``
        """
        if self.artifact:
            return self.root / self.artifact

        wheel_name = _wheel_name(self.project_name)
        wheels = [
            path for path in self.dist_dir.glob("*.whl")
            if _wheel_name(path.name.split("-", 1)[0]) == wheel_name
        ]
        if not wheels:
            raise MissingArtifactError(
                f"Build artifact [{self.dist_dir / (wheel_name + '-*.whl')}] is missing "
                f"and cannot be installed. Please resolve build errors and try again."
            )

        # Newest wins when dist/ already held wheels of older builds
        return max(wheels, key=lambda path: path.stat().st_mtime)


def _wheel_name(name: str) -> str:
    return re.sub(r"[-_.]+", "_", name).lower()


def _string_list(value: Any, key: str, pyproject: Path) -> list[str]:
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ProjectNotRecognizedError(
            f"Invalid {key} in [{pyproject}]: expected a list of strings, got {value!r}"
        )
    return value


def _optional_string(value: Any, key: str, pyproject: Path) -> str | None:
    if value is not None and not isinstance(value, str):
        raise ProjectNotRecognizedError(
            f"Invalid {key} in [{pyproject}]: expected a string, got {value!r}"
        )
    return value


def locate_project(directory: Path) -> Project | None:
    """
    Recognize the project rooted at a directory.

    Args:
        directory: Candidate project root

    Returns:
        Project, or None if the directory holds no recognizable project

    Raises:
        ProjectNotRecognizedError: If pyproject.toml declares plugsmith
            settings or dependencies of the wrong type
    """
    pyproject = directory / "pyproject.toml"
    if not pyproject.is_file():
        return None

    try:
        data = read_toml(pyproject)
    except TOMLError:
        return None

    project = data.get("project")
    if not isinstance(project, dict) or not isinstance(project.get("name"), str):
        return None

    name = project["name"]
    tool = data.get("tool", {})
    tool = tool.get("plugsmith", {}) if isinstance(tool, dict) else {}
    if not isinstance(tool, dict):
        raise ProjectNotRecognizedError(
            f"Invalid [tool.plugsmith] in [{pyproject}]: expected a table"
        )

    version = _optional_string(project.get("version"), "project.version", pyproject)
    requirements = _string_list(
        project.get("dependencies", []), "project.dependencies", pyproject
    )
    namespace = _optional_string(tool.get("namespace"), "tool.plugsmith.namespace", pyproject)
    artifact = _optional_string(tool.get("artifact"), "tool.plugsmith.artifact", pyproject)
    build_command = tool.get("build-command")
    if build_command is not None:
        build_command = _string_list(build_command, "tool.plugsmith.build-command", pyproject)

    return Project(
        directory,
        dependencies=PyprojectDependencies(requirements),
        metadata=PyprojectMetadata(name, namespace or re.sub(r"[-.]+", "_", name).lower()),
        packaging=PipWheelPackaging(
            directory,
            name,
            version,
            build_command=build_command,
            artifact=artifact,
        ),
    )
