"""
Plugin References.

This module describes what an index entry points at and how an artifact is
named once it lands in the plugin directory.

Key features:
- PluginReference parsing and validation of index entries
- Maven-style artifact coordinate parsing
- Deterministic plugin slot naming
"""

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from plugsmith.plugin.errors import IndexFormatError


@dataclass(frozen=True)
class PluginReference:
    """
    A discoverable plugin.

    Attributes:
        name: Plugin name as listed in the index
        artifact_coordinate: Location of a downloadable binary
        is_source_control: True when the plugin is built from a git repository
        repository_url: Git repository URL (source-control plugins only)
        ref: Branch or tag to build, None for the default branch
        description: Plugin description
        author: Plugin author
        website: Project homepage
    """

    name: str
    artifact_coordinate: str = ""
    is_source_control: bool = False
    repository_url: str | None = None
    ref: str | None = None
    description: str = ""
    author: str = ""
    website: str = ""

    def __post_init__(self):
        if not self.name:
            raise IndexFormatError("Plugin reference is missing a name")

        if self.is_source_control:
            if not self.repository_url:
                raise IndexFormatError(
                    f"Plugin [{self.name}] is built from source but has no repository URL"
                )
        else:
            if not self.artifact_coordinate:
                raise IndexFormatError(
                    f"Plugin [{self.name}] has neither an artifact nor a git repository"
                )
            if self.repository_url or self.ref:
                raise IndexFormatError(
                    f"Plugin [{self.name}] declares a git ref without a git repository"
                )


def parse_reference(entry: dict[str, Any]) -> PluginReference:
    """
    Build a PluginReference from a raw index entry.

    An entry with a ``gitrepo`` key is installed from source; any other entry
    needs an ``artifact`` coordinate.

    Args:
        entry: Index entry (name, artifact, gitrepo, gitref, ...)

    Returns:
        PluginReference object

    Raises:
        IndexFormatError: If the entry is malformed
    """
    if not isinstance(entry, dict):
        raise IndexFormatError(f"Index entry must be an object, got: {entry!r}")

    for key in ("name", "artifact", "gitrepo", "gitref", "description", "author", "website"):
        if key in entry and entry[key] is not None and not isinstance(entry[key], str):
            raise IndexFormatError(f"Index field '{key}' must be a string: {entry[key]!r}")

    repository_url = entry.get("gitrepo") or None

    return PluginReference(
        name=entry.get("name", ""),
        artifact_coordinate=entry.get("artifact") or "",
        is_source_control=repository_url is not None,
        repository_url=repository_url,
        ref=entry.get("gitref") or None,
        description=entry.get("description") or "",
        author=entry.get("author") or "",
        website=entry.get("website") or "",
    )


@dataclass(frozen=True)
class Coordinate:
    """
    A Maven-style artifact coordinate: ``group:artifact[:version[:packaging]]``.
    """

    group: str
    artifact: str
    version: str | None = None
    packaging: str = "jar"

    @property
    def group_path(self) -> str:
        return self.group.replace(".", "/")

    def file_name(self, version: str) -> str:
        return f"{self.artifact}-{version}.{self.packaging}"


_COORDINATE_PART = re.compile(r"^[A-Za-z0-9_.\-]+$")


def parse_coordinate(coordinate: str) -> Coordinate:
    """
    Parse an artifact coordinate string.

    Args:
        coordinate: Coordinate (e.g., "com.example:foo-plugin:1.0.0")

    Returns:
        Coordinate object

    Raises:
        IndexFormatError: If the coordinate is malformed
    """
    parts = coordinate.strip().split(":")
    if len(parts) < 2 or len(parts) > 4 or not all(
        _COORDINATE_PART.match(p) for p in parts
    ):
        raise IndexFormatError(
            f"Invalid artifact coordinate: {coordinate}. "
            f"Expected format: group:artifact[:version[:packaging]]"
        )

    group, artifact = parts[0], parts[1]
    version = parts[2] if len(parts) > 2 else None
    packaging = parts[3] if len(parts) > 3 else "jar"
    return Coordinate(group=group, artifact=artifact, version=version, packaging=packaging)


def slot_name(namespace: str, project_name: str, suffix: str) -> str:
    """
    Compute the plugin slot file name for a project.

    Only the last component of a dotted namespace is used, so
    ``("com.example", "foo-plugin", ".jar")`` maps to ``example_foo-plugin.jar``.
    """
    short = namespace.rsplit(".", 1)[-1]
    return f"{short}_{project_name}{suffix}"


@dataclass(frozen=True)
class Artifact:
    """
    Output of a build or download step.

    Attributes:
        path: Artifact file on disk
        namespace: Top-level namespace of the producing project
        project_name: Name of the producing project
    """

    path: Path
    namespace: str
    project_name: str

    @property
    def slot_name(self) -> str:
        return slot_name(self.namespace, self.project_name, self.path.suffix)
