"""
Tests for plugin references, coordinates and slot naming.
"""

from pathlib import Path

import pytest

from plugsmith.plugin.errors import IndexFormatError
from plugsmith.plugin.reference import (
    Artifact,
    PluginReference,
    parse_coordinate,
    parse_reference,
    slot_name,
)


class TestPluginReference:
    """Test index entry parsing and reference invariants."""

    def test_parse_binary_entry(self):
        """Should parse an entry with an artifact coordinate."""
        ref = parse_reference(
            {"name": "foo", "artifact": "com.example:foo-plugin", "author": "someone"}
        )

        assert ref.name == "foo"
        assert ref.artifact_coordinate == "com.example:foo-plugin"
        assert not ref.is_source_control
        assert ref.repository_url is None
        assert ref.ref is None
        assert ref.author == "someone"

    def test_parse_source_entry(self):
        """Should treat an entry with gitrepo as a source-control plugin."""
        ref = parse_reference(
            {"name": "bar", "gitrepo": "https://example.com/bar.git", "gitref": "v2"}
        )

        assert ref.is_source_control
        assert ref.repository_url == "https://example.com/bar.git"
        assert ref.ref == "v2"

    def test_source_entry_without_ref(self):
        """Should leave ref unset so the default branch is built."""
        ref = parse_reference({"name": "bar", "gitrepo": "https://example.com/bar.git"})

        assert ref.ref is None

    def test_entry_without_location(self):
        """Should reject an entry with neither artifact nor gitrepo."""
        with pytest.raises(IndexFormatError, match="neither an artifact nor a git repository"):
            parse_reference({"name": "lost"})

    def test_entry_without_name(self):
        """Should reject an entry without a name."""
        with pytest.raises(IndexFormatError, match="missing a name"):
            parse_reference({"artifact": "com.example:foo"})

    def test_entry_with_wrong_types(self):
        """Should reject non-string fields."""
        with pytest.raises(IndexFormatError, match="must be a string"):
            parse_reference({"name": "foo", "artifact": 42})

        with pytest.raises(IndexFormatError, match="must be an object"):
            parse_reference(["foo"])

    def test_ref_requires_source_control(self):
        """A git ref on a binary plugin violates the reference invariant."""
        with pytest.raises(IndexFormatError, match="git ref without a git repository"):
            PluginReference(name="foo", artifact_coordinate="com.example:foo", ref="v1")

    def test_source_control_requires_url(self):
        with pytest.raises(IndexFormatError, match="no repository URL"):
            PluginReference(name="foo", is_source_control=True)


class TestCoordinate:
    """Test artifact coordinate parsing."""

    def test_parse_group_and_artifact(self):
        coordinate = parse_coordinate("com.example:foo-plugin")

        assert coordinate.group == "com.example"
        assert coordinate.artifact == "foo-plugin"
        assert coordinate.version is None
        assert coordinate.packaging == "jar"
        assert coordinate.group_path == "com/example"

    def test_parse_full_coordinate(self):
        coordinate = parse_coordinate("org.acme.tools:bar:2.1.0:zip")

        assert coordinate.version == "2.1.0"
        assert coordinate.packaging == "zip"
        assert coordinate.file_name("2.1.0") == "bar-2.1.0.zip"

    @pytest.mark.parametrize("text", ["foo", "a:b:c:d:e", "a::c", "a b:c"])
    def test_invalid_coordinates(self, text):
        """Should reject malformed coordinates."""
        with pytest.raises(IndexFormatError, match="Invalid artifact coordinate"):
            parse_coordinate(text)


class TestSlotName:
    """Test deterministic slot naming."""

    def test_uses_last_namespace_component(self):
        assert slot_name("com.example", "foo-plugin", ".jar") == "example_foo-plugin.jar"

    def test_undotted_namespace(self):
        assert slot_name("acme", "tools", ".whl") == "acme_tools.whl"

    def test_artifact_slot_name_keeps_suffix(self):
        """Artifact.slot_name should use the artifact file's extension."""
        artifact = Artifact(Path("/tmp/build/dist/plugin.whl"), "com.example", "foo-plugin")

        assert artifact.slot_name == "example_foo-plugin.whl"

    def test_same_project_same_slot(self):
        """Different builds of one project should land in one slot."""
        first = Artifact(Path("/a/foo-plugin-1.0.jar"), "com.example", "foo-plugin")
        second = Artifact(Path("/b/foo-plugin-2.0.jar"), "com.example", "foo-plugin")

        assert first.slot_name == second.slot_name
