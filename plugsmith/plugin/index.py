"""
Plugin Index Resolver.

This module queries a plugin index for references matching a search string.

The index is a JSON document, either a list of entries or an object with a
``plugins`` list:

    [
        {"name": "foo", "artifact": "com.example:foo-plugin"},
        {"name": "bar", "gitrepo": "https://example.com/bar.git", "gitref": "v2"}
    ]

Key features:
- HTTP(S) indexes fetched with httpx
- Local file and file:// indexes
- Case-insensitive substring matching on plugin names
"""

import json
import logging
from pathlib import Path
from typing import Any
from urllib.parse import unquote, urlparse

import httpx

from plugsmith.config import ConfigError
from plugsmith.plugin.errors import IndexFormatError
from plugsmith.plugin.reference import PluginReference, parse_reference

logger = logging.getLogger(__name__)


class IndexResolver:
    """
    Resolves plugin references from a plugin index.

    Returns every match; callers decide whether zero or several matches is
    acceptable.
    """

    def __init__(self, client: httpx.Client | None = None, timeout: float = 30.0):
        """
        Initialize IndexResolver.

        Args:
            client: HTTP client to use (a new one is created if None)
            timeout: Request timeout in seconds for the default client
        """
        self.client = client or httpx.Client(timeout=timeout, follow_redirects=True)

    def fetch_index(self, repository_location: str) -> list[PluginReference]:
        """
        Fetch and parse every entry of an index.

        Args:
            repository_location: http(s) URL, file:// URL or local path

        Returns:
            List of PluginReference objects

        Raises:
            IndexFormatError: If the index cannot be fetched or parsed
        """
        data = self._read(repository_location)

        if isinstance(data, dict):
            data = data.get("plugins")
        if not isinstance(data, list):
            raise IndexFormatError(
                f"Plugin index {repository_location} must be a list of plugins"
            )

        return [parse_reference(entry) for entry in data]

    def search(self, repository_location: str | None, query: str) -> list[PluginReference]:
        """
        Find plugins whose name contains the query.

        Args:
            repository_location: Index location
            query: Search text (case-insensitive)

        Returns:
            Matching PluginReference objects, possibly empty

        Raises:
            ConfigError: If no index location is configured
            IndexFormatError: If the index cannot be fetched or parsed
        """
        if not repository_location:
            raise ConfigError(
                "no default repository set: "
                "(to set, type: pm --set default_plugin_repo <repository>)"
            )

        needle = query.strip().lower()
        references = self.fetch_index(repository_location)
        matches = [ref for ref in references if needle in ref.name.lower()]

        logger.debug(
            "Index %s: %d of %d plugins match [%s]",
            repository_location, len(matches), len(references), query,
        )
        return matches

    def _read(self, location: str) -> Any:
        parsed = urlparse(location)

        if parsed.scheme in ("http", "https"):
            try:
                response = self.client.get(location)
                response.raise_for_status()
                return response.json()
            except httpx.HTTPError as e:
                raise IndexFormatError(f"Failed to fetch plugin index {location}: {e}") from e
            except ValueError as e:
                raise IndexFormatError(f"Failed to parse plugin index {location}: {e}") from e

        path = Path(unquote(parsed.path)) if parsed.scheme == "file" else Path(location)
        try:
            with open(path, encoding="utf-8") as f:
                return json.load(f)
        except FileNotFoundError as e:
            raise IndexFormatError(f"Plugin index not found: {path}") from e
        except json.JSONDecodeError as e:
            raise IndexFormatError(f"Failed to parse plugin index {path}: {e}") from e
        except OSError as e:
            raise IndexFormatError(f"Failed to read plugin index {path}: {e}") from e

    def close(self) -> None:
        self.client.close()
