"""
Binary Plugin Download.

This module downloads binary plugins from a Maven-layout artifact repository.

Key features:
- Coordinate to URL resolution (group/artifact/version/file)
- Latest release lookup through maven-metadata.xml
- Streaming download with httpx
"""

import logging
import xml.etree.ElementTree as ET
from pathlib import Path

import httpx

from plugsmith.plugin.errors import DownloadError, IndexFormatError
from plugsmith.plugin.reference import Coordinate, PluginReference, parse_coordinate

logger = logging.getLogger(__name__)


class ArtifactDownloader:
    """
    Fetches the artifact a binary PluginReference points at.

    ``download`` reports transport failures by returning None, leaving the
    caller to decide how to surface them.
    """

    def __init__(
        self,
        repository_url: str,
        client: httpx.Client | None = None,
        timeout: float = 60.0,
    ):
        """
        Initialize ArtifactDownloader.

        Args:
            repository_url: Base URL of the artifact repository
            client: HTTP client to use (a new one is created if None)
            timeout: Request timeout in seconds for the default client
        """
        self.repository_url = repository_url.rstrip("/")
        self.client = client or httpx.Client(timeout=timeout, follow_redirects=True)

    def resolve_version(self, coordinate: Coordinate) -> str:
        """
        Return the coordinate's version, asking the repository if absent.

        Raises:
            DownloadError: If the repository metadata has no usable version
        """
        if coordinate.version:
            return coordinate.version

        url = f"{self.repository_url}/{coordinate.group_path}/{coordinate.artifact}/maven-metadata.xml"
        try:
            response = self.client.get(url)
            response.raise_for_status()
            root = ET.fromstring(response.content)
        except httpx.HTTPError as e:
            raise DownloadError(f"Failed to fetch {url}: {e}") from e
        except ET.ParseError as e:
            raise DownloadError(f"Failed to parse {url}: {e}") from e

        for tag in ("versioning/release", "versioning/latest", "version"):
            element = root.find(tag)
            if element is not None and element.text:
                return element.text.strip()

        versions = root.findall("versioning/versions/version")
        if versions and versions[-1].text:
            return versions[-1].text.strip()

        raise DownloadError(f"No version of {coordinate.group}:{coordinate.artifact} published")

    def resolve_url(self, coordinate: Coordinate) -> str:
        version = self.resolve_version(coordinate)
        return (
            f"{self.repository_url}/{coordinate.group_path}/{coordinate.artifact}/"
            f"{version}/{coordinate.file_name(version)}"
        )

    def download(self, reference: PluginReference, target_dir: Path) -> Path | None:
        """
        Download a binary plugin.

        Args:
            reference: Binary plugin reference
            target_dir: Directory to save the artifact in

        Returns:
            Path of the downloaded file, or None on failure
        """
        try:
            coordinate = parse_coordinate(reference.artifact_coordinate)
            url = self.resolve_url(coordinate)
        except (IndexFormatError, DownloadError) as e:
            logger.error("Could not resolve [%s]: %s", reference.artifact_coordinate, e)
            return None

        target = target_dir / url.rsplit("/", 1)[-1]
        logger.info("Downloading [%s]", url)

        try:
            target_dir.mkdir(parents=True, exist_ok=True)
            with self.client.stream("GET", url) as response:
                response.raise_for_status()
                with open(target, "wb") as f:
                    for chunk in response.iter_bytes():
                        f.write(chunk)
        except (httpx.HTTPError, OSError) as e:
            logger.error("Failed to download [%s]: %s", url, e)
            target.unlink(missing_ok=True)
            return None

        return target

    def close(self) -> None:
        self.client.close()
