"""Remote Maven repository source.

Versions are read from the artifact's ``maven-metadata.xml``; installers are
downloaded with GET and republished with authenticated PUT requests.

Publish protocol
----------------
Every upload is a PUT carrying ``X-Generate-Checksums``, set to ``true`` only
for the installer itself. When the repository does not answer with a success
status the upload is cleared (HEAD, then DELETE if something is there) and
the PUT is sent again. By default this repeats until the repository accepts
the upload, so a permanently failing endpoint keeps the unit busy forever.
``publish_max_attempts`` bounds the loop and ``publish_retry_delay`` spaces
the attempts out.
"""

from __future__ import annotations

import logging
import time
from pathlib import Path

import requests
from requests.auth import HTTPBasicAuth

from installer_rewriter.config import RewriterSettings
from installer_rewriter.core.hasher import checksum_sidecar_names, compute_checksums
from installer_rewriter.core.jar_contents import JarContents
from installer_rewriter.core.metadata import parse_maven_metadata
from installer_rewriter.models.artifacts import Installer, installer_file_name
from installer_rewriter.models.config import MavenSourceConfig
from installer_rewriter.sources.base import InstallerSource

logger = logging.getLogger(__name__)

GENERATE_CHECKSUMS_HEADER = "X-Generate-Checksums"


class TransportError(RuntimeError):
    """Raised when the repository answers with an unexpected status or is unreachable."""


class PublishError(TransportError):
    """Raised when an upload still fails after ``publish_max_attempts`` tries."""


def _is_success(status_code: int) -> bool:
    return 200 <= status_code < 300


class MavenSource(InstallerSource):
    """Installer source backed by a Maven repository.

    Parameters
    ----------
    config:
        Repository URL, credentials, ``group:artifact`` coordinates and
        optional local backup root.
    settings:
        Timeouts and publish retry policy.
    session:
        HTTP session to use. One authenticated session is created when not
        provided; it is shared by every concurrent unit and never modified
        after construction.
    """

    def __init__(
        self,
        config: MavenSourceConfig,
        settings: RewriterSettings | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self.config = config
        self._settings = settings or RewriterSettings()
        self._backup = Path(config.backup) if config.backup is not None else None
        if session is None:
            session = requests.Session()
            session.auth = HTTPBasicAuth(config.user, config.token)
        self._session = session

    # ------------------------------------------------------------------
    # Locations
    # ------------------------------------------------------------------

    def _file_name(self, version: str) -> str:
        return installer_file_name(self.config.base_name, version)

    def relative_path(self, version: str) -> str:
        """Repository-relative path of a version's installer."""
        return f"{self.config.artifact_folder}/{version}/{self._file_name(version)}"

    def resolve_location(self, version: str) -> str:
        return self.config.url + self.relative_path(version)

    @property
    def metadata_url(self) -> str:
        return f"{self.config.url}{self.config.artifact_folder}/maven-metadata.xml"

    # ------------------------------------------------------------------
    # HTTP helpers
    # ------------------------------------------------------------------

    def _request(self, method: str, url: str, **kwargs) -> requests.Response:
        kwargs.setdefault("timeout", self._settings.request_timeout)
        try:
            return self._session.request(method, url, **kwargs)
        except requests.RequestException as exc:
            raise TransportError(f"{method} {url} failed: {exc}") from exc

    def _get_published(self, url: str) -> bytes | None:
        """GET *url*; ``None`` on 404, ``TransportError`` on other failures."""
        response = self._request("GET", url)
        if response.status_code == 404:
            return None
        if not _is_success(response.status_code):
            raise TransportError(f"GET {url} returned {response.status_code}")
        return response.content

    # ------------------------------------------------------------------
    # Discovery
    # ------------------------------------------------------------------

    def list_versions(self, version_filter: str | None = None) -> list[str]:
        response = self._request("GET", self.metadata_url)
        if not _is_success(response.status_code):
            raise TransportError(f"GET {self.metadata_url} returned {response.status_code}")
        versions = parse_maven_metadata(response.content)
        return self._apply_filter(versions, version_filter)

    def exists(self, version: str) -> bool:
        return self._request("HEAD", self.resolve_location(version)).status_code == 200

    # ------------------------------------------------------------------
    # Fetch
    # ------------------------------------------------------------------

    def load(self, version: str) -> Installer | None:
        url = self.resolve_location(version)
        data = self._get_published(url)
        if data is None:
            logger.info("No installer published for %s at %s", version, url)
            return None
        return Installer(
            version=version,
            path=self.relative_path(version),
            jar=JarContents.from_bytes(data),
        )

    # ------------------------------------------------------------------
    # Backup
    # ------------------------------------------------------------------

    def backup(self, version: str) -> None:
        """Download the published installer into the local backup tree."""
        if self._backup is None:
            return
        target = self._backup / self.relative_path(version)
        if target.exists():
            logger.debug("Backup %s already exists, keeping it", target)
            return
        data = self._get_published(self.resolve_location(version))
        if data is None:
            return
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)
        logger.debug("Backed up %s to %s", version, target)

    # ------------------------------------------------------------------
    # Publish
    # ------------------------------------------------------------------

    def save(self, installer: Installer | None) -> None:
        if installer is None:
            return

        url = self.resolve_location(installer.version)
        self.backup(installer.version)

        data = installer.jar.to_bytes()
        self._publish(url, data, generate_checksums=True)
        self._publish_checksums(url, data)

    def update_checksums(self, location: str) -> None:
        response = self._request("GET", location)
        if response.status_code != 200:
            logger.warning("Cannot refresh checksums of %s: %d", location, response.status_code)
            return
        self._publish_checksums(location, response.content)

    def _publish_checksums(self, url: str, data: bytes) -> None:
        sidecars = checksum_sidecar_names(url)
        for algorithm, digest in compute_checksums(data).items():
            self._publish(sidecars[algorithm], digest.encode("utf-8"), generate_checksums=False)

    def _clear(self, url: str) -> None:
        """Delete whatever a failed upload left at *url*."""
        try:
            if self._request("HEAD", url).status_code != 200:
                return
            response = self._request("DELETE", url)
            logger.info("Deleted from %s: %d", url, response.status_code)
        except TransportError as exc:
            logger.warning("Could not clear %s before retrying: %s", url, exc)

    def _publish(self, url: str, content: bytes, *, generate_checksums: bool) -> int:
        """PUT *content* to *url* until the repository accepts it.

        Returns the final (successful) status code.
        """
        max_attempts = self._settings.publish_max_attempts
        headers = {GENERATE_CHECKSUMS_HEADER: "true" if generate_checksums else "false"}
        attempt = 0
        while True:
            attempt += 1
            try:
                status = self._request("PUT", url, data=content, headers=headers).status_code
            except TransportError as exc:
                logger.warning("Upload to %s failed (attempt %d): %s", url, attempt, exc)
                status = None
            if status is not None and _is_success(status):
                break
            if status is not None:
                logger.warning("Upload to %s returned %d (attempt %d)", url, status, attempt)
            if max_attempts is not None and attempt >= max_attempts:
                raise PublishError(f"Upload to {url} failed after {attempt} attempts")
            self._clear(url)
            if self._settings.publish_retry_delay > 0:
                time.sleep(self._settings.publish_retry_delay)

        logger.info("Uploaded to %s: %d", url, status)
        return status

    def __repr__(self) -> str:
        return f"<MavenSource url={self.config.url!r} artifact={self.config.artifact_path!r}>"
