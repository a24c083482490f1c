"""Shared test fixtures for the installer rewriter."""

from __future__ import annotations

import io
import zipfile
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest
import requests

from installer_rewriter.config import RewriterSettings
from installer_rewriter.core.jar_contents import JarContents
from installer_rewriter.models.artifacts import Installer
from installer_rewriter.models.config import DirectorySourceConfig
from installer_rewriter.sources.directory import DirectorySource

# ---------------------------------------------------------------------------
# Jar factories
# ---------------------------------------------------------------------------


def _manifest(version: str | None) -> bytes:
    lines = ["Manifest-Version: 1.0"]
    if version is not None:
        lines.append(f"Implementation-Version: {version}")
    return ("\r\n".join(lines) + "\r\n\r\n").encode("utf-8")


@pytest.fixture
def make_jar() -> Callable[..., bytes]:
    """Factory fixture: build jar bytes with a manifest and extra entries."""

    def _factory(
        installer_version: str | None = "2.0",
        entries: dict[str, bytes] | None = None,
    ) -> bytes:
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w") as archive:
            archive.writestr("META-INF/MANIFEST.MF", _manifest(installer_version))
            for name, data in (entries or {}).items():
                archive.writestr(name, data)
        return buffer.getvalue()

    return _factory


@pytest.fixture
def old_installer_bytes(make_jar: Callable[..., bytes]) -> bytes:
    """An installer still bundling installer code version 2.0."""
    return make_jar(
        "2.0",
        {
            "install_profile.json": b'{"version": "1.0"}',
            "net/minecraftforge/installer/Main.class": b"old-main",
            "joptsimple/OptionParser.class": b"old-jopt",
            "META-INF/NEOFORGE.SF": b"signature",
            "META-INF/NEOFORGE.RSA": b"rsa",
            "META-INF/maven/net.neoforged/installer/pom.xml": b"<project/>",
        },
    )


@pytest.fixture
def reference_jar(make_jar: Callable[..., bytes]) -> JarContents:
    """A reference installer at version 3.0."""
    return JarContents.from_bytes(
        make_jar(
            "3.0",
            {
                "net/neoforged/installer/Main.class": b"new-main",
                "joptsimple/OptionParser.class": b"new-jopt",
            },
        )
    )


@pytest.fixture
def make_installer(make_jar: Callable[..., bytes]) -> Callable[..., Installer]:
    """Factory fixture: build an in-memory Installer."""

    def _factory(version: str = "1.0", **jar_kwargs: Any) -> Installer:
        return Installer(
            version=version,
            path=f"forge-{version}-installer.jar",
            jar=JarContents.from_bytes(make_jar(**jar_kwargs)),
        )

    return _factory


# ---------------------------------------------------------------------------
# Directory source
# ---------------------------------------------------------------------------


@pytest.fixture
def installer_root(tmp_path: Path, old_installer_bytes: bytes) -> Path:
    """A directory tree holding one installer: ``1.0/forge-1.0-installer.jar``."""
    root = tmp_path / "installers"
    (root / "1.0").mkdir(parents=True)
    (root / "1.0" / "forge-1.0-installer.jar").write_bytes(old_installer_bytes)
    return root


@pytest.fixture
def directory_source(installer_root: Path) -> DirectorySource:
    return DirectorySource(DirectorySourceConfig(root=installer_root))


# ---------------------------------------------------------------------------
# HTTP fakes
# ---------------------------------------------------------------------------


class FakeResponse:
    """Minimal stand-in for ``requests.Response``."""

    def __init__(self, status_code: int = 200, content: bytes = b"") -> None:
        self.status_code = status_code
        self.content = content

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")


class FakeSession:
    """Scripted HTTP session recording every request.

    Routes map ``(method, url)`` to a queue of responses, given as a status
    code or a ``(status, content)`` pair; the last response of a queue
    repeats. Unrouted PUT and DELETE requests succeed, everything else is a
    404. Methods listed in ``raise_once`` fail with a connection error the
    first time they are issued.
    """

    _DEFAULT_STATUS = {"PUT": 201, "DELETE": 204}

    def __init__(self) -> None:
        self.calls: list[tuple[str, str, dict[str, Any]]] = []
        self.routes: dict[tuple[str, str], list[FakeResponse]] = {}
        self.raise_once: set[str] = set()

    def route(self, method: str, url: str, *responses: int | tuple[int, bytes]) -> None:
        queue = self.routes.setdefault((method, url), [])
        for response in responses:
            if isinstance(response, int):
                queue.append(FakeResponse(response))
            else:
                queue.append(FakeResponse(*response))

    def request(self, method: str, url: str, **kwargs: Any) -> FakeResponse:
        self.calls.append((method, url, kwargs))
        if method in self.raise_once:
            self.raise_once.discard(method)
            raise requests.ConnectionError("connection reset")
        queue = self.routes.get((method, url))
        if not queue:
            return FakeResponse(self._DEFAULT_STATUS.get(method, 404))
        return queue.pop(0) if len(queue) > 1 else queue[0]

    def get(self, url: str, **kwargs: Any) -> FakeResponse:
        return self.request("GET", url, **kwargs)

    def calls_to(self, url: str) -> list[str]:
        """Methods issued against *url*, in order."""
        return [method for method, called, _ in self.calls if called == url]


@pytest.fixture
def fake_session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def settings(tmp_path: Path) -> RewriterSettings:
    """Settings isolated from the caller's environment."""
    return RewriterSettings(
        _env_file=None,
        maven_user=None,
        maven_token=None,
        installer_cache_dir=tmp_path / "cache",
    )
