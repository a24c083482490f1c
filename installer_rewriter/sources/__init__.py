"""Installer sources and the factory that picks a backend from configuration.

Usage::

    from installer_rewriter.sources import create_source

    source = create_source(DirectorySourceConfig(root=Path("installers")))
    versions = source.list_versions("1.20")
"""

from __future__ import annotations

from installer_rewriter.config import RewriterSettings
from installer_rewriter.models.config import (
    DirectorySourceConfig,
    MavenSourceConfig,
    SourceConfig,
)
from installer_rewriter.sources.base import InstallerSource, SourceFilesystemError
from installer_rewriter.sources.directory import DirectorySource
from installer_rewriter.sources.maven import MavenSource, PublishError, TransportError


def create_source(
    config: SourceConfig, settings: RewriterSettings | None = None
) -> InstallerSource:
    """Build the backend matching *config*."""
    if isinstance(config, MavenSourceConfig):
        return MavenSource(config, settings=settings)
    if isinstance(config, DirectorySourceConfig):
        return DirectorySource(config)
    raise TypeError(f"Unsupported source configuration: {type(config).__name__}")


__all__ = [
    "DirectorySource",
    "InstallerSource",
    "MavenSource",
    "PublishError",
    "SourceFilesystemError",
    "TransportError",
    "create_source",
]
