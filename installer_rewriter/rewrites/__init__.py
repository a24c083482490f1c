"""Installer rewrites applied by the orchestrator, in configured order."""

from __future__ import annotations

from installer_rewriter.rewrites.base import InstallerRewrite
from installer_rewriter.rewrites.version_update import (
    NewVersionUpdate,
    load_latest_installer,
)

__all__ = ["InstallerRewrite", "NewVersionUpdate", "load_latest_installer"]
