"""Installer rewriter data models — Pydantic v2, frozen."""

from installer_rewriter.models.artifacts import Installer, installer_file_name
from installer_rewriter.models.config import (
    DirectorySourceConfig,
    MavenSourceConfig,
    SourceConfig,
)
from installer_rewriter.models.outcome import (
    TERMINAL_STATES,
    VALID_TRANSITIONS,
    RunReport,
    UnitOutcome,
    UnitState,
)

__all__ = [
    "DirectorySourceConfig",
    "Installer",
    "MavenSourceConfig",
    "RunReport",
    "SourceConfig",
    "TERMINAL_STATES",
    "UnitOutcome",
    "UnitState",
    "VALID_TRANSITIONS",
    "installer_file_name",
]
