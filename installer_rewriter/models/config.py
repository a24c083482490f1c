"""Source configuration models."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, field_validator


class MavenSourceConfig(BaseModel):
    """Configuration for rewriting installers published on a Maven repository.

    ``artifact_path`` uses ``group:artifact`` coordinates, e.g.
    ``net.neoforged:neoforge``.
    """

    model_config = ConfigDict(frozen=True)

    url: str
    user: str
    token: str
    artifact_path: str
    backup: Path | None = None

    @field_validator("url")
    @classmethod
    def _ensure_trailing_slash(cls, value: str) -> str:
        return value if value.endswith("/") else value + "/"

    @field_validator("artifact_path")
    @classmethod
    def _check_coordinates(cls, value: str) -> str:
        parts = value.split(":")
        if len(parts) < 2 or not parts[0] or not parts[1]:
            raise ValueError(f"Expected group:artifact coordinates, got {value!r}")
        return value

    @property
    def base_name(self) -> str:
        """The artifact id, which prefixes every installer file name."""
        return self.artifact_path.split(":")[1]

    @property
    def artifact_folder(self) -> str:
        """Repository-relative folder holding every version of the artifact."""
        group = self.artifact_path.split(":")[0]
        return f"{group.replace('.', '/')}/{self.base_name}"


class DirectorySourceConfig(BaseModel):
    """Configuration for rewriting installers stored in a local directory tree."""

    model_config = ConfigDict(frozen=True)

    root: Path
    backup: Path | None = None
    base_names: tuple[str, ...] = ("neoforge", "forge")


SourceConfig = MavenSourceConfig | DirectorySourceConfig
