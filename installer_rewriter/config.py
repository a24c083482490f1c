"""Runtime configuration — env-driven.

Centralized settings using pydantic-settings. Reads from a .env file and
INSTALLER_REWRITER_* environment variables so credentials never need to be
passed on the command line.
"""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class RewriterSettings(BaseSettings):
    """Process-wide settings with environment variable overrides.

    Examples
    --------
    Override via environment::

        export INSTALLER_REWRITER_MAVEN_USER=deploy
        export INSTALLER_REWRITER_MAVEN_TOKEN=secret
        export INSTALLER_REWRITER_LOG_LEVEL=DEBUG

    Or via .env file::

        INSTALLER_REWRITER_THREAD_LIMIT=16
        INSTALLER_REWRITER_PUBLISH_MAX_ATTEMPTS=10
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="INSTALLER_REWRITER_",
        env_file_encoding="utf-8",
    )

    log_level: str = "INFO"

    # Remote repository credentials (CLI options take precedence)
    maven_user: str | None = None
    maven_token: str | None = None
    request_timeout: float = 60.0

    # Scheduling
    thread_limit: int | None = None

    # Publish retry loop. None keeps retrying until the server accepts the upload.
    publish_max_attempts: int | None = None
    publish_retry_delay: float = 0.0

    # File name prefixes stripped when deriving versions from a directory scan
    base_names: tuple[str, ...] = ("neoforge", "forge")

    # Reference installer used by the version update rewrite
    latest_installer_api: str = (
        "https://maven.neoforged.net/api/maven/latest/version/releases/"
        "net%2Fneoforged%2Flegacyinstaller?filter=3.&type=json"
    )
    installer_download_template: str = (
        "https://maven.neoforged.net/releases/net/neoforged/legacyinstaller/"
        "{version}/legacyinstaller-{version}-shrunk.jar"
    )
    installer_cache_dir: Path = Path(".")
