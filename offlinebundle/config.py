"""Pipeline configuration, env-driven.

Reads from a .env file and OFFLINE_BUNDLE_* environment variables. The
release version and commit SHA keep the un-prefixed BUNDLE_VERSION and
BUNDLE_COMMIT_SHA names that release tooling already exports.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from offlinebundle.models.target import TargetPlatform, get_target
from offlinebundle.models.versioning import VersionPin


class BundleSettings(BaseSettings):
    """Settings shared by the acquisition and packaging pipelines.

    Examples
    --------
    Override via environment::

        export OFFLINE_BUNDLE_DEPS_DIR=/scratch/offline-deps
        export OFFLINE_BUNDLE_CLANGD_TAG=19.1.2
        export BUNDLE_VERSION=1.4.0
        export BUNDLE_COMMIT_SHA=$(git rev-parse HEAD)
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="OFFLINE_BUNDLE_",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # Output locations
    deps_dir: Path = Path("dist/offline-deps")
    dist_dir: Path = Path("dist")

    # Target
    platform: str = "linux"
    arch: str = "x64"

    # Host application
    host_binary: str = "opencode"
    host_env_prefix: str = "OPENCODE"
    launcher_name: str = "opencode-offline"
    host_source_dir: Path = Path("packages/opencode")
    native_library_path: Path | None = None

    # Release API
    github_api_url: str = "https://api.github.com"
    github_token: str = ""
    clangd_tag: str | None = None
    rust_analyzer_tag: str | None = None

    # Provenance injected into the bundled manifest
    bundle_version: str | None = Field(default=None, validation_alias="BUNDLE_VERSION")
    commit_sha: str | None = Field(default=None, validation_alias="BUNDLE_COMMIT_SHA")

    log_level: str = "INFO"

    @property
    def target(self) -> TargetPlatform:
        """The target platform for this invocation."""
        return get_target(self.platform, self.arch)

    @property
    def version_pin(self) -> VersionPin:
        return VersionPin()

    @property
    def bundle_name(self) -> str:
        return f"{self.launcher_name}-{self.platform}-{self.arch}"

    @property
    def bundle_dir(self) -> Path:
        return self.dist_dir / self.bundle_name

    @property
    def tarball_name(self) -> str:
        return f"{self.bundle_name}.tar.gz"

    @property
    def tarball_path(self) -> Path:
        return self.dist_dir / self.tarball_name

    def resolved_native_library(self) -> Path:
        """Path of the prebuilt native UI library for the target.

        Defaults to the location bun's isolated install places the
        platform package at.
        """
        if self.native_library_path is not None:
            return self.native_library_path
        target = self.target
        version = self.version_pin.opentui_version
        package = f"core-{target.slug}"
        return (
            Path("node_modules")
            / ".bun"
            / f"@opentui+{package}@{version}"
            / "node_modules"
            / "@opentui"
            / package
            / target.native_library
        )
