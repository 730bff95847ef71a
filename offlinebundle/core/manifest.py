"""Manifest generation, persistence and release-info injection.

The manifest is written last in the acquisition phase, after every
acquisition succeeded, so its presence signals a complete dependency root.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from offlinebundle.core.errors import PreconditionError
from offlinebundle.layout import MANIFEST_FILENAME, component_paths
from offlinebundle.models.manifest import Manifest, ManifestComponents, utc_timestamp
from offlinebundle.models.target import TargetPlatform
from offlinebundle.models.versioning import VersionPin

logger = logging.getLogger(__name__)


def build_manifest(
    *,
    ripgrep: str,
    clangd: str,
    rust_analyzer: str,
    npm_packages: dict[str, str],
    target: TargetPlatform,
    pin: VersionPin | None = None,
    created: str | None = None,
) -> Manifest:
    """Assemble a manifest from acquisition results.

    ``created`` defaults to the current UTC time; nothing else is read from
    the environment.
    """
    pin = pin or VersionPin()
    return Manifest(
        version=pin.manifest_schema_version,
        created=created or utc_timestamp(),
        platform=target.platform,
        arch=target.arch,
        components=ManifestComponents(
            ripgrep=ripgrep,
            clangd=clangd,
            rust_analyzer=rust_analyzer,
            npm_packages=dict(npm_packages),
        ),
    )


def write_manifest(manifest: Manifest, path: Path) -> Path:
    """Serialize *manifest* as 2-space indented JSON."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(manifest.to_json_dict(), indent=2) + "\n", encoding="utf-8")
    return path


def load_manifest(path: Path) -> Manifest:
    path = Path(path)
    if not path.exists():
        raise PreconditionError(f"Manifest not found at {path}")
    return Manifest.model_validate_json(path.read_text(encoding="utf-8"))


def inject_release_info(
    manifest: Manifest,
    bundle_version: str | None = None,
    commit_sha: str | None = None,
) -> Manifest:
    """Return a copy with ``bundleVersion``/``commitSha`` set when supplied.

    Every other field is left untouched.
    """
    update: dict[str, str] = {}
    if bundle_version:
        update["bundle_version"] = bundle_version
        logger.info("Injecting bundleVersion: %s", bundle_version)
    if commit_sha:
        update["commit_sha"] = commit_sha
        logger.info("Injecting commitSha: %s", commit_sha)
    return manifest.model_copy(update=update) if update else manifest


class ManifestGenerator:
    """Writes ``<deps>/manifest.json`` once the dependency root is complete.

    Parameters
    ----------
    deps_root:
        The dependency root the manifest describes.
    target:
        Platform the dependencies were fetched for.
    pin:
        Version pins of the run (supplies the schema version).
    """

    def __init__(
        self, deps_root: Path, target: TargetPlatform, pin: VersionPin | None = None
    ) -> None:
        self.deps_root = Path(deps_root)
        self.target = target
        self.pin = pin or VersionPin()

    @property
    def manifest_path(self) -> Path:
        return self.deps_root / MANIFEST_FILENAME

    def verify_components(self) -> None:
        """Every manifest component must be materialized under the deps root."""
        missing = [
            f"{key} ({path})"
            for key, path in component_paths(self.deps_root).items()
            if not path.exists()
        ]
        if missing:
            raise PreconditionError(
                "Refusing to write manifest, components missing: " + ", ".join(missing)
            )

    def generate(
        self,
        *,
        ripgrep: str,
        clangd: str,
        rust_analyzer: str,
        npm_packages: dict[str, str],
    ) -> Manifest:
        logger.info("=== Creating manifest ===")
        self.verify_components()
        manifest = build_manifest(
            ripgrep=ripgrep,
            clangd=clangd,
            rust_analyzer=rust_analyzer,
            npm_packages=npm_packages,
            target=self.target,
            pin=self.pin,
        )
        write_manifest(manifest, self.manifest_path)
        logger.info("Manifest created at %s", self.manifest_path)
        return manifest
