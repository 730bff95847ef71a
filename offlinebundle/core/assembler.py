"""Bundle assembler: lays out the bundle directory from its inputs.

Bundle layout::

    <bundle>/bin/<host binary>
    <bundle>/deps/...                  copy of the dependency root
    <bundle>/deps/opentui/<library>    prebuilt native UI library
    <bundle>/manifest.json             deps manifest + release info

The native library is pre-placed because the host otherwise extracts it
to a temp directory, which locked-down hosts mount noexec.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from pydantic import BaseModel, ConfigDict

from offlinebundle.core.errors import PreconditionError
from offlinebundle.core.fetcher import ArchiveFetcher
from offlinebundle.core.hasher import tree_digest
from offlinebundle.core.manifest import inject_release_info, load_manifest, write_manifest
from offlinebundle.layout import MANIFEST_FILENAME, NATIVE_LIBRARY_DIR
from offlinebundle.models.manifest import Manifest

logger = logging.getLogger(__name__)


class AssemblyReport(BaseModel):
    """What the assembler produced."""

    model_config = ConfigDict(frozen=True)

    bundle_dir: Path
    manifest: Manifest
    content_digest: str  # tree digest excluding manifest.json


class BundleAssembler:
    """Builds the bundle tree. Owns ``bundle_dir`` for the whole run.

    Parameters
    ----------
    bundle_dir:
        Output directory; removed and recreated on every run.
    deps_root:
        Completed dependency root (must contain ``manifest.json``).
    native_library:
        Path of the platform native library to pre-place under ``deps/``.
    host_binary:
        File name of the host binary inside ``<build_dir>/bin``.
    """

    def __init__(
        self,
        bundle_dir: Path,
        deps_root: Path,
        native_library: Path,
        host_binary: str = "opencode",
        *,
        bundle_version: str | None = None,
        commit_sha: str | None = None,
    ) -> None:
        self.bundle_dir = Path(bundle_dir)
        self.deps_root = Path(deps_root)
        self.native_library = Path(native_library)
        self.host_binary = host_binary
        self.bundle_version = bundle_version
        self.commit_sha = commit_sha

    def assemble(self, build_dir: Path) -> AssemblyReport:
        logger.info("=== Creating bundle structure ===")
        self._reset()
        self._copy_host_binary(Path(build_dir))
        self._copy_deps()
        self._copy_native_library()
        manifest = self._write_manifest()
        digest = tree_digest(self.bundle_dir, exclude=[MANIFEST_FILENAME])
        logger.info("Bundle structure created (content digest %s)", digest[:12])
        return AssemblyReport(bundle_dir=self.bundle_dir, manifest=manifest, content_digest=digest)

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    def _reset(self) -> None:
        shutil.rmtree(self.bundle_dir, ignore_errors=True)
        (self.bundle_dir / "bin").mkdir(parents=True)
        (self.bundle_dir / "deps").mkdir(parents=True)

    def _copy_host_binary(self, build_dir: Path) -> None:
        logger.info("Copying %s binary...", self.host_binary)
        source = build_dir / "bin" / self.host_binary
        if not source.is_file():
            raise PreconditionError(f"Host binary not found at {source}")
        dest = self.bundle_dir / "bin" / self.host_binary
        shutil.copyfile(source, dest)
        ArchiveFetcher.make_executable(dest)

    def _copy_deps(self) -> None:
        logger.info("Copying dependencies...")
        shutil.copytree(
            self.deps_root, self.bundle_dir / "deps", symlinks=True, dirs_exist_ok=True
        )

    def _copy_native_library(self) -> None:
        logger.info("Copying native library %s...", self.native_library.name)
        if not self.native_library.is_file():
            raise PreconditionError(f"Native library not found at {self.native_library}")
        dest_dir = self.bundle_dir / "deps" / NATIVE_LIBRARY_DIR
        dest_dir.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(self.native_library, dest_dir / self.native_library.name)

    def _write_manifest(self) -> Manifest:
        manifest = load_manifest(self.deps_root / MANIFEST_FILENAME)
        manifest = inject_release_info(manifest, self.bundle_version, self.commit_sha)
        write_manifest(manifest, self.bundle_dir / MANIFEST_FILENAME)
        return manifest
