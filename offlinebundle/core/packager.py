"""Distribution packager: the driver of the package pipeline.

Checks that acquisition has run, builds (or accepts) the host binary,
assembles the bundle, writes the launcher script and readme, and
compresses the bundle directory into ``<dist>/<bundle>.tar.gz``.
"""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import BaseModel, ConfigDict

from offlinebundle.config import BundleSettings
from offlinebundle.core.assembler import AssemblyReport, BundleAssembler
from offlinebundle.core.errors import OfflineBundleError, PreconditionError
from offlinebundle.core.fetcher import ArchiveFetcher
from offlinebundle.core.hasher import sha256_file
from offlinebundle.core.host_build import HostBuilder
from offlinebundle.core.process import ProcessRunner, Runner
from offlinebundle.layout import MANIFEST_FILENAME

logger = logging.getLogger(__name__)

_LAUNCHER_TEMPLATE = """\
#!/bin/bash
# {host} offline launcher
# Sets up environment variables for offline mode and runs {host}

SCRIPT_DIR="$(cd "$(dirname "${{BASH_SOURCE[0]}}")" && pwd)"

export {prefix}_OFFLINE_MODE=true
export {prefix}_OFFLINE_DEPS_PATH="$SCRIPT_DIR/deps"
export {prefix}_DISABLE_AUTOUPDATE=true
export {prefix}_DISABLE_LSP_DOWNLOAD=true
export {prefix}_DISABLE_MODELS_FETCH=true

exec "$SCRIPT_DIR/bin/{host}" "$@"
"""

_README_TEMPLATE = """\
# {host} Offline Bundle

This is a self-contained offline bundle of {host} for {display_name}.

## Contents

- `bin/{host}` - Main {host} binary
- `deps/` - Pre-bundled dependencies
  - `ripgrep/` - Ripgrep binary for fast file searching
  - `lsp/` - Language server binaries (clangd, rust-analyzer)
  - `node_modules/` - npm packages (pyright, typescript, etc.)
  - `opentui/` - Pre-extracted native UI library
- `manifest.json` - Version information for all bundled components
- `{launcher}` - Wrapper script that sets up the environment

## Usage

### Option 1: Use the wrapper script (recommended)

```bash
./{launcher}
```

### Option 2: Set environment variables manually

```bash
export {prefix}_OFFLINE_MODE=true
export {prefix}_OFFLINE_DEPS_PATH=/path/to/deps
./bin/{host}
```

## Supported Languages

This bundle includes LSP support for:
- **Python** - via Pyright
- **TypeScript/JavaScript** - via typescript-language-server
- **C/C++** - via clangd
- **Rust** - via rust-analyzer

## Environment Variables

- `{prefix}_OFFLINE_MODE` - Set to `true` to enable offline mode
- `{prefix}_OFFLINE_DEPS_PATH` - Path to the deps directory
- `{prefix}_DISABLE_AUTOUPDATE` - Set to `true` to disable auto-updates
- `{prefix}_DISABLE_LSP_DOWNLOAD` - Set to `true` to prevent LSP downloads
- `{prefix}_DISABLE_MODELS_FETCH` - Set to `true` to prevent fetching the remote model list

## Troubleshooting

### /tmp mounted with noexec
This bundle includes a pre-extracted native UI library in `deps/opentui/`.
When `{prefix}_OFFLINE_DEPS_PATH` is set (done automatically by the wrapper script),
the application loads this library directly, bypassing the /tmp extraction
that would otherwise fail on systems with noexec /tmp.
"""


def launcher_environment(prefix: str) -> dict[str, str]:
    """Variables the launcher exports, with ``$SCRIPT_DIR`` left unexpanded."""
    return {
        f"{prefix}_OFFLINE_MODE": "true",
        f"{prefix}_OFFLINE_DEPS_PATH": "$SCRIPT_DIR/deps",
        f"{prefix}_DISABLE_AUTOUPDATE": "true",
        f"{prefix}_DISABLE_LSP_DOWNLOAD": "true",
        f"{prefix}_DISABLE_MODELS_FETCH": "true",
    }


def render_launcher(host_binary: str, prefix: str) -> str:
    return _LAUNCHER_TEMPLATE.format(host=host_binary, prefix=prefix)


def render_readme(host_binary: str, prefix: str, launcher: str, display_name: str) -> str:
    return _README_TEMPLATE.format(
        host=host_binary, prefix=prefix, launcher=launcher, display_name=display_name
    )


class ArchiveReport(BaseModel):
    """The final distributable archive."""

    model_config = ConfigDict(frozen=True)

    path: Path
    size_bytes: int
    sha256: str

    @property
    def size_mb(self) -> float:
        return round(self.size_bytes / (1024 * 1024), 2)


class PackagingResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    assembly: AssemblyReport
    archive: ArchiveReport


class DistributionPackager:
    """Packages a completed dependency root into a distributable bundle.

    Parameters
    ----------
    settings:
        Pipeline settings. Uses defaults (and the environment) if omitted.
    runner:
        Process runner for the host build and archiving.
    """

    def __init__(
        self,
        settings: BundleSettings | None = None,
        *,
        runner: Runner | None = None,
    ) -> None:
        self.settings = settings or BundleSettings()
        self.runner = runner or ProcessRunner()

    @property
    def bundle_dir(self) -> Path:
        return self.settings.bundle_dir

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    def check_preconditions(self) -> None:
        """Acquisition must have produced the deps root and its manifest."""
        deps = self.settings.deps_dir
        if not deps.is_dir():
            raise PreconditionError(
                f"Dependencies not found at {deps}. Run 'offlinebundle download-deps' first."
            )
        if not (deps / MANIFEST_FILENAME).is_file():
            raise PreconditionError(
                f"No {MANIFEST_FILENAME} in {deps}; the last acquisition run did not complete."
            )

    def build_host(self) -> Path:
        builder = HostBuilder(self.settings.host_source_dir, self.runner, self.settings.target)
        return builder.build()

    def assembler(self) -> BundleAssembler:
        return BundleAssembler(
            self.bundle_dir,
            self.settings.deps_dir,
            self.settings.resolved_native_library(),
            self.settings.host_binary,
            bundle_version=self.settings.bundle_version,
            commit_sha=self.settings.commit_sha,
        )

    def write_launcher(self) -> Path:
        logger.info("=== Creating wrapper script ===")
        path = self.bundle_dir / self.settings.launcher_name
        path.write_text(
            render_launcher(self.settings.host_binary, self.settings.host_env_prefix),
            encoding="utf-8",
        )
        ArchiveFetcher.make_executable(path)
        return path

    def write_readme(self) -> Path:
        logger.info("=== Creating README ===")
        path = self.bundle_dir / "README.md"
        path.write_text(
            render_readme(
                self.settings.host_binary,
                self.settings.host_env_prefix,
                self.settings.launcher_name,
                self.settings.target.display_name,
            ),
            encoding="utf-8",
        )
        return path

    def create_archive(self) -> ArchiveReport:
        logger.info("=== Creating tarball ===")
        tarball = self.settings.tarball_path
        tarball.unlink(missing_ok=True)
        result = self.runner.run(
            ["tar", "-czf", self.settings.tarball_name, self.bundle_dir.name],
            cwd=self.bundle_dir.parent,
        )
        if not result.ok:
            raise OfflineBundleError(f"Failed to create tarball: {result.diagnostics}")
        report = ArchiveReport(
            path=tarball,
            size_bytes=tarball.stat().st_size,
            sha256=sha256_file(tarball),
        )
        logger.info("Tarball created: %s (%.2f MB)", tarball, report.size_mb)
        return report

    # ------------------------------------------------------------------
    # Driver
    # ------------------------------------------------------------------

    def package(self, build_dir: Path | None = None) -> PackagingResult:
        """Run the whole packaging pipeline.

        *build_dir* is a prebuilt host output directory; when omitted the
        host application is built first.
        """
        self.check_preconditions()
        build_dir = Path(build_dir) if build_dir else self.build_host()
        assembly = self.assembler().assemble(build_dir)
        self.write_launcher()
        self.write_readme()
        archive = self.create_archive()
        logger.info("Bundle directory: %s", self.bundle_dir)
        return PackagingResult(assembly=assembly, archive=archive)
