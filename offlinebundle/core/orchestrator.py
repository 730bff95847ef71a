"""Acquisition orchestrator: the driver of the download-deps pipeline.

Wipes the dependency root, runs every acquisition in order, and writes
the manifest last. Idempotency comes from destructive recreation: no
partial re-fetch, no merge with a previous run.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

import requests

from offlinebundle.acquire import ACQUISITION_ORDER, AcquisitionContext, BaseAcquisition, get_acquisition
from offlinebundle.config import BundleSettings
from offlinebundle.core.errors import PreconditionError
from offlinebundle.core.fetcher import ArchiveFetcher
from offlinebundle.core.manifest import ManifestGenerator
from offlinebundle.core.process import ProcessRunner, Runner
from offlinebundle.core.releases import GitHubReleaseSource, ReleaseResolver, ReleaseSource
from offlinebundle.acquire.clangd import CLANGD_REPO
from offlinebundle.acquire.rust_analyzer import RUST_ANALYZER_REPO
from offlinebundle.models.manifest import Manifest

logger = logging.getLogger(__name__)


class AcquisitionOrchestrator:
    """Sequences one acquisition per dependency, then writes the manifest.

    Parameters
    ----------
    settings:
        Pipeline settings. Uses defaults (and the environment) if omitted.
    session:
        HTTP session for downloads and release lookups.
    runner:
        Process runner for extraction and package installation.
    release_source:
        Release metadata source; defaults to the GitHub API.
    acquisitions:
        Override the acquisition sequence (defaults to ``ACQUISITION_ORDER``).
    """

    def __init__(
        self,
        settings: BundleSettings | None = None,
        *,
        session: requests.Session | None = None,
        runner: Runner | None = None,
        release_source: ReleaseSource | None = None,
        acquisitions: list[BaseAcquisition] | None = None,
    ) -> None:
        self.settings = settings or BundleSettings()
        self.session = session or requests.Session()
        self.runner = runner or ProcessRunner()
        source = release_source or GitHubReleaseSource(
            self.session,
            api_url=self.settings.github_api_url,
            token=self.settings.github_token,
        )
        self.releases = ReleaseResolver(
            source,
            pins={
                CLANGD_REPO: self.settings.clangd_tag,
                RUST_ANALYZER_REPO: self.settings.rust_analyzer_tag,
            },
        )
        self.fetcher = ArchiveFetcher(self.session, self.runner)
        if acquisitions is None:
            acquisitions = [get_acquisition(k) for k in ACQUISITION_ORDER]
        self.acquisitions = acquisitions

    @property
    def deps_root(self) -> Path:
        return self.settings.deps_dir

    def prepare(self) -> None:
        """Remove and recreate the dependency root."""
        shutil.rmtree(self.deps_root, ignore_errors=True)
        self.deps_root.mkdir(parents=True, exist_ok=True)

    def context(self) -> AcquisitionContext:
        return AcquisitionContext(
            deps_root=self.deps_root,
            target=self.settings.target,
            pin=self.settings.version_pin,
            fetcher=self.fetcher,
            releases=self.releases,
            runner=self.runner,
        )

    def check_coverage(self) -> None:
        """Every manifest component must have an acquisition."""
        covered = {a.component_key for a in self.acquisitions}
        missing = [key for key in ACQUISITION_ORDER if key not in covered]
        if missing:
            raise PreconditionError(
                f"No acquisition configured for manifest components: {', '.join(missing)}"
            )

    def run(self) -> Manifest:
        """Run every acquisition and write ``<deps>/manifest.json``."""
        self.check_coverage()
        logger.info("Target directory: %s", self.deps_root)
        context = self.context()
        self.prepare()

        results: dict[str, object] = {}
        for acquisition in self.acquisitions:
            results[acquisition.component_key] = acquisition.run(context)

        generator = ManifestGenerator(self.deps_root, context.target, context.pin)
        manifest = generator.generate(
            ripgrep=str(results["ripgrep"]),
            clangd=str(results["clangd"]),
            rust_analyzer=str(results["rustAnalyzer"]),
            npm_packages=dict(results["npmPackages"]),
        )
        logger.info("Dependencies saved to: %s", self.deps_root)
        return manifest
