"""rust-analyzer: latest release, a raw gzip-compressed binary."""

from __future__ import annotations

from typing import ClassVar

from offlinebundle.acquire.base import AcquisitionContext, BaseAcquisition
from offlinebundle.core.releases import ExactName, select_asset
from offlinebundle.layout import lsp_binary_path

RUST_ANALYZER_REPO = "rust-lang/rust-analyzer"


class RustAnalyzerAcquisition(BaseAcquisition):
    name: ClassVar[str] = "rust-analyzer"
    component_key: ClassVar[str] = "rustAnalyzer"

    def acquire(self, context: AcquisitionContext) -> str:
        release = context.releases.resolve_latest(RUST_ANALYZER_REPO)
        asset = select_asset(
            release.assets, ExactName(name=context.target.rust_analyzer_asset)
        )

        archive = context.fetcher.fetch(
            asset.browser_download_url, context.deps_root / "rust-analyzer.gz"
        )
        binary = lsp_binary_path(context.deps_root, "rust-analyzer", "rust-analyzer")
        context.fetcher.decompress_gzip(archive, binary)
        context.fetcher.make_executable(binary)
        archive.unlink()
        return release.tag_name
