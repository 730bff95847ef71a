"""clangd: latest release, zip with a versioned top-level directory."""

from __future__ import annotations

import shutil
from typing import ClassVar

from offlinebundle.acquire.base import AcquisitionContext, BaseAcquisition
from offlinebundle.core.errors import ExtractionError
from offlinebundle.core.releases import ContainsAll, select_asset
from offlinebundle.layout import LSP_DIR, lsp_binary_path

CLANGD_REPO = "clangd/clangd"


class ClangdAcquisition(BaseAcquisition):
    """Unzips ``clangd_<tag>/`` and renames it to the stable ``clangd/``."""

    name: ClassVar[str] = "clangd"
    component_key: ClassVar[str] = "clangd"

    def acquire(self, context: AcquisitionContext) -> str:
        release = context.releases.resolve_latest(CLANGD_REPO)
        tag = release.tag_name
        asset = select_asset(
            release.assets,
            ContainsAll(parts=(context.target.clangd_marker, tag), suffix=".zip"),
        )

        lsp_dir = context.deps_root / LSP_DIR
        lsp_dir.mkdir(parents=True, exist_ok=True)

        archive = context.fetcher.fetch(
            asset.browser_download_url, context.deps_root / asset.name
        )
        context.fetcher.extract_zip(archive, lsp_dir)
        archive.unlink()

        extracted = lsp_dir / f"clangd_{tag}"
        final = lsp_dir / "clangd"
        if not extracted.is_dir():
            raise ExtractionError(str(archive), f"expected directory {extracted.name}/ in archive")
        # unzip does not replace directories in place
        shutil.rmtree(final, ignore_errors=True)
        extracted.rename(final)

        context.fetcher.make_executable(lsp_binary_path(context.deps_root, "clangd", "clangd"))
        return tag
