"""ripgrep: pinned version, tar.gz with one wrapping directory."""

from __future__ import annotations

from typing import ClassVar

from offlinebundle.acquire.base import AcquisitionContext, BaseAcquisition
from offlinebundle.layout import RIPGREP_DIR, ripgrep_binary_path

DOWNLOAD_BASE = "https://github.com/BurntSushi/ripgrep/releases/download"


def ripgrep_asset_name(version: str, triple: str) -> str:
    return f"ripgrep-{version}-{triple}.tar.gz"


class RipgrepAcquisition(BaseAcquisition):
    """Builds the URL from the pinned version; no release lookup."""

    name: ClassVar[str] = "ripgrep"
    component_key: ClassVar[str] = "ripgrep"

    def acquire(self, context: AcquisitionContext) -> str:
        version = context.pin.ripgrep_version
        filename = ripgrep_asset_name(version, context.target.ripgrep_triple)
        url = f"{DOWNLOAD_BASE}/{version}/{filename}"

        ripgrep_dir = context.deps_root / RIPGREP_DIR
        ripgrep_dir.mkdir(parents=True, exist_ok=True)

        archive = context.fetcher.fetch(url, context.deps_root / filename)
        context.fetcher.extract_tar_gz(archive, ripgrep_dir, strip_components=1)
        archive.unlink()

        context.fetcher.make_executable(ripgrep_binary_path(context.deps_root))
        return version
