"""Target platform descriptions: one bundle per platform/arch pair."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from offlinebundle.core.errors import UnsupportedTargetError


class TargetPlatform(BaseModel):
    """Naming conventions of every upstream artifact for one platform."""

    model_config = ConfigDict(frozen=True)

    platform: str
    arch: str
    display_name: str
    ripgrep_triple: str
    clangd_marker: str
    rust_analyzer_asset: str
    native_library: str

    @property
    def slug(self) -> str:
        return f"{self.platform}-{self.arch}"


KNOWN_TARGETS: dict[str, TargetPlatform] = {
    "linux-x64": TargetPlatform(
        platform="linux",
        arch="x64",
        display_name="Linux x64 (RHEL9 compatible)",
        ripgrep_triple="x86_64-unknown-linux-musl",
        clangd_marker="linux",
        rust_analyzer_asset="rust-analyzer-x86_64-unknown-linux-gnu.gz",
        native_library="libopentui.so",
    ),
    "darwin-arm64": TargetPlatform(
        platform="darwin",
        arch="arm64",
        display_name="macOS arm64",
        ripgrep_triple="aarch64-apple-darwin",
        clangd_marker="mac",
        rust_analyzer_asset="rust-analyzer-aarch64-apple-darwin.gz",
        native_library="libopentui.dylib",
    ),
}


def get_target(platform: str, arch: str) -> TargetPlatform:
    """Look up a known target, raising ``UnsupportedTargetError`` otherwise."""
    slug = f"{platform}-{arch}"
    try:
        return KNOWN_TARGETS[slug]
    except KeyError:
        raise UnsupportedTargetError(
            f"Unsupported target {slug!r}. Known targets: {sorted(KNOWN_TARGETS)}"
        ) from None
