"""Dependency root layout and the offline path resolver that consumes it.

The acquisition pipeline produces this layout; the host application's
offline mode resolves dependency names against it at run time::

    <deps>/ripgrep/rg
    <deps>/lsp/clangd/bin/clangd
    <deps>/lsp/rust-analyzer/bin/rust-analyzer
    <deps>/node_modules/<package>
    <deps>/opentui/<native library>      (bundles only)
    <deps>/manifest.json
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path

MANIFEST_FILENAME = "manifest.json"
PACKAGE_JSON = "package.json"

RIPGREP_DIR = "ripgrep"
RIPGREP_BINARY = "rg"
LSP_DIR = "lsp"
NODE_MODULES_DIR = "node_modules"
NATIVE_LIBRARY_DIR = "opentui"


def lsp_binary_path(root: Path, lsp_name: str, binary_name: str) -> Path:
    return Path(root) / LSP_DIR / lsp_name / "bin" / binary_name


def npm_package_path(root: Path, package: str) -> Path:
    return Path(root) / NODE_MODULES_DIR / package


def ripgrep_binary_path(root: Path) -> Path:
    return Path(root) / RIPGREP_DIR / RIPGREP_BINARY


def component_paths(root: Path) -> dict[str, Path]:
    """Manifest component key -> the path that must exist under *root*."""
    return {
        "ripgrep": ripgrep_binary_path(root),
        "clangd": lsp_binary_path(root, "clangd", "clangd"),
        "rustAnalyzer": lsp_binary_path(root, "rust-analyzer", "rust-analyzer"),
        "npmPackages": Path(root) / NODE_MODULES_DIR,
    }


def _truthy(value: str | None) -> bool:
    return (value or "").strip().lower() in {"1", "true", "yes", "on"}


class OfflinePathResolver:
    """Maps logical dependency names to paths under an offline deps root.

    Every lookup returns ``None`` unless offline mode is enabled and a
    deps path is configured, so callers fall back to live downloads.
    """

    def __init__(self, enabled: bool, deps_path: Path | str | None) -> None:
        self.enabled = enabled
        self.deps_path = Path(deps_path) if deps_path else None

    @classmethod
    def from_env(
        cls, prefix: str = "OPENCODE", environ: Mapping[str, str] | None = None
    ) -> OfflinePathResolver:
        """Build a resolver from ``<PREFIX>_OFFLINE_MODE``/``<PREFIX>_OFFLINE_DEPS_PATH``."""
        env = os.environ if environ is None else environ
        return cls(
            enabled=_truthy(env.get(f"{prefix}_OFFLINE_MODE")),
            deps_path=env.get(f"{prefix}_OFFLINE_DEPS_PATH") or None,
        )

    @property
    def active(self) -> bool:
        return self.enabled and self.deps_path is not None

    def resolve_binary(self, name: str, subpath: str) -> Path | None:
        if not self.active:
            return None
        return self.deps_path / subpath / name

    def resolve_npm_package(self, package: str) -> Path | None:
        if not self.active:
            return None
        return npm_package_path(self.deps_path, package)

    def resolve_lsp_binary(self, lsp_name: str, binary_name: str) -> Path | None:
        if not self.active:
            return None
        return lsp_binary_path(self.deps_path, lsp_name, binary_name)
