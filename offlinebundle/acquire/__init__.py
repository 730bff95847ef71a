"""Dependency acquisitions: registry mapping component key to acquisition.

Usage::

    from offlinebundle.acquire import ACQUISITION_ORDER, get_acquisition

    for key in ACQUISITION_ORDER:
        version = get_acquisition(key).run(context)
"""

from __future__ import annotations

from offlinebundle.acquire.base import AcquisitionContext, AcquiredVersion, BaseAcquisition
from offlinebundle.acquire.clangd import ClangdAcquisition
from offlinebundle.acquire.packages import PackageSetAcquisition
from offlinebundle.acquire.ripgrep import RipgrepAcquisition
from offlinebundle.acquire.rust_analyzer import RustAnalyzerAcquisition

ACQUISITION_REGISTRY: dict[str, type[BaseAcquisition]] = {
    "ripgrep": RipgrepAcquisition,
    "clangd": ClangdAcquisition,
    "rustAnalyzer": RustAnalyzerAcquisition,
    "npmPackages": PackageSetAcquisition,
}

# Strict execution order; each acquisition finishes before the next starts.
ACQUISITION_ORDER: list[str] = ["ripgrep", "clangd", "rustAnalyzer", "npmPackages"]


def get_acquisition(component_key: str) -> BaseAcquisition:
    """Instantiate the acquisition for a manifest component key."""
    try:
        cls = ACQUISITION_REGISTRY[component_key]
    except KeyError:
        raise KeyError(
            f"Unknown component {component_key!r}. "
            f"Registered: {sorted(ACQUISITION_REGISTRY)}"
        ) from None
    return cls()


__all__ = [
    "AcquisitionContext",
    "AcquiredVersion",
    "BaseAcquisition",
    "ACQUISITION_REGISTRY",
    "ACQUISITION_ORDER",
    "get_acquisition",
    "RipgrepAcquisition",
    "ClangdAcquisition",
    "RustAnalyzerAcquisition",
    "PackageSetAcquisition",
]
