"""npm package set: installed with bun into an isolated node_modules."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from pathlib import Path
from typing import ClassVar

from offlinebundle.acquire.base import AcquisitionContext, BaseAcquisition
from offlinebundle.core.errors import PackageInstallError
from offlinebundle.layout import PACKAGE_JSON, npm_package_path

logger = logging.getLogger(__name__)


def package_name(specifier: str) -> str:
    """Strip a version from ``name@version`` (scoped names keep their ``@``)."""
    at = specifier.rfind("@")
    return specifier[:at] if at > 0 else specifier


class PackageSetAcquisition(BaseAcquisition):
    """Installs the pinned specifier list and records resolved versions.

    Requested ranges may resolve to anything, so versions are read back
    from each installed package's own package.json, falling back to the
    range the installer wrote into the root package.json.
    """

    name: ClassVar[str] = "npm packages"
    component_key: ClassVar[str] = "npmPackages"

    def __init__(self, installer: tuple[str, ...] = ("bun", "add")) -> None:
        self.installer = installer

    def acquire(self, context: AcquisitionContext) -> dict[str, str]:
        deps_root = context.deps_root
        (deps_root / "node_modules").mkdir(parents=True, exist_ok=True)

        pkg_json = deps_root / PACKAGE_JSON
        pkg_json.write_text(json.dumps({"dependencies": {}}, indent=2), encoding="utf-8")

        args = [*self.installer, "--cwd", str(deps_root), *context.pin.npm_packages]
        logger.info("Running: %s", " ".join(args))
        result = context.runner.run(args, capture=False)
        if not result.ok:
            raise PackageInstallError(result.returncode, result.diagnostics)

        return self.read_versions(deps_root, context.pin.npm_packages)

    @staticmethod
    def read_versions(deps_root: Path, expected: Iterable[str] = ()) -> dict[str, str]:
        """Map each declared dependency to its installed version.

        Every specifier in *expected* must appear among the declared
        dependencies, otherwise ``PackageInstallError`` is raised.
        """
        declared = json.loads((deps_root / PACKAGE_JSON).read_text(encoding="utf-8"))
        dependencies = declared.get("dependencies") or {}
        missing = [spec for spec in expected if package_name(spec) not in dependencies]
        if missing:
            raise PackageInstallError(
                None, f"installer left out pinned packages: {', '.join(missing)}"
            )
        versions: dict[str, str] = {}
        for pkg, requested in dependencies.items():
            installed = npm_package_path(deps_root, pkg) / PACKAGE_JSON
            if installed.exists():
                meta = json.loads(installed.read_text(encoding="utf-8"))
                versions[pkg] = meta.get("version") or requested
            else:
                logger.warning("%s missing from node_modules; recording %s", pkg, requested)
                versions[pkg] = requested
        return versions
