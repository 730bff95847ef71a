"""Abstract acquisition with an enforced lifecycle.

Every concrete acquisition implements only ``acquire()``. The ``run()``
wrapper is **not overridable**: it logs the banner, times the step and
logs any failure with the dependency's name before re-raising it
unchanged, so a failed run always says which dependency broke.
"""

from __future__ import annotations

import abc
import logging
import time
from pathlib import Path
from typing import ClassVar, final

from pydantic import BaseModel, ConfigDict

from offlinebundle.core.fetcher import ArchiveFetcher
from offlinebundle.core.process import Runner
from offlinebundle.core.releases import ReleaseResolver
from offlinebundle.models.target import TargetPlatform
from offlinebundle.models.versioning import VersionPin

logger = logging.getLogger(__name__)

AcquiredVersion = str | dict[str, str]


class AcquisitionContext(BaseModel):
    """Collaborators shared by every acquisition in one run."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    deps_root: Path
    target: TargetPlatform
    pin: VersionPin
    fetcher: ArchiveFetcher
    releases: ReleaseResolver
    runner: Runner


class BaseAcquisition(abc.ABC):
    """Abstract base for all dependency acquisitions.

    Subclasses **must** set ``name`` (used in logs) and ``component_key``
    (the manifest ``components`` key) and implement ``acquire(context)``.
    """

    name: ClassVar[str]
    component_key: ClassVar[str]

    @abc.abstractmethod
    def acquire(self, context: AcquisitionContext) -> AcquiredVersion:
        """Fetch the dependency into ``context.deps_root``.

        Returns the resolved version string, or a package -> version
        mapping for package sets.
        """
        ...

    @final
    def run(self, context: AcquisitionContext) -> AcquiredVersion:
        """Run the acquisition. **Do not override.**"""
        logger.info("=== Downloading %s ===", self.name)
        started = time.monotonic()
        try:
            version = self.acquire(context)
        except Exception as exc:
            logger.error("%s acquisition failed: %s", self.name, exc)
            raise
        logger.info(
            "%s %s acquired in %.1fs",
            self.name,
            version if isinstance(version, str) else f"({len(version)} packages)",
            time.monotonic() - started,
        )
        return version

    def __repr__(self) -> str:
        return f"<{type(self).__name__} component={self.component_key!r}>"
