"""offlinebundle: offline distribution bundles for the opencode host application.

Two independently invocable pipelines:
  - acquisition: fetch ripgrep, clangd, rust-analyzer and the npm package
    set into a dependency root and record their versions in a manifest
  - packaging: assemble the host binary, the dependency root and the native
    UI library into a bundle directory, add a launcher script and readme,
    and compress it into a single archive
"""

__version__ = "0.2.0"
__description__ = "Offline-installable distribution bundles for opencode"

from offlinebundle.core.orchestrator import AcquisitionOrchestrator
from offlinebundle.core.packager import DistributionPackager
from offlinebundle.cli.app import app as cli

__all__ = ["AcquisitionOrchestrator", "DistributionPackager", "cli", "__version__"]
