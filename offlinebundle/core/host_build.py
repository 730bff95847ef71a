"""Host application build: an opaque external step that yields a dist dir."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path

from offlinebundle.core.errors import HostBuildError
from offlinebundle.core.process import Runner
from offlinebundle.models.target import TargetPlatform

logger = logging.getLogger(__name__)

DEFAULT_BUILD_COMMANDS: tuple[tuple[str, ...], ...] = (
    ("bun", "install"),
    ("bun", "run", "./script/build.ts"),
)
EXCLUDED_VARIANTS: tuple[str, ...] = ("baseline", "musl")


def find_build_output(dist_dir: Path, target: TargetPlatform) -> Path:
    """Pick the build output directory for *target* under *dist_dir*.

    Variant builds (baseline CPUs, musl libc) are skipped.
    """
    dist_dir = Path(dist_dir)
    if not dist_dir.is_dir():
        raise HostBuildError(f"Build output directory {dist_dir} does not exist")
    for entry in sorted(p.name for p in dist_dir.iterdir()):
        if (
            target.platform in entry
            and target.arch in entry
            and not any(v in entry for v in EXCLUDED_VARIANTS)
        ):
            return dist_dir / entry
    raise HostBuildError(f"Could not find {target.slug} build output in {dist_dir}")


class HostBuilder:
    """Installs the host's dependencies and runs its build script.

    Parameters
    ----------
    source_dir:
        The host application's package directory.
    runner:
        Process runner; build output streams to the terminal.
    target:
        Platform whose build output is selected.
    """

    def __init__(
        self,
        source_dir: Path,
        runner: Runner,
        target: TargetPlatform,
        commands: Sequence[Sequence[str]] = DEFAULT_BUILD_COMMANDS,
    ) -> None:
        self.source_dir = Path(source_dir)
        self.runner = runner
        self.target = target
        self.commands = commands

    def build(self) -> Path:
        logger.info("=== Building %s for %s ===", self.source_dir.name, self.target.display_name)
        for command in self.commands:
            result = self.runner.run(command, cwd=self.source_dir, capture=False)
            if not result.ok:
                raise HostBuildError(
                    f"{' '.join(command)} failed in {self.source_dir} (exit {result.returncode})"
                )
        output = find_build_output(self.source_dir / "dist", self.target)
        logger.info("Build complete: %s", output.name)
        return output
