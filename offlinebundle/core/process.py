"""External process execution.

The single place where ``subprocess.run`` is called. Extraction,
decompression, package installation, host builds and archiving all go
through ``ProcessRunner`` so tests can substitute a scripted runner.
"""

from __future__ import annotations

import logging
import shlex
import subprocess
from collections.abc import Sequence
from pathlib import Path
from typing import Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict

logger = logging.getLogger(__name__)

_DIAGNOSTIC_TAIL = 2000


class ProcessResult(BaseModel):
    """Outcome of one finished subprocess."""

    model_config = ConfigDict(frozen=True)

    args: list[str]
    returncode: int
    stdout: bytes = b""
    stderr: bytes = b""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def diagnostics(self) -> str:
        """Decoded stderr (stdout if stderr is empty), last 2000 characters."""
        raw = self.stderr or self.stdout
        return raw.decode("utf-8", errors="replace").strip()[-_DIAGNOSTIC_TAIL:]


@runtime_checkable
class Runner(Protocol):
    """Anything that can run a command to completion."""

    def run(
        self,
        args: Sequence[str],
        *,
        cwd: Path | None = None,
        capture: bool = True,
    ) -> ProcessResult: ...


class ProcessRunner:
    """Runs commands with ``subprocess.run`` and waits for them to exit.

    With ``capture=False`` the child inherits stdout/stderr so long-running
    steps stream their progress to the operator's terminal.
    """

    def run(
        self,
        args: Sequence[str],
        *,
        cwd: Path | None = None,
        capture: bool = True,
    ) -> ProcessResult:
        argv = [str(a) for a in args]
        logger.debug("Running: %s%s", shlex.join(argv), f" (cwd={cwd})" if cwd else "")
        completed = subprocess.run(
            argv,
            cwd=cwd,
            capture_output=capture,
            check=False,
        )
        result = ProcessResult(
            args=argv,
            returncode=completed.returncode,
            stdout=completed.stdout or b"",
            stderr=completed.stderr or b"",
        )
        if not result.ok:
            logger.debug("Exit %d from %s", result.returncode, argv[0])
        return result
