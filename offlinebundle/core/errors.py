"""Error taxonomy for the acquisition and packaging pipelines.

None of these are recovered locally: every failure unwinds to the CLI,
which reports it and exits non-zero.
"""

from __future__ import annotations


class OfflineBundleError(RuntimeError):
    """Base class for every pipeline failure."""


class DownloadError(OfflineBundleError):
    """Raised when a download responds with a non-success HTTP status."""

    def __init__(self, url: str, status: int, reason: str = "") -> None:
        self.url = url
        self.status = status
        self.reason = reason
        super().__init__(f"Failed to download {url}: {status} {reason}".rstrip())


class ReleaseFetchError(OfflineBundleError):
    """Raised when release metadata is unreachable or not a success."""

    def __init__(self, repo: str, detail: str, status: int | None = None) -> None:
        self.repo = repo
        self.status = status
        super().__init__(f"Failed to fetch release info for {repo}: {detail}")


class AssetNotFoundError(OfflineBundleError):
    """Raised when no release asset satisfies the platform predicate."""

    def __init__(self, predicate: str, available: list[str] | None = None) -> None:
        self.predicate = predicate
        self.available = available or []
        message = f"Could not find release asset matching {predicate}"
        if self.available:
            message += f" (available: {', '.join(self.available)})"
        super().__init__(message)


class ExtractionError(OfflineBundleError):
    """Raised when an extraction or decompression subprocess exits non-zero."""

    def __init__(self, archive: str, output: str = "") -> None:
        self.archive = archive
        self.output = output
        message = f"Failed to extract {archive}"
        if output:
            message += f": {output}"
        super().__init__(message)


class PackageInstallError(OfflineBundleError):
    """Raised when package installation exits non-zero or leaves packages out.

    ``returncode`` is ``None`` when the installer succeeded but a pinned
    package is missing from the result.
    """

    def __init__(self, returncode: int | None, output: str = "") -> None:
        self.returncode = returncode
        self.output = output
        message = "Failed to install npm packages"
        if returncode is not None:
            message += f" (exit {returncode})"
        if output:
            message += f": {output}"
        super().__init__(message)


class PreconditionError(OfflineBundleError):
    """Raised when a stage is invoked before its inputs exist."""


class UnsupportedTargetError(PreconditionError):
    """Raised when no artifact naming is known for a platform/arch pair."""


class HostBuildError(OfflineBundleError):
    """Raised when the host application build fails or its output is missing."""
