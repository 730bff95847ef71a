"""Archive fetcher: download a URL to disk and unpack it.

Extraction shells out to ``tar``, ``unzip`` and ``gunzip`` through the
process runner. Executable bits are not reliably preserved by the
download/extract round trip, so callers mark binaries executable
explicitly with ``make_executable``.
"""

from __future__ import annotations

import logging
import stat
from pathlib import Path

import requests

from offlinebundle.core.errors import DownloadError, ExtractionError
from offlinebundle.core.process import Runner

logger = logging.getLogger(__name__)

_CHUNK_SIZE = 1024 * 1024
_EXECUTABLE_MODE = (
    stat.S_IRWXU | stat.S_IRGRP | stat.S_IXGRP | stat.S_IROTH | stat.S_IXOTH
)  # 0o755


class ArchiveFetcher:
    """Downloads artifacts and extracts archives into destination directories.

    Parameters
    ----------
    session:
        HTTP session used for every download.
    runner:
        Process runner used for extraction and decompression.
    """

    def __init__(self, session: requests.Session, runner: Runner) -> None:
        self._session = session
        self._runner = runner

    # ------------------------------------------------------------------
    # Download
    # ------------------------------------------------------------------

    def fetch(self, url: str, dest: Path) -> Path:
        """Stream *url* to *dest*. No retry: one failure aborts the run."""
        logger.info("Downloading %s...", url)
        dest = Path(dest)
        dest.parent.mkdir(parents=True, exist_ok=True)
        with self._session.get(url, stream=True, allow_redirects=True) as response:
            if not response.ok:
                raise DownloadError(url, response.status_code, response.reason or "")
            with dest.open("wb") as handle:
                for chunk in response.iter_content(chunk_size=_CHUNK_SIZE):
                    if chunk:
                        handle.write(chunk)
        logger.info("Downloaded to %s", dest)
        return dest

    # ------------------------------------------------------------------
    # Extraction
    # ------------------------------------------------------------------

    def extract_tar_gz(
        self, archive: Path, dest_dir: Path, strip_components: int = 0
    ) -> None:
        """Unpack a ``.tar.gz`` into *dest_dir*, dropping leading path parts."""
        Path(dest_dir).mkdir(parents=True, exist_ok=True)
        args = ["tar", "-xzf", str(archive), "-C", str(dest_dir)]
        if strip_components > 0:
            args.append(f"--strip-components={strip_components}")
        result = self._runner.run(args)
        if not result.ok:
            raise ExtractionError(str(archive), result.diagnostics)

    def extract_zip(self, archive: Path, dest_dir: Path) -> None:
        """Unpack a ``.zip`` into *dest_dir*, overwriting existing files."""
        Path(dest_dir).mkdir(parents=True, exist_ok=True)
        result = self._runner.run(["unzip", "-o", "-q", str(archive), "-d", str(dest_dir)])
        if not result.ok:
            raise ExtractionError(str(archive), result.diagnostics)

    def decompress_gzip(self, archive: Path, dest: Path) -> Path:
        """Decompress a single gzip-compressed file (not an archive) to *dest*."""
        result = self._runner.run(["gunzip", "-c", str(archive)])
        if not result.ok:
            raise ExtractionError(str(archive), result.diagnostics)
        dest = Path(dest)
        dest.parent.mkdir(parents=True, exist_ok=True)
        dest.write_bytes(result.stdout)
        return dest

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def make_executable(path: Path) -> None:
        """Set mode 0755 on *path*."""
        Path(path).chmod(_EXECUTABLE_MODE)
