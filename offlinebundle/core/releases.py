"""Release resolution: find the "latest" tag and pick the platform asset.

"Latest" is the only non-deterministic input to acquisition. It sits
behind ``ReleaseSource`` / ``TagResolver`` so a pinned tag (from config or
a test fixture) makes the rest of the pipeline reproducible.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Protocol

import requests
from pydantic import BaseModel, ConfigDict, ValidationError

from offlinebundle.core.errors import AssetNotFoundError, ReleaseFetchError
from offlinebundle.models.releases import Release, ReleaseAsset

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Asset predicates
# ---------------------------------------------------------------------------


class ExactName(BaseModel):
    """Matches an asset whose filename is exactly ``name``."""

    model_config = ConfigDict(frozen=True)

    name: str

    def matches(self, filename: str) -> bool:
        return filename == self.name

    def describe(self) -> str:
        return f"name == {self.name!r}"


class ContainsAll(BaseModel):
    """Matches filenames containing every marker and ending with ``suffix``.

    Used for artifacts whose filenames embed the release tag, e.g.
    ``clangd-linux-19.1.2.zip``.
    """

    model_config = ConfigDict(frozen=True)

    parts: tuple[str, ...]
    suffix: str = ""

    def matches(self, filename: str) -> bool:
        return all(part in filename for part in self.parts) and filename.endswith(
            self.suffix
        )

    def describe(self) -> str:
        desc = " and ".join(f"contains {p!r}" for p in self.parts)
        if self.suffix:
            desc += f" and endswith {self.suffix!r}"
        return desc


class AssetPredicate(Protocol):
    def matches(self, filename: str) -> bool: ...

    def describe(self) -> str: ...


def select_asset(
    assets: Iterable[ReleaseAsset],
    predicate: AssetPredicate,
    *,
    unique: bool = False,
) -> ReleaseAsset:
    """Return the first asset (in listed order) satisfying *predicate*.

    With ``unique=True`` an ambiguous match is an error as well. A missing
    platform asset is always fatal: the bundle would not run on the target.
    """
    assets = list(assets)
    matched = [a for a in assets if predicate.matches(a.name)]
    if not matched:
        raise AssetNotFoundError(predicate.describe(), [a.name for a in assets])
    if unique and len(matched) > 1:
        raise AssetNotFoundError(
            f"exactly one asset with {predicate.describe()} "
            f"(found {len(matched)}: {', '.join(a.name for a in matched)})"
        )
    return matched[0]


# ---------------------------------------------------------------------------
# Release sources
# ---------------------------------------------------------------------------


class ReleaseSource(Protocol):
    """Fetches release metadata; ``tag=None`` means the latest release."""

    def get_release(self, repo: str, tag: str | None = None) -> Release: ...


class TagResolver(Protocol):
    def resolve_tag(self, repo: str) -> str: ...


class GitHubReleaseSource:
    """Reads releases from the GitHub REST API.

    Parameters
    ----------
    session:
        HTTP session used for API calls.
    api_url:
        API base URL (GitHub Enterprise installs differ).
    token:
        Optional token; raises the unauthenticated rate limit.
    """

    def __init__(
        self,
        session: requests.Session,
        api_url: str = "https://api.github.com",
        token: str = "",
    ) -> None:
        self._session = session
        self._api_url = api_url.rstrip("/")
        self._headers = {"Accept": "application/vnd.github+json"}
        if token:
            self._headers["Authorization"] = f"Bearer {token}"

    def release_url(self, repo: str, tag: str | None = None) -> str:
        if tag is None:
            return f"{self._api_url}/repos/{repo}/releases/latest"
        return f"{self._api_url}/repos/{repo}/releases/tags/{tag}"

    def get_release(self, repo: str, tag: str | None = None) -> Release:
        url = self.release_url(repo, tag)
        logger.debug("Fetching release metadata from %s", url)
        try:
            response = self._session.get(url, headers=self._headers)
        except requests.RequestException as exc:
            raise ReleaseFetchError(repo, str(exc)) from exc
        if not response.ok:
            raise ReleaseFetchError(
                repo,
                f"{response.status_code} {response.reason or ''}".strip(),
                status=response.status_code,
            )
        try:
            return Release.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise ReleaseFetchError(repo, f"malformed release document: {exc}") from exc


class ReleaseResolver:
    """Resolves a repository's release, honouring per-repo tag pins.

    Unpinned repositories resolve to the latest release; pinned ones fetch
    the release for the pinned tag instead.
    """

    def __init__(
        self, source: ReleaseSource, pins: Mapping[str, str | None] | None = None
    ) -> None:
        self._source = source
        self._pins = {repo: tag for repo, tag in (pins or {}).items() if tag}

    def resolve_latest(self, repo: str) -> Release:
        pinned = self._pins.get(repo)
        release = self._source.get_release(repo, pinned)
        logger.info(
            "Resolved %s to %s%s", repo, release.tag_name, " (pinned)" if pinned else ""
        )
        return release

    def resolve_tag(self, repo: str) -> str:
        return self.resolve_latest(repo).tag_name
