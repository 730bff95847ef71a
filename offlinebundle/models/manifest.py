"""Bundle manifest: the provenance record of every bundled component.

Field names are camelCase on disk (the host application reads them) and
snake_case in Python.
"""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field


def utc_timestamp(now: datetime | None = None) -> str:
    """ISO-8601 UTC timestamp with millisecond precision and a ``Z`` suffix."""
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.") + (
        f"{now.microsecond // 1000:03d}Z"
    )


class ManifestComponents(BaseModel):
    """Resolved version of every bundled dependency.

    Component keys written by newer tooling are kept as extras.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="allow")

    ripgrep: str
    clangd: str
    rust_analyzer: str = Field(alias="rustAnalyzer")
    npm_packages: dict[str, str] = Field(default_factory=dict, alias="npmPackages")


_RELEASE_INFO_FIELDS = ("bundle_version", "commit_sha")


class Manifest(BaseModel):
    """The manifest written to ``<deps>/manifest.json`` and the bundle root.

    Unknown top-level keys are kept so a manifest survives a read/write
    round trip unchanged.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="allow")

    version: str
    created: str
    platform: str
    arch: str
    components: ManifestComponents
    bundle_version: str | None = Field(default=None, alias="bundleVersion")
    commit_sha: str | None = Field(default=None, alias="commitSha")

    def to_json_dict(self) -> dict:
        """Wire form: camelCase keys, unset release info omitted.

        Only ``bundleVersion`` and ``commitSha`` are dropped when ``None``;
        every other key, extras included, is written as loaded.
        """
        unset = {name for name in _RELEASE_INFO_FIELDS if getattr(self, name) is None}
        return self.model_dump(mode="json", by_alias=True, exclude=unset)
