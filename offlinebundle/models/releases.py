"""Hosted release metadata, as returned by the GitHub releases API."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ReleaseAsset(BaseModel):
    """A single downloadable file attached to a release."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str
    browser_download_url: str


class Release(BaseModel):
    """A release tag and its assets. Unknown API fields are ignored."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    tag_name: str = Field(min_length=1)
    assets: list[ReleaseAsset] = []
