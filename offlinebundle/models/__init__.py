"""offlinebundle data models, all Pydantic v2 and frozen."""

from offlinebundle.models.manifest import Manifest, ManifestComponents, utc_timestamp
from offlinebundle.models.releases import Release, ReleaseAsset
from offlinebundle.models.target import KNOWN_TARGETS, TargetPlatform, get_target
from offlinebundle.models.versioning import VersionPin

__all__ = [
    # manifest
    "Manifest",
    "ManifestComponents",
    "utc_timestamp",
    # releases
    "Release",
    "ReleaseAsset",
    # targets
    "KNOWN_TARGETS",
    "TargetPlatform",
    "get_target",
    # versioning
    "VersionPin",
]
