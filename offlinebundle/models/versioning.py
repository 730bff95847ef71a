"""Version pins: everything the acquisition pipeline does not resolve live."""

from pydantic import BaseModel, ConfigDict


class VersionPin(BaseModel):
    """Records the pinned inputs of an acquisition run.

    Two runs with the same pin produce byte-identical manifest entries for
    the pinned tools; only "latest" resolutions and the timestamp may drift.
    """

    model_config = ConfigDict(frozen=True)

    manifest_schema_version: str = "1.0.0"
    ripgrep_version: str = "14.1.1"
    opentui_version: str = "0.1.74"
    npm_packages: tuple[str, ...] = (
        "pyright",
        "typescript",
        "typescript-language-server",
        "opencode-anthropic-auth@0.0.9",
        "@gitlab/opencode-gitlab-auth@1.3.0",
        "@aws-sdk/credential-providers",
        "@opencode-ai/plugin",
    )
