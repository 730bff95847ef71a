"""Tests for the Manifest model and ManifestGenerator."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path

import pytest
from pydantic import ValidationError

from offlinebundle.core.errors import PreconditionError
from offlinebundle.core.manifest import (
    ManifestGenerator,
    build_manifest,
    inject_release_info,
    load_manifest,
    write_manifest,
)
from offlinebundle.models.manifest import Manifest, utc_timestamp


def _manifest(target, **overrides) -> Manifest:
    kwargs = dict(
        ripgrep="14.1.1",
        clangd="19.1.2",
        rust_analyzer="2026-10-13",
        npm_packages={"pyright": "1.1.407", "@opencode-ai/plugin": "0.15.3"},
        target=target,
        created="2026-10-19T08:00:00.000Z",
    )
    kwargs.update(overrides)
    return build_manifest(**kwargs)


class TestManifestModel:
    def test_wire_keys_are_camel_case(self, linux_x64):
        data = _manifest(linux_x64).to_json_dict()
        assert data == {
            "version": "1.0.0",
            "created": "2026-10-19T08:00:00.000Z",
            "platform": "linux",
            "arch": "x64",
            "components": {
                "ripgrep": "14.1.1",
                "clangd": "19.1.2",
                "rustAnalyzer": "2026-10-13",
                "npmPackages": {"pyright": "1.1.407", "@opencode-ai/plugin": "0.15.3"},
            },
        }

    def test_release_info_omitted_when_absent(self, linux_x64):
        data = _manifest(linux_x64).to_json_dict()
        assert "bundleVersion" not in data
        assert "commitSha" not in data

    def test_utc_timestamp_format(self):
        stamp = utc_timestamp(datetime(2026, 10, 19, 8, 1, 2, 345678, tzinfo=timezone.utc))
        assert stamp == "2026-10-19T08:01:02.345Z"

    def test_created_defaults_to_now(self, linux_x64):
        manifest = _manifest(linux_x64, created=None)
        assert manifest.created.endswith("Z")
        assert manifest.created.startswith(str(datetime.now(timezone.utc).year))

    def test_manifest_is_frozen(self, linux_x64):
        manifest = _manifest(linux_x64)
        with pytest.raises(ValidationError):
            manifest.platform = "darwin"


class TestManifestPersistence:
    def test_round_trip_preserves_every_field(self, tmp_path: Path, linux_x64):
        original = _manifest(linux_x64)
        path = write_manifest(original, tmp_path / "manifest.json")
        loaded = load_manifest(path)
        assert loaded == original
        assert loaded.to_json_dict() == original.to_json_dict()

    def test_written_json_is_indented(self, tmp_path: Path, linux_x64):
        path = write_manifest(_manifest(linux_x64), tmp_path / "manifest.json")
        assert path.read_text().startswith('{\n  "version": "1.0.0"')

    def test_unknown_keys_survive_round_trip(self, tmp_path: Path, linux_x64):
        data = _manifest(linux_x64).to_json_dict()
        data["builder"] = "ci-runner-7"
        path = tmp_path / "manifest.json"
        path.write_text(json.dumps(data))
        rewritten = write_manifest(load_manifest(path), tmp_path / "copy.json")
        assert json.loads(rewritten.read_text())["builder"] == "ci-runner-7"

    def test_null_extra_key_survives_round_trip(self, tmp_path: Path, linux_x64):
        data = _manifest(linux_x64).to_json_dict()
        data["notes"] = None
        path = tmp_path / "manifest.json"
        path.write_text(json.dumps(data))
        rewritten = write_manifest(load_manifest(path), tmp_path / "copy.json")
        assert json.loads(rewritten.read_text()) == data

    def test_unknown_component_survives_round_trip(self, tmp_path: Path, linux_x64):
        data = _manifest(linux_x64).to_json_dict()
        data["components"]["gopls"] = "v0.16.2"
        path = tmp_path / "manifest.json"
        path.write_text(json.dumps(data))
        rewritten = write_manifest(load_manifest(path), tmp_path / "copy.json")
        assert json.loads(rewritten.read_text())["components"] == data["components"]

    def test_missing_created_is_rejected(self, tmp_path: Path, linux_x64):
        data = _manifest(linux_x64).to_json_dict()
        del data["created"]
        path = tmp_path / "manifest.json"
        path.write_text(json.dumps(data))
        with pytest.raises(ValidationError, match="created"):
            load_manifest(path)

    def test_load_missing_is_precondition_error(self, tmp_path: Path):
        with pytest.raises(PreconditionError):
            load_manifest(tmp_path / "nope.json")


class TestInjectReleaseInfo:
    def test_adds_fields_without_touching_others(self, linux_x64):
        original = _manifest(linux_x64)
        injected = inject_release_info(original, "1.4.0", "deadbeef")
        data = injected.to_json_dict()
        assert data.pop("bundleVersion") == "1.4.0"
        assert data.pop("commitSha") == "deadbeef"
        assert data == original.to_json_dict()

    def test_only_version(self, linux_x64):
        data = inject_release_info(_manifest(linux_x64), "1.4.0").to_json_dict()
        assert data["bundleVersion"] == "1.4.0"
        assert "commitSha" not in data

    def test_nothing_supplied_returns_same(self, linux_x64):
        original = _manifest(linux_x64)
        assert inject_release_info(original) is original

    def test_injected_manifest_round_trips(self, tmp_path: Path, linux_x64):
        injected = inject_release_info(_manifest(linux_x64), "1.4.0", "deadbeef")
        loaded = load_manifest(write_manifest(injected, tmp_path / "m.json"))
        assert loaded.bundle_version == "1.4.0"
        assert loaded.commit_sha == "deadbeef"


class TestManifestGenerator:
    def test_refuses_incomplete_root(self, tmp_path: Path, linux_x64):
        (tmp_path / "ripgrep").mkdir()
        (tmp_path / "ripgrep" / "rg").write_bytes(b"")
        generator = ManifestGenerator(tmp_path, linux_x64)
        with pytest.raises(PreconditionError, match="clangd"):
            generator.generate(ripgrep="1", clangd="2", rust_analyzer="3", npm_packages={})
        assert not generator.manifest_path.exists()

    def test_writes_manifest_for_complete_root(self, tmp_path: Path, linux_x64, make_deps_root):
        root = make_deps_root(tmp_path / "deps")
        (root / "manifest.json").unlink()
        manifest = ManifestGenerator(root, linux_x64).generate(
            ripgrep="14.1.1", clangd="19.1.2", rust_analyzer="2026-10-13",
            npm_packages={"pyright": "1.1.407"},
        )
        assert load_manifest(root / "manifest.json") == manifest
        assert manifest.components.npm_packages == {"pyright": "1.1.407"}
